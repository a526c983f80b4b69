"""
Background sweepers.

Periodic garbage collection of expired sessions (database) and expired
entries in the key-value store (captcha challenges and rate-limit counters).
Authentication and captcha checks already ignore expired records, so a delayed
or missed sweep only costs storage, never correctness.
"""
import asyncio
import logging
from typing import Awaitable, Callable, List

from bizboost.config import settings
from .kv_factory import kv_store
from .sessions import sweep_expired_sessions

logger = logging.getLogger("uvicorn.error")


async def _run_periodically(name: str, interval: float, job: Callable[[], Awaitable[int]]) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            await job()
        except asyncio.CancelledError:
            raise
        except Exception:
            # A failed pass is retried on the next tick
            logger.exception("[sweeper] %s pass failed", name)


async def sweep_kv_store() -> int:
    """Drop every expired key-value entry, whatever its namespace."""
    removed = kv_store.sweep()
    if removed:
        logger.info("[kv] swept %d expired entries", removed)
    return removed


async def session_sweeper_loop() -> None:
    await _run_periodically("sessions", settings.session_sweep_interval_seconds, sweep_expired_sessions)


async def kv_sweeper_loop() -> None:
    await _run_periodically("kv", settings.captcha_sweep_interval_seconds, sweep_kv_store)


def start_sweepers() -> List[asyncio.Task]:
    """Start both sweepers on the running loop; the caller cancels them on shutdown."""
    return [
        asyncio.create_task(session_sweeper_loop(), name="session-sweeper"),
        asyncio.create_task(kv_sweeper_loop(), name="kv-sweeper"),
    ]


async def stop_sweepers(tasks: List[asyncio.Task]) -> None:
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
