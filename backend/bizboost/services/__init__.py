"""
Services Module

Domain services used by the API routers:
- Key-value store with TTL (in-process backend) for short-lived state
- Captcha issuing and one-time verification
- Login session lifecycle
- Auth rate limiting
- Business rating aggregates (transactional review writes)
- Background sweepers for expired sessions and captchas
"""

from .kv_base import KeyValueStore, StoredValue
from .kv_factory import get_kv_store, kv_store
from .kv_memory import MemoryKeyValueStore

from .captcha import CaptchaChallenge, CaptchaResult, CaptchaService, captcha_service

from .sessions import (
    create_session,
    delete_session,
    resolve_session,
    sweep_expired_sessions,
)

from .ratelimit import RateLimiter, auth_rate_limiter, general_rate_limiter

__all__ = [
    "KeyValueStore",
    "StoredValue",
    "MemoryKeyValueStore",
    "get_kv_store",
    "kv_store",
    "CaptchaChallenge",
    "CaptchaResult",
    "CaptchaService",
    "captcha_service",
    "create_session",
    "delete_session",
    "resolve_session",
    "sweep_expired_sessions",
    "RateLimiter",
    "auth_rate_limiter",
    "general_rate_limiter",
]
