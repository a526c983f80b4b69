"""
Fixed-window rate limiter on top of the KeyValueStore.
Two scopes: a general per-address budget for every /api route and a
tighter one for signup/login attempts.
"""
from bizboost.config import settings
from .kv_base import KeyValueStore
from .kv_factory import kv_store


class RateLimiter:
    KEY_PREFIX = "ratelimit:"

    def __init__(self, store: KeyValueStore, scope: str, max_hits: int, window_seconds: float):
        self.store = store
        self.scope = scope
        self.max_hits = max_hits
        self.window_seconds = window_seconds

    def hit(self, client_key: str) -> bool:
        """Record one attempt; returns False once the window's budget is spent"""
        if self.max_hits <= 0:
            return True
        count = self.store.incr(f"{self.KEY_PREFIX}{self.scope}:{client_key}", self.window_seconds)
        return count <= self.max_hits


auth_rate_limiter = RateLimiter(
    kv_store,
    scope="auth",
    max_hits=settings.auth_rate_limit_max,
    window_seconds=settings.auth_rate_limit_window_seconds,
)

general_rate_limiter = RateLimiter(
    kv_store,
    scope="api",
    max_hits=settings.api_rate_limit_max,
    window_seconds=settings.api_rate_limit_window_seconds,
)
