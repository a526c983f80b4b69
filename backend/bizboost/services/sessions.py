"""
Session Service

Creates, resolves and deletes login sessions stored in the `sessions` table.

- Session ids are opaque random tokens; the cookie is only a lookup key.
- Expiry is fixed at creation and never extended on access.
- Resolution filters on expiry, so an expired row never authenticates even
  before the sweeper deletes it.
- Storage errors propagate to the caller; they are not treated as "anonymous".
"""
import datetime as dt
import logging
from typing import Optional

from bizboost.config import settings
from bizboost.core.security import new_token, utc_now
from bizboost.models.session import Session
from bizboost.models.user import User
from bizboost.schemas.auth import Identity

logger = logging.getLogger("uvicorn.error")

MAX_SESSION_ID_LENGTH = 64  # Matches Session.id max_length


async def create_session(user: User, ttl: Optional[dt.timedelta] = None) -> Session:
    """
    Create a new session for a user. Existing sessions of the user are left untouched
    (one user may be logged in on several devices).
    """
    ttl = ttl if ttl is not None else dt.timedelta(days=settings.session_ttl_days)
    return await Session.create(id=new_token(), user=user, expires_at=utc_now() + ttl)


def identity_from_user(user: User, session_id: str) -> Identity:
    return Identity(
        id=str(user.id),
        email=user.email,
        username=user.username,
        role=user.role,
        session_id=session_id,
    )


async def resolve_session(session_id: Optional[str]) -> Optional[Identity]:
    """
    Resolve a cookie value to the identity of its (unexpired) session.

    Returns None for a missing, malformed, unknown or expired session id.
    """
    if not session_id or len(session_id) > MAX_SESSION_ID_LENGTH:
        return None
    session = await (
        Session.filter(id=session_id, expires_at__gt=utc_now())
        .select_related("user")
        .first()
    )
    if session is None:
        return None
    return identity_from_user(session.user, session.id)


async def delete_session(session_id: str) -> bool:
    """Delete exactly one session; returns whether a row was removed."""
    deleted = await Session.filter(id=session_id).delete()
    return deleted > 0


async def sweep_expired_sessions() -> int:
    """Delete every session whose expiry has passed; returns the number removed."""
    removed = await Session.filter(expires_at__lt=utc_now()).delete()
    if removed:
        logger.info("[sessions] swept %d expired sessions", removed)
    return removed
