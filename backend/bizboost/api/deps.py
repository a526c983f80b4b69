# bizboost/api/deps.py
from typing import Any, Optional

from fastapi import Depends, HTTPException, Request, status

from bizboost.config import settings
from bizboost.core.security import is_authorized
from bizboost.schemas.auth import Identity
from bizboost.services.captcha import captcha_service
from bizboost.services.ratelimit import auth_rate_limiter, general_rate_limiter
from bizboost.services.sessions import resolve_session

AUTH_REQUIRED = {"code": "AUTH_REQUIRED", "message": "Not authenticated"}


def session_cookie(request: Request) -> Optional[str]:
    """Raw value of the session cookie (None when absent)."""
    return request.cookies.get(settings.session_cookie_name)


async def optional_auth(request: Request) -> Optional[Identity]:
    """
    FastAPI dependency that resolves the session cookie if there is one.

    Never rejects: a missing, malformed, unknown or expired session yields None
    and the handler proceeds anonymously. Storage errors are not swallowed.

    Usage:
        @router.get("/businesses")
        async def list_businesses(identity: Identity | None = Depends(optional_auth)):
            ...
    """
    return await resolve_session(session_cookie(request))


async def require_auth(identity: Optional[Identity] = Depends(optional_auth)) -> Identity:
    """
    FastAPI dependency that requires an authenticated session.

    Returns:
        Identity: The resolved principal, passed explicitly to the handler

    Raises:
        HTTPException (401): No cookie, unknown session or expired session.
            The three cases are reported identically.
    """
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=AUTH_REQUIRED)
    return identity


def require_role(*roles: str):
    """
    Build a dependency that requires one of ``roles`` (admin always passes).

    Usage:
        @router.post("/deals")
        async def create_deal(identity: Identity = Depends(require_role("business_owner"))):
            ...
    """
    async def _require_role(identity: Identity = Depends(require_auth)) -> Identity:
        if not is_authorized(identity, *roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"code": "FORBIDDEN", "message": f"Requires role: {' or '.join(roles) or 'any'}"},
            )
        return identity

    return _require_role


def check_captcha(captcha_id: Optional[str], captcha_answer: Any) -> None:
    """
    Consume and verify a captcha before a protected write.

    Raises:
        HTTPException (400): CAPTCHA_REQUIRED when id or answer is missing,
            CAPTCHA_INVALID when verification fails (the challenge is gone either way).
    """
    if not captcha_id or captcha_answer is None or captcha_answer == "":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "CAPTCHA_REQUIRED", "message": "Captcha is required"},
        )
    result = captcha_service.validate(captcha_id, captcha_answer)
    if not result.valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "CAPTCHA_INVALID", "message": result.error},
        )


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def api_rate_limit(request: Request) -> None:
    """Per-address limit applied to every /api route."""
    if not general_rate_limiter.hit(client_address(request)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"code": "RATE_LIMITED", "message": "Too many requests, please try again later"},
        )


async def auth_rate_limit(request: Request) -> None:
    """Per-address limit for signup/login attempts."""
    if not auth_rate_limiter.hit(client_address(request)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"code": "RATE_LIMITED", "message": "Too many authentication attempts, please try again later"},
        )
