# bizboost/api/routers/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from bizboost.api.deps import auth_rate_limit, check_captcha, require_auth
from bizboost.config import settings
from bizboost.core.security import (
    ROLE_USER,
    SELF_SERVICE_ROLES,
    hash_password,
    utc_now,
    verify_password,
)
from bizboost.models.user import User
from bizboost.schemas.auth import Identity, LoginIn, SignupIn
from bizboost.services.captcha import captcha_service
from bizboost.services.sessions import create_session, delete_session

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/auth", tags=["auth"])


def _bad_request(code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"code": code, "message": message})


def _user_to_dict(u: User) -> dict:
    return {"id": str(u.id), "email": u.email, "username": u.username, "role": u.role}


def _set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        session_id,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="strict",
        secure=settings.cookie_secure,
    )


@router.get("/captcha/generate")
async def generate_signup_captcha():
    """
    Issue a captcha for the signup form.

    Public on purpose: the caller has no account yet. The answer stays on the
    server; the challenge expires after settings.captcha_ttl_seconds.

    Returns:
        dict: {"success": True, "data": {"captchaId": str, "question": str}}
    """
    return {"success": True, "data": captcha_service.generate().to_dict()}


@router.post("/signup", status_code=status.HTTP_201_CREATED, dependencies=[Depends(auth_rate_limit)])
async def signup(body: SignupIn, response: Response):
    """
    Create an account and log it in.

    The captcha (when required) is consumed before any other check so a
    rejected signup can never be retried with the same challenge.

    Returns:
        201 with {"success": True, "data": {"user": {...}}} and the session cookie.

    Error codes (400):
        CAPTCHA_REQUIRED / CAPTCHA_INVALID, BAD_REQUEST (missing fields),
        WEAK_PASSWORD, INVALID_ROLE, EMAIL_EXISTS, USERNAME_EXISTS
    """
    if settings.signup_captcha_required:
        check_captcha(body.captchaId, body.captchaAnswer)

    email = (body.email or "").strip().lower()
    username = (body.username or "").strip()
    if not email or not username or not body.password:
        raise _bad_request("BAD_REQUEST", "Email, username, and password are required")
    if len(body.password) < settings.min_password_length:
        raise _bad_request("WEAK_PASSWORD", f"Password must be at least {settings.min_password_length} characters")

    role = body.role or ROLE_USER
    if role not in SELF_SERVICE_ROLES:
        raise _bad_request("INVALID_ROLE", "Invalid role")

    if await User.filter(email=email).exists():
        raise _bad_request("EMAIL_EXISTS", "Email already registered")
    if await User.filter(username=username).exists():
        raise _bad_request("USERNAME_EXISTS", "Username already taken")

    user = await User.create(
        email=email,
        username=username,
        password_hash=hash_password(body.password),
        role=role,
    )
    session = await create_session(user)
    _set_session_cookie(response, session.id)
    logger.info("[auth] signup user=%s role=%s", user.id, user.role)
    return {"success": True, "data": {"user": _user_to_dict(user)}}


@router.post("/login", dependencies=[Depends(auth_rate_limit)])
async def login(body: LoginIn, response: Response):
    """
    Authenticate with email and password and open a new session.

    Each login creates a new session; sessions opened on other devices stay valid.

    Raises:
        HTTPException (400): Missing email or password
        HTTPException (401): Unknown email or wrong password (same message for both)
    """
    email = (body.email or "").strip().lower()
    if not email or not body.password:
        raise _bad_request("BAD_REQUEST", "Email and password are required")

    user = await User.get_or_none(email=email)
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "AUTH_INVALID_CREDENTIALS", "message": "Invalid email or password"},
        )

    user.last_login_at = utc_now()
    await user.save(update_fields=["last_login_at"])
    session = await create_session(user)
    _set_session_cookie(response, session.id)
    logger.info("[auth] login user=%s", user.id)
    return {"success": True, "data": {"user": _user_to_dict(user)}}


@router.post("/logout")
async def logout(response: Response, identity: Identity = Depends(require_auth)):
    """
    Delete the session that authenticated this request and clear the cookie.
    Other sessions of the same user are not affected.
    """
    await delete_session(identity.session_id)
    response.delete_cookie(
        settings.session_cookie_name,
        httponly=True,
        samesite="strict",
        secure=settings.cookie_secure,
    )
    logger.info("[auth] logout user=%s", identity.id)
    return {"success": True, "data": {"message": "Logged out successfully"}}


@router.get("/me")
async def me(identity: Identity = Depends(require_auth)):
    """Return the user behind the current session."""
    return {"success": True, "data": {"user": identity.public()}}
