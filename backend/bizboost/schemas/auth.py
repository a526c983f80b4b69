# bizboost/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request models for signup/login and the resolved request identity.
"""
from typing import Any, Optional
from pydantic import BaseModel


class Identity(BaseModel):
    """
    The authenticated principal of a request.

    Returned by the auth dependencies and passed explicitly to handlers;
    nothing is attached to the request object.
    """
    id: str  # User id (UUID string)
    email: str
    username: str
    role: str  # "user", "business_owner" or "admin"
    session_id: str  # Session that authenticated this request (needed by logout)

    def public(self) -> dict:
        """User fields safe to return to the client (no session id)."""
        return {"id": self.id, "email": self.email, "username": self.username, "role": self.role}


class SignupIn(BaseModel):
    """
    Request model for account creation.
    Fields are optional at the schema level so that missing values produce the
    route's own 400 message instead of a generic validation error.
    """
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None  # Defaults to "user"; "business_owner" also allowed
    captchaId: Optional[str] = None
    captchaAnswer: Any = None  # Normalized by the captcha service, not here


class LoginIn(BaseModel):
    """Credentials for login (email + password)."""
    email: Optional[str] = None
    password: Optional[str] = None

