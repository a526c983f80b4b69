# bizboost/core/security.py
"""
Security module for authentication and authorization.
Handles password hashing, opaque token generation, and the single role policy
used by every route that needs an authorization decision.
"""
import datetime as dt
import secrets
from passlib.context import CryptContext

# Password hashing context
# Argon2 is a modern, secure password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

# Roles known to the system; admin passes every role check
ROLE_USER = "user"
ROLE_BUSINESS_OWNER = "business_owner"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_BUSINESS_OWNER, ROLE_ADMIN)
SELF_SERVICE_ROLES = (ROLE_USER, ROLE_BUSINESS_OWNER)  # Roles allowed at signup

TOKEN_BYTES = 32  # ~43 url-safe characters


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain, hashed)


def new_token() -> str:
    """
    Generate an opaque, unguessable identifier.

    Used for session ids (cookie value) and captcha ids. The value carries no data;
    it is only ever a lookup key on the server side.
    """
    return secrets.token_urlsafe(TOKEN_BYTES)


def utc_now() -> dt.datetime:
    """Current UTC datetime with timezone information."""
    return dt.datetime.now(dt.timezone.utc)


def is_authorized(identity, *roles: str) -> bool:
    """
    Decide whether an identity holds one of the given roles.

    This is the only role policy in the application:
      - no identity is never authorized
      - admin satisfies any role check
      - otherwise the identity's role must be listed
    An empty ``roles`` means "any authenticated identity".
    """
    if identity is None:
        return False
    if identity.role == ROLE_ADMIN:
        return True
    if not roles:
        return True
    return identity.role in roles


def can_manage(identity, owner_id) -> bool:
    """
    Ownership check for resources that belong to a user (business, deal, review).
    The owner or an admin may manage the resource.
    """
    if identity is None:
        return False
    if identity.role == ROLE_ADMIN:
        return True
    return owner_id is not None and str(owner_id) == str(identity.id)
