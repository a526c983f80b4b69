# bizboost/models/session.py
"""
Database model for login sessions.
The primary key is the opaque token handed to the browser in the session cookie.
"""
from tortoise import fields, models


class Session(models.Model):
    """
    A server-side record proving a user has authenticated.

    - id: opaque token (also the cookie value); never derived from user data
    - expires_at: fixed at creation, never extended on access
    A session authenticates only while expires_at is in the future; expired rows
    are removed by the sweeper but are already inert before that.
    """
    id = fields.CharField(pk=True, max_length=64)
    user = fields.ForeignKeyField(
        "models.User",
        related_name="sessions",
        on_delete=fields.CASCADE,
    )  # Deleting a user deletes all of their sessions
    created_at = fields.DatetimeField(auto_now_add=True)
    expires_at = fields.DatetimeField(index=True)

    class Meta:
        table = "sessions"
