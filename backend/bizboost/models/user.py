# bizboost/models/user.py
"""
Database model for users.
Represents an account in the directory: shoppers who review and bookmark,
business owners who list businesses and post deals, and administrators.
"""
import uuid
from tortoise import fields, models


class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many Sessions (one-to-many, cascade on delete)
    - Has many Reviews and Bookmarks (cascade on delete)
    - Owns Businesses (set null on delete)

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Email and username are both unique
    - Role determines access level (user / business_owner / admin)
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    email = fields.CharField(max_length=256, unique=True, index=True)  # Login identifier, stored lower-cased
    username = fields.CharField(max_length=64, unique=True, index=True)
    password_hash = fields.CharField(max_length=255)
    role = fields.CharField(max_length=16, default="user")  # "user", "business_owner" or "admin"
    created_at = fields.DatetimeField(auto_now_add=True)
    last_login_at = fields.DatetimeField(null=True)  # Updated on every successful login

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"

    def __str__(self) -> str:
        return self.username
