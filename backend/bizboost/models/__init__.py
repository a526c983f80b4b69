# bizboost/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports throughout the application.

Models exported:
- User: Account and authentication model
- Session: Server-side login session (opaque cookie token)
- Business: Business listing with denormalized rating aggregates
- Review: Rating and text left by a user for a business
- Deal: Time-boxed offer posted by a business owner
- Bookmark: A user's saved business
"""
from .user import User
from .session import Session
from .business import Business
from .review import Review
from .deal import Deal
from .bookmark import Bookmark
