# bizboost/schemas/business.py
"""
Pydantic schemas for business listing endpoints.
"""
from typing import Optional
from pydantic import BaseModel, Field


class BusinessIn(BaseModel):
    """Request model for creating a business (business owners only)."""
    name: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=64)
    address: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=64)
    zip_code: str = Field(min_length=1, max_length=16)
    description: str = Field(min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    image_url: Optional[str] = None  # Plain URL; uploads are not handled by this API
    products: Optional[str] = None


class BusinessUpdateIn(BaseModel):
    """Partial update; only provided fields are changed."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[str] = Field(default=None, min_length=1, max_length=64)
    address: Optional[str] = Field(default=None, min_length=1, max_length=255)
    city: Optional[str] = Field(default=None, min_length=1, max_length=100)
    state: Optional[str] = Field(default=None, min_length=1, max_length=64)
    zip_code: Optional[str] = Field(default=None, min_length=1, max_length=16)
    description: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    image_url: Optional[str] = None
    products: Optional[str] = None
