# bizboost/schemas/deal.py
"""
Pydantic schemas for deal endpoints.
Dates are accepted as ISO strings (YYYY-MM-DD) and parsed in the router.
"""
from typing import Optional
from pydantic import BaseModel, Field


class DealIn(BaseModel):
    businessId: int
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    discountAmount: Optional[str] = None
    startDate: str
    endDate: str


class DealUpdateIn(BaseModel):
    """Partial update; ``active`` keeps its current value when omitted."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    discountAmount: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    active: Optional[bool] = None
