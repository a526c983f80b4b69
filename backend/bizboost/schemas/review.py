# bizboost/schemas/review.py
"""
Pydantic schemas for review endpoints.
Review text length and rating range are checked in the router so that the
error messages match the rest of the API.
"""
from typing import Any, Optional
from pydantic import BaseModel


class ReviewIn(BaseModel):
    """
    Request model for submitting a review.
    captchaId/captchaAnswer come from GET /api/reviews/captcha/generate.
    """
    businessId: int
    rating: int
    title: str
    reviewText: str
    captchaId: Optional[str] = None
    captchaAnswer: Any = None  # Normalized by the captcha service, not here


class ReviewUpdateIn(BaseModel):
    rating: int
    title: str
    reviewText: str
