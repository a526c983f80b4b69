# bizboost/api/routers/reviews.py
import logging
import math
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bizboost.api.deps import check_captcha, require_auth
from bizboost.core.security import can_manage
from bizboost.models.business import Business
from bizboost.models.review import Review
from bizboost.schemas.auth import Identity
from bizboost.schemas.review import ReviewIn, ReviewUpdateIn
from bizboost.services import ratings
from bizboost.services.captcha import captcha_service

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/reviews", tags=["reviews"])

MIN_REVIEW_LENGTH = 20
MAX_REVIEW_LENGTH = 1000

NOT_FOUND = {"code": "NOT_FOUND", "message": "Review not found"}


def _bad_request(code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"code": code, "message": message})


def _validate_review(rating: int, title: str, review_text: str) -> None:
    if not 1 <= rating <= 5:
        raise _bad_request("INVALID_RATING", "Rating must be between 1 and 5")
    if not title.strip():
        raise _bad_request("BAD_REQUEST", "Title is required")
    if len(review_text) < MIN_REVIEW_LENGTH:
        raise _bad_request("REVIEW_TOO_SHORT", f"Review must be at least {MIN_REVIEW_LENGTH} characters")
    if len(review_text) > MAX_REVIEW_LENGTH:
        raise _bad_request("REVIEW_TOO_LONG", f"Review must be less than {MAX_REVIEW_LENGTH} characters")


def review_to_dict(r: Review, with_user: bool = False, with_business: bool = False) -> dict:
    d = {
        "id": r.id,
        "businessId": r.business_id,
        "userId": str(r.user_id),
        "rating": r.rating,
        "title": r.title,
        "reviewText": r.review_text,
        "createdAt": r.created_at.isoformat() if r.created_at else None,
        "updatedAt": r.updated_at.isoformat() if r.updated_at else None,
    }
    if with_user:
        d["username"] = r.user.username
    if with_business:
        d["businessName"] = r.business.name
    return d


async def _get_review_or_404(review_id: int) -> Review:
    r = await Review.get_or_none(id=review_id)
    if not r:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return r


@router.get("/captcha/generate")
async def generate_review_captcha(identity: Identity = Depends(require_auth)):
    """Issue a captcha to be submitted with POST /reviews."""
    return {"success": True, "data": captcha_service.generate().to_dict()}


@router.get("/business/{business_id}")
async def list_business_reviews(
    business_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """Reviews of a business, newest first, with the reviewer's username."""
    qs = Review.filter(business_id=business_id)
    total = await qs.count()
    rows = await qs.select_related("user").order_by("-created_at", "-id").offset((page - 1) * limit).limit(limit)
    return {
        "success": True,
        "data": {
            "items": [review_to_dict(r, with_user=True) for r in rows],
            "pagination": {"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit)},
        },
    }


@router.get("/user/{user_id}")
async def list_user_reviews(user_id: uuid.UUID):
    rows = await Review.filter(user_id=user_id).select_related("business").order_by("-created_at", "-id")
    return {"success": True, "data": {"items": [review_to_dict(r, with_business=True) for r in rows]}}


@router.get("/my/reviews")
async def my_reviews(identity: Identity = Depends(require_auth)):
    rows = await Review.filter(user_id=identity.id).select_related("business").order_by("-created_at", "-id")
    return {"success": True, "data": {"items": [review_to_dict(r, with_business=True) for r in rows]}}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_review(body: ReviewIn, identity: Identity = Depends(require_auth)):
    """
    Submit a review (requires a session and a solved captcha).

    The captcha is checked first: a failed captcha rejects the request with 400
    before anything is written. The review insert and the business's rating
    aggregates are committed in one transaction.

    Error codes:
        400: CAPTCHA_REQUIRED, CAPTCHA_INVALID, INVALID_RATING, REVIEW_TOO_SHORT,
             REVIEW_TOO_LONG, REVIEW_EXISTS
        404: NOT_FOUND (business)
    """
    check_captcha(body.captchaId, body.captchaAnswer)
    _validate_review(body.rating, body.title, body.reviewText)

    if not await Business.filter(id=body.businessId).exists():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "NOT_FOUND", "message": "Business not found"},
        )
    if await Review.filter(business_id=body.businessId, user_id=identity.id).exists():
        raise _bad_request("REVIEW_EXISTS", "You have already reviewed this business")

    review = await ratings.add_review(
        business_id=body.businessId,
        user_id=identity.id,
        rating=body.rating,
        title=body.title.strip(),
        review_text=body.reviewText,
    )
    logger.info("[reviews] created id=%s business=%s user=%s", review.id, body.businessId, identity.id)
    return {"success": True, "data": {"reviewId": review.id, "message": "Review submitted successfully"}}


@router.put("/{review_id}")
async def update_review(review_id: int, body: ReviewUpdateIn, identity: Identity = Depends(require_auth)):
    """Edit one's own review; the business aggregates are recomputed."""
    review = await _get_review_or_404(review_id)
    if str(review.user_id) != identity.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "FORBIDDEN", "message": "Not authorized to update this review"},
        )
    _validate_review(body.rating, body.title, body.reviewText)
    await ratings.update_review(review, body.rating, body.title.strip(), body.reviewText)
    return {"success": True, "data": {"message": "Review updated successfully"}}


@router.delete("/{review_id}")
async def delete_review(review_id: int, identity: Identity = Depends(require_auth)):
    """Delete a review (author or admin); the business aggregates are recomputed."""
    review = await _get_review_or_404(review_id)
    if not can_manage(identity, review.user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "FORBIDDEN", "message": "Not authorized to delete this review"},
        )
    await ratings.remove_review(review)
    logger.info("[reviews] deleted id=%s by=%s", review_id, identity.id)
    return {"success": True, "data": {"message": "Review deleted successfully"}}
