# bizboost/api/routers/businesses.py
import logging
import math

from fastapi import APIRouter, Depends, HTTPException, Query, status
from tortoise.expressions import Q

from bizboost.api.deps import optional_auth, require_auth, require_role
from bizboost.core.security import ROLE_BUSINESS_OWNER, can_manage
from bizboost.models.bookmark import Bookmark
from bizboost.models.business import Business
from bizboost.schemas.auth import Identity
from bizboost.schemas.business import BusinessIn, BusinessUpdateIn

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/businesses", tags=["businesses"])

NOT_FOUND = {"code": "NOT_FOUND", "message": "Business not found"}
NULLABLE_FIELDS = {"phone", "email", "website", "image_url", "products"}  # May be cleared with null


def business_to_dict(b: Business) -> dict:
    return {
        "id": b.id,
        "ownerId": str(b.owner_id) if b.owner_id else None,
        "name": b.name,
        "category": b.category,
        "address": b.address,
        "city": b.city,
        "state": b.state,
        "zipCode": b.zip_code,
        "phone": b.phone,
        "email": b.email,
        "website": b.website,
        "description": b.description,
        "imageUrl": b.image_url,
        "products": b.products,
        "verified": b.verified,
        "averageRating": b.average_rating,
        "reviewCount": b.review_count,
        "createdAt": b.created_at.isoformat() if b.created_at else None,
        "updatedAt": b.updated_at.isoformat() if b.updated_at else None,
    }


async def get_business_or_404(business_id: int) -> Business:
    b = await Business.get_or_none(id=business_id)
    if not b:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return b


@router.get("")
async def list_businesses(
    search: str | None = Query(default=None, description="Matches name, description or category"),
    category: str | None = None,
    city: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    identity: Identity | None = Depends(optional_auth),
):
    """
    Browse and search businesses, best rated first.

    Anonymous browsing is allowed; an authenticated caller gets the same list.

    Returns:
        dict: {"success": True, "data": {"items": [...], "pagination": {...}}}
    """
    qs = Business.all()
    if search:
        qs = qs.filter(
            Q(name__icontains=search) | Q(description__icontains=search) | Q(category__icontains=search)
        )
    if category:
        qs = qs.filter(category=category)
    if city:
        qs = qs.filter(city=city)

    total = await qs.count()
    rows = await qs.order_by("-average_rating", "-review_count", "name").offset((page - 1) * limit).limit(limit)
    return {
        "success": True,
        "data": {
            "items": [business_to_dict(b) for b in rows],
            "pagination": {"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit)},
        },
    }


@router.get("/meta/categories")
async def list_categories():
    """Distinct business categories in alphabetical order."""
    categories = await Business.all().distinct().order_by("category").values_list("category", flat=True)
    return {"success": True, "data": {"categories": list(categories)}}


@router.get("/my/business")
async def my_business(identity: Identity = Depends(require_auth)):
    """The business owned by the caller, or null."""
    b = await Business.get_or_none(owner_id=identity.id)
    return {"success": True, "data": {"business": business_to_dict(b) if b else None}}


@router.get("/{business_id}")
async def get_business(business_id: int, identity: Identity | None = Depends(optional_auth)):
    """
    Business detail. For a logged-in caller the response also says whether
    the business is in their bookmarks.
    """
    b = await get_business_or_404(business_id)
    data = business_to_dict(b)
    if identity is not None:
        data["bookmarked"] = await Bookmark.filter(business_id=b.id, user_id=identity.id).exists()
    return {"success": True, "data": {"business": data}}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_business(body: BusinessIn, identity: Identity = Depends(require_role(ROLE_BUSINESS_OWNER))):
    """
    Create a listing owned by the caller. An owner may list one business.

    Raises:
        HTTPException (403): Caller is not a business owner (or admin)
        HTTPException (400): Caller already owns a business
    """
    if await Business.filter(owner_id=identity.id).exists():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "BUSINESS_EXISTS", "message": "You already have a business."},
        )
    b = await Business.create(owner_id=identity.id, verified=True, **body.model_dump())
    logger.info("[businesses] created id=%s owner=%s", b.id, identity.id)
    return {"success": True, "data": {"business": business_to_dict(b)}}


@router.put("/{business_id}")
async def update_business(business_id: int, body: BusinessUpdateIn, identity: Identity = Depends(require_auth)):
    b = await get_business_or_404(business_id)
    if not can_manage(identity, b.owner_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail={"code": "FORBIDDEN", "message": "Not allowed"})
    changes = {
        k: v for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }
    if changes:
        b.update_from_dict(changes)
        await b.save()
    return {"success": True, "data": {"business": business_to_dict(b)}}


@router.delete("/{business_id}")
async def delete_business(business_id: int, identity: Identity = Depends(require_auth)):
    """Delete a listing with its reviews, deals and bookmarks (owner or admin)."""
    b = await get_business_or_404(business_id)
    if not can_manage(identity, b.owner_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail={"code": "FORBIDDEN", "message": "Not allowed"})
    await b.delete()
    logger.info("[businesses] deleted id=%s by=%s", business_id, identity.id)
    return {"success": True, "data": {"message": "Deleted successfully"}}
