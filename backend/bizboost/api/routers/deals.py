# bizboost/api/routers/deals.py
import datetime as dt
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bizboost.api.deps import require_role
from bizboost.core.security import ROLE_BUSINESS_OWNER, can_manage, utc_now
from bizboost.models.business import Business
from bizboost.models.deal import Deal
from bizboost.schemas.auth import Identity
from bizboost.schemas.deal import DealIn, DealUpdateIn

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/deals", tags=["deals"])

require_owner = require_role(ROLE_BUSINESS_OWNER)

DEAL_NOT_FOUND = {"code": "NOT_FOUND", "message": "Deal not found"}


def _parse_date(value: str) -> dt.date:
    try:
        return dt.date.fromisoformat(value.strip()[:10])
    except (AttributeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_DATE", "message": "Invalid date format"},
        )


def _check_range(start: dt.date, end: dt.date) -> None:
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "INVALID_DATE_RANGE", "message": "End date must be after start date"},
        )


def deal_to_dict(d: Deal, with_business: bool = False) -> dict:
    out = {
        "id": d.id,
        "businessId": d.business_id,
        "title": d.title,
        "description": d.description,
        "discountAmount": d.discount_amount,
        "startDate": d.start_date.isoformat(),
        "endDate": d.end_date.isoformat(),
        "active": d.active,
        "createdAt": d.created_at.isoformat() if d.created_at else None,
    }
    if with_business:
        out["businessName"] = d.business.name
        out["category"] = d.business.category
    return out


async def _get_deal_with_business(deal_id: int) -> Deal:
    deal = await Deal.filter(id=deal_id).select_related("business").first()
    if not deal:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=DEAL_NOT_FOUND)
    return deal


@router.get("")
async def list_active_deals():
    """All active deals whose end date has not passed, newest first."""
    rows = await (
        Deal.filter(active=True, end_date__gte=utc_now().date())
        .select_related("business")
        .order_by("-created_at", "-id")
    )
    return {"success": True, "data": {"items": [deal_to_dict(d, with_business=True) for d in rows]}}


@router.get("/business/{business_id}")
async def list_business_deals(business_id: int, includeInactive: bool = Query(False)):
    qs = Deal.filter(business_id=business_id)
    if not includeInactive:
        qs = qs.filter(active=True, end_date__gte=utc_now().date())
    rows = await qs.order_by("-created_at", "-id")
    return {"success": True, "data": {"items": [deal_to_dict(d) for d in rows]}}


@router.get("/my/deals")
async def my_deals(identity: Identity = Depends(require_owner)):
    """Deals of every business owned by the caller, including inactive ones."""
    rows = await (
        Deal.filter(business__owner__id=identity.id)
        .select_related("business")
        .order_by("-created_at", "-id")
    )
    return {"success": True, "data": {"items": [deal_to_dict(d, with_business=True) for d in rows]}}


@router.get("/{deal_id}")
async def get_deal(deal_id: int):
    deal = await _get_deal_with_business(deal_id)
    return {"success": True, "data": {"deal": deal_to_dict(deal, with_business=True)}}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_deal(body: DealIn, identity: Identity = Depends(require_owner)):
    """
    Post a deal for a business the caller owns (admins may post for any business).

    Raises:
        HTTPException (403): Not a business owner, or not the owner of this business
        HTTPException (404): Business not found
        HTTPException (400): Unparseable dates or end before start
    """
    business = await Business.get_or_none(id=body.businessId)
    if not business:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "NOT_FOUND", "message": "Business not found"},
        )
    if not can_manage(identity, business.owner_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "FORBIDDEN", "message": "Not authorized to create deals for this business"},
        )

    start, end = _parse_date(body.startDate), _parse_date(body.endDate)
    _check_range(start, end)

    deal = await Deal.create(
        business=business,
        title=body.title,
        description=body.description,
        discount_amount=body.discountAmount,
        start_date=start,
        end_date=end,
        active=True,
    )
    logger.info("[deals] created id=%s business=%s", deal.id, business.id)
    return {"success": True, "data": {"dealId": deal.id, "message": "Deal created successfully"}}


@router.put("/{deal_id}")
async def update_deal(deal_id: int, body: DealUpdateIn, identity: Identity = Depends(require_owner)):
    """Partial update; the resulting date range must stay valid."""
    deal = await _get_deal_with_business(deal_id)
    if not can_manage(identity, deal.business.owner_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "FORBIDDEN", "message": "Not authorized to update this deal"},
        )

    start = _parse_date(body.startDate) if body.startDate else deal.start_date
    end = _parse_date(body.endDate) if body.endDate else deal.end_date
    _check_range(start, end)

    deal.start_date = start
    deal.end_date = end
    if body.title is not None:
        deal.title = body.title
    if body.description is not None:
        deal.description = body.description
    if "discountAmount" in body.model_fields_set:
        deal.discount_amount = body.discountAmount
    if body.active is not None:
        deal.active = body.active
    await deal.save()
    return {"success": True, "data": {"message": "Deal updated successfully"}}


@router.delete("/{deal_id}")
async def delete_deal(deal_id: int, identity: Identity = Depends(require_owner)):
    deal = await _get_deal_with_business(deal_id)
    if not can_manage(identity, deal.business.owner_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "FORBIDDEN", "message": "Not authorized to delete this deal"},
        )
    await deal.delete()
    logger.info("[deals] deleted id=%s by=%s", deal_id, identity.id)
    return {"success": True, "data": {"message": "Deal deleted successfully"}}
