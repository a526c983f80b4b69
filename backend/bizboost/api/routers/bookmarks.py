# bizboost/api/routers/bookmarks.py
from fastapi import APIRouter, Depends, HTTPException, status

from bizboost.api.deps import require_auth
from bizboost.api.routers.businesses import business_to_dict
from bizboost.models.bookmark import Bookmark
from bizboost.models.business import Business
from bizboost.schemas.auth import Identity
from bizboost.schemas.bookmark import BookmarkIn

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.get("/my/bookmarks")
async def my_bookmarks(identity: Identity = Depends(require_auth)):
    """The caller's saved businesses, most recently bookmarked first."""
    rows = await (
        Bookmark.filter(user_id=identity.id)
        .select_related("business")
        .order_by("-created_at", "-id")
    )
    items = []
    for bm in rows:
        item = business_to_dict(bm.business)
        item["bookmarkedAt"] = bm.created_at.isoformat() if bm.created_at else None
        items.append(item)
    return {"success": True, "data": {"items": items}}


@router.get("/check/{business_id}")
async def check_bookmark(business_id: int, identity: Identity = Depends(require_auth)):
    bookmarked = await Bookmark.filter(business_id=business_id, user_id=identity.id).exists()
    return {"success": True, "data": {"bookmarked": bookmarked}}


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_bookmark(body: BookmarkIn, identity: Identity = Depends(require_auth)):
    """
    Bookmark a business.

    Raises:
        HTTPException (404): Business not found
        HTTPException (400): Already bookmarked
    """
    if not await Business.filter(id=body.businessId).exists():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "NOT_FOUND", "message": "Business not found"},
        )
    if await Bookmark.filter(business_id=body.businessId, user_id=identity.id).exists():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "BOOKMARK_EXISTS", "message": "Business already bookmarked"},
        )
    await Bookmark.create(business_id=body.businessId, user_id=identity.id)
    return {"success": True, "data": {"bookmarked": True, "message": "Bookmark added successfully"}}


@router.delete("/{business_id}")
async def remove_bookmark(business_id: int, identity: Identity = Depends(require_auth)):
    deleted = await Bookmark.filter(business_id=business_id, user_id=identity.id).delete()
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "NOT_FOUND", "message": "Bookmark not found"},
        )
    return {"success": True, "data": {"bookmarked": False, "message": "Bookmark removed successfully"}}
