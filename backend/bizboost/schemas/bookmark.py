# bizboost/schemas/bookmark.py
from pydantic import BaseModel


class BookmarkIn(BaseModel):
    businessId: int
