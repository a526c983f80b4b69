# bizboost/models/bookmark.py
from tortoise import fields, models


class Bookmark(models.Model):
    """A user's saved (favorite) business."""
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField("models.User", related_name="bookmarks", on_delete=fields.CASCADE)
    business = fields.ForeignKeyField("models.Business", related_name="bookmarks", on_delete=fields.CASCADE)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "bookmarks"
        unique_together = (("user", "business"),)
