# bizboost/models/review.py
from tortoise import fields, models


class Review(models.Model):
    """
    A rating (1-5) with a title and text left by a user for a business.
    A user may review a given business only once.
    """
    id = fields.IntField(pk=True)
    business = fields.ForeignKeyField("models.Business", related_name="reviews", on_delete=fields.CASCADE)
    user = fields.ForeignKeyField("models.User", related_name="reviews", on_delete=fields.CASCADE)
    rating = fields.SmallIntField()
    title = fields.CharField(max_length=200)
    review_text = fields.TextField()
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "reviews"
        unique_together = (("business", "user"),)
