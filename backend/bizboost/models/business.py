# bizboost/models/business.py
"""
Database model for business listings.
"""
from tortoise import fields, models


class Business(models.Model):
    """
    A local business listed in the directory.

    average_rating and review_count are denormalized aggregates of the business's
    reviews. They are only written by services.ratings, inside the same transaction
    as the review change that affects them.
    """
    id = fields.IntField(pk=True)
    owner = fields.ForeignKeyField(
        "models.User",
        related_name="businesses",
        null=True,
        on_delete=fields.SET_NULL,
    )
    name = fields.CharField(max_length=200)
    category = fields.CharField(max_length=64, index=True)
    address = fields.CharField(max_length=255)
    city = fields.CharField(max_length=100, index=True)
    state = fields.CharField(max_length=64)
    zip_code = fields.CharField(max_length=16)
    phone = fields.CharField(max_length=32, null=True)
    email = fields.CharField(max_length=256, null=True)
    website = fields.CharField(max_length=512, null=True)
    description = fields.TextField()
    image_url = fields.CharField(max_length=512, null=True)
    products = fields.TextField(null=True)
    verified = fields.BooleanField(default=False)
    average_rating = fields.FloatField(default=0)
    review_count = fields.IntField(default=0)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "businesses"
