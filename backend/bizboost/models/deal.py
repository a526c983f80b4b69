# bizboost/models/deal.py
from tortoise import fields, models


class Deal(models.Model):
    """
    A time-boxed offer posted by a business owner.
    A deal is publicly listed while active is set and end_date has not passed.
    """
    id = fields.IntField(pk=True)
    business = fields.ForeignKeyField("models.Business", related_name="deals", on_delete=fields.CASCADE)
    title = fields.CharField(max_length=200)
    description = fields.TextField()
    discount_amount = fields.CharField(max_length=64, null=True)  # Free text, e.g. "20%" or "$5 off"
    start_date = fields.DateField()
    end_date = fields.DateField(index=True)
    active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "deals"
