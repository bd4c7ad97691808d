import uuid

from tortoise import fields, models
from tortoise.validators import MinValueValidator, MaxValueValidator


class Rating(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    mission = fields.OneToOneField("models.Mission", related_name="rating")
    rater = fields.ForeignKeyField("models.User", related_name="ratings_given", on_delete=fields.CASCADE)
    rated = fields.ForeignKeyField("models.User", related_name="ratings_received", on_delete=fields.CASCADE)
    score = fields.IntField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = fields.TextField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "ratings"
