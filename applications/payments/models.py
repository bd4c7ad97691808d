import uuid
from enum import Enum

from tortoise import fields, models


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class PayoutStatus(str, Enum):
    REQUESTED = "REQUESTED"
    PAID = "PAID"
    FAILED = "FAILED"


class Payment(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    mission = fields.OneToOneField("models.Mission", related_name="payment")
    payer = fields.ForeignKeyField("models.User", related_name="payments")
    stripe_payment_intent_id = fields.CharField(max_length=100, unique=True)
    amount = fields.DecimalField(max_digits=10, decimal_places=2)
    platform_fee = fields.DecimalField(max_digits=10, decimal_places=2)
    provider_earning = fields.DecimalField(max_digits=10, decimal_places=2)
    currency = fields.CharField(max_length=10, default="eur")
    status = fields.CharEnumField(PaymentStatus, default=PaymentStatus.PENDING)
    completed_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "payments"


class Payout(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    provider = fields.ForeignKeyField("models.User", related_name="payouts")
    stripe_payout_id = fields.CharField(max_length=100, null=True)
    amount = fields.DecimalField(max_digits=10, decimal_places=2)
    currency = fields.CharField(max_length=10)
    status = fields.CharEnumField(PayoutStatus, default=PayoutStatus.REQUESTED)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "payouts"
