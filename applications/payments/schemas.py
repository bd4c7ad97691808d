from decimal import Decimal
from typing import Any, Dict

from pydantic import BaseModel

from applications.payments.models import Payment, Payout


class CreateIntentIn(BaseModel):
    mission_id: str


class PayoutIn(BaseModel):
    amount: Decimal


def serialize_payment(payment: Payment) -> Dict[str, Any]:
    return {
        "id": payment.id,
        "mission_id": payment.mission_id,
        "payer_id": payment.payer_id,
        "stripe_payment_intent_id": payment.stripe_payment_intent_id,
        "amount": payment.amount,
        "platform_fee": payment.platform_fee,
        "provider_earning": payment.provider_earning,
        "currency": payment.currency,
        "status": payment.status,
        "completed_at": payment.completed_at,
        "created_at": payment.created_at,
    }


def serialize_payout(payout: Payout) -> Dict[str, Any]:
    return {
        "id": payout.id,
        "amount": payout.amount,
        "currency": payout.currency,
        "status": payout.status,
        "created_at": payout.created_at,
    }
