import logging
from typing import Any, Dict, Mapping, Optional

import stripe

from app.exceptions import ExternalServiceError, ValidationError
from app.utils.external import call_external

logger = logging.getLogger(__name__)


class PaymentProcessor:
    """Thin async wrapper around the Stripe SDK.

    Every network call is bounded by ``timeout`` and Stripe failures are
    re-raised as ``ExternalServiceError`` so callers deal with one error type.
    """

    def __init__(self, secret_key: str, webhook_secret: str = "", timeout: float = 10.0):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.timeout = timeout

    async def _call(self, func, **params) -> Any:
        try:
            return await call_external(func, api_key=self.secret_key, timeout=self.timeout, **params)
        except stripe.StripeError as exc:
            logger.error("Stripe call %s failed: %s", getattr(func, "__qualname__", func), exc)
            raise ExternalServiceError(exc.user_message or str(exc)) from exc

    async def create_customer(self, email: str, name: str, metadata: Dict[str, str]) -> str:
        customer = await self._call(stripe.Customer.create, email=email, name=name, metadata=metadata)
        return customer["id"]

    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        customer: str,
        metadata: Dict[str, str],
        description: Optional[str] = None,
    ) -> Mapping[str, Any]:
        return await self._call(
            stripe.PaymentIntent.create,
            amount=amount,
            currency=currency,
            customer=customer,
            metadata=metadata,
            description=description,
            automatic_payment_methods={"enabled": True},
        )

    async def retrieve_intent(self, reference: str) -> Mapping[str, Any]:
        return await self._call(stripe.PaymentIntent.retrieve, id=reference)

    def construct_event(self, payload: bytes, signature: Optional[str]) -> Mapping[str, Any]:
        try:
            return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            raise ValidationError("Invalid webhook payload or signature") from exc
