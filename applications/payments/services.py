import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from tortoise import timezone
from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.policy import authorize
from app.utils.fees import to_minor_units, to_money
from app.utils.stripe_gateway import PaymentProcessor
from applications.communication.effects import Notify, Outcome
from applications.communication.models import NotificationKind
from applications.mission.models import Mission, MissionStatus
from applications.mission.store import MissionStore
from applications.payments.models import Payment, PaymentStatus, Payout
from applications.user.models import User
from applications.user.store import UserStore

logger = logging.getLogger(__name__)


@dataclass
class PaymentIntentHandle:
    payment: Payment
    client_secret: Optional[str]


@dataclass
class PayoutReceipt:
    payout: Payout
    balance: Decimal


class PaymentSettlement:
    """Collects the client's money for a completed mission and credits the provider.

    Processor failures raise out of ``create_intent`` and ``confirm``; a
    payment must never be half-recorded because a call was swallowed.
    """

    def __init__(
        self,
        missions: MissionStore,
        users: UserStore,
        processor: PaymentProcessor,
        currency: str = "eur",
        min_payout: Decimal = Decimal("10"),
    ):
        self.missions = missions
        self.users = users
        self.processor = processor
        self.currency = currency
        self.min_payout = min_payout

    async def create_intent(self, mission_id, client: User) -> PaymentIntentHandle:
        mission = await self.missions.get(mission_id)
        authorize("payment.create_intent", client, mission)
        if mission.status != MissionStatus.COMPLETED:
            raise ConflictError("Mission must be completed before payment")
        if await Payment.exists(mission_id=mission.id):
            raise ConflictError("Payment already exists for this mission")

        customer_ref = await self._customer_ref(client)
        intent = await self.processor.create_payment_intent(
            amount=to_minor_units(mission.client_price),
            currency=self.currency,
            customer=customer_ref,
            metadata={
                "mission_id": str(mission.id),
                "client_id": mission.client_id,
                "provider_id": mission.provider_id or "",
            },
            description=f"Payment for mission: {mission.title}",
        )

        try:
            payment = await Payment.create(
                mission_id=mission.id,
                payer_id=client.id,
                stripe_payment_intent_id=intent["id"],
                amount=mission.client_price,
                platform_fee=mission.platform_fee,
                provider_earning=mission.provider_earning,
                currency=self.currency,
                status=PaymentStatus.PENDING,
            )
        except IntegrityError:
            raise ConflictError("Payment already exists for this mission")

        logger.info("Payment %s created for mission %s (%s)", payment.id, mission.id, intent["id"])
        return PaymentIntentHandle(payment=payment, client_secret=intent.get("client_secret"))

    async def confirm(self, payment_id, actor: Optional[User] = None) -> Outcome[Payment]:
        payment = await self._get_payment(payment_id)
        mission = await self.missions.get(payment.mission_id)
        if actor is not None:
            authorize("payment.confirm", actor, mission)

        if payment.status == PaymentStatus.COMPLETED:
            raise ConflictError("Payment already completed")

        intent = await self.processor.retrieve_intent(payment.stripe_payment_intent_id)
        if intent["status"] != "succeeded":
            raise ValidationError("Payment not succeeded")

        # status flip and credit commit together or not at all
        async with in_transaction():
            updated = (
                await Payment.filter(id=payment.id)
                .exclude(status=PaymentStatus.COMPLETED)
                .update(status=PaymentStatus.COMPLETED, completed_at=timezone.now())
            )
            if not updated:
                raise ConflictError("Payment already completed")
            if mission.provider_id:
                await self.users.credit(mission.provider_id, payment.provider_earning)

        payment = await Payment.get(id=payment.id)
        effects = []
        if mission.provider_id:
            effects.append(
                Notify(
                    recipient_id=mission.provider_id,
                    kind=NotificationKind.PAYMENT_RECEIVED,
                    title="Payment received",
                    body=f"You received {payment.provider_earning} {payment.currency.upper()}",
                    data={"mission_id": str(mission.id), "payment_id": str(payment.id)},
                )
            )
        logger.info("Payment %s completed, provider %s credited %s", payment.id, mission.provider_id, payment.provider_earning)
        return Outcome(payment, effects)

    async def request_payout(self, provider: User, amount) -> PayoutReceipt:
        authorize("payment.payout", provider)
        try:
            amount = to_money(amount)
        except ArithmeticError:
            raise ValidationError("Invalid payout amount")
        if amount < self.min_payout:
            raise ValidationError(f"Minimum payout amount is {self.min_payout}")

        balance = await self.users.debit(provider.id, amount)
        payout = await Payout.create(provider_id=provider.id, amount=amount, currency=self.currency)
        logger.info("Payout %s of %s requested by %s", payout.id, amount, provider.id)
        return PayoutReceipt(payout=payout, balance=balance)

    async def handle_webhook_event(self, event: Mapping[str, Any]) -> Outcome[Optional[Payment]]:
        event_type = event.get("type")
        intent = (event.get("data") or {}).get("object") or {}

        if event_type == "payment_intent.succeeded":
            payment = await Payment.get_or_none(stripe_payment_intent_id=intent.get("id"))
            if payment and payment.status == PaymentStatus.PENDING:
                return await self.confirm(payment.id)
            return Outcome(payment)

        if event_type == "payment_intent.payment_failed":
            await (
                Payment.filter(stripe_payment_intent_id=intent.get("id"))
                .exclude(status=PaymentStatus.COMPLETED)
                .update(status=PaymentStatus.FAILED)
            )
            payment = await Payment.get_or_none(stripe_payment_intent_id=intent.get("id"))
            if payment:
                logger.warning("Payment %s failed at the processor", payment.id)
            return Outcome(payment)

        logger.info("Unhandled webhook event type: %s", event_type)
        return Outcome(None)

    async def get_for_mission(self, user: User, mission_id) -> Payment:
        mission = await self.missions.get(mission_id)
        authorize("payment.view", user, mission)
        payment = await Payment.get_or_none(mission_id=mission.id)
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    async def history(self, user: User) -> List[Payment]:
        return await Payment.filter(payer_id=user.id).order_by("-created_at")

    async def earnings(self, provider: User) -> Dict[str, Any]:
        authorize("payment.earnings", provider)
        provider = await self.users.get(provider.id)

        missions = await Mission.filter(provider_id=provider.id, status=MissionStatus.COMPLETED)
        paid_ids = {
            str(mission_id)
            for mission_id in await Payment.filter(
                mission_id__in=[m.id for m in missions], status=PaymentStatus.COMPLETED
            ).values_list("mission_id", flat=True)
        }

        total = sum((m.provider_earning for m in missions), Decimal("0.00"))
        paid = sum((m.provider_earning for m in missions if str(m.id) in paid_ids), Decimal("0.00"))
        return {
            "total_earnings": total,
            "paid_earnings": paid,
            "pending_earnings": total - paid,
            "current_balance": provider.balance,
            "completed_missions": len(missions),
        }

    async def _customer_ref(self, client: User) -> str:
        if client.stripe_customer_id:
            return client.stripe_customer_id
        customer_ref = await self.processor.create_customer(
            email=client.email,
            name=client.full_name,
            metadata={"user_id": client.id},
        )
        await User.filter(id=client.id).update(stripe_customer_id=customer_ref)
        client.stripe_customer_id = customer_ref
        return customer_ref

    @staticmethod
    async def _get_payment(payment_id) -> Payment:
        try:
            payment_id = uuid.UUID(str(payment_id))
        except ValueError:
            raise NotFoundError("Payment not found")
        payment = await Payment.get_or_none(id=payment_id)
        if not payment:
            raise NotFoundError("Payment not found")
        return payment
