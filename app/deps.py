"""
Service wiring.

Mounted sub-apps do not share ``app.state`` with the root app, so the built
services live in a module-level holder filled once at startup and read by the
routes through ``get_services``.
"""
from dataclasses import dataclass
from typing import Optional

from app.config import Settings, settings as default_settings
from app.utils.firebase_push import PushGateway
from app.utils.stripe_gateway import PaymentProcessor
from applications.communication.dispatcher import NotificationDispatcher
from applications.communication.services import InboxService, MessageService
from applications.mission.matcher import ProviderMatcher
from applications.mission.services import MissionLifecycle
from applications.mission.store import MissionStore
from applications.payments.services import PaymentSettlement
from applications.rating.services import RatingService
from applications.user.services import AccountService
from applications.user.store import UserStore


@dataclass
class Services:
    accounts: AccountService
    lifecycle: MissionLifecycle
    matcher: ProviderMatcher
    settlement: PaymentSettlement
    messages: MessageService
    ratings: RatingService
    inbox: InboxService
    dispatcher: NotificationDispatcher
    processor: PaymentProcessor


def build_services(
    settings: Settings,
    processor: Optional[PaymentProcessor] = None,
    push: Optional[PushGateway] = None,
) -> Services:
    processor = processor or PaymentProcessor(
        settings.STRIPE_SECRET_KEY,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        timeout=settings.EXTERNAL_CALL_TIMEOUT,
    )
    push = push or PushGateway(settings.FIREBASE_KEY_BASE64, timeout=settings.EXTERNAL_CALL_TIMEOUT)

    missions = MissionStore()
    users = UserStore()
    matcher = ProviderMatcher(missions, users, default_radius_km=settings.DEFAULT_SEARCH_RADIUS_KM)
    return Services(
        accounts=AccountService(users),
        lifecycle=MissionLifecycle(
            missions,
            matcher,
            commission_percent=settings.PLATFORM_COMMISSION_PERCENT,
            min_price=settings.MIN_MISSION_PRICE,
        ),
        matcher=matcher,
        settlement=PaymentSettlement(
            missions,
            users,
            processor,
            currency=settings.CURRENCY,
            min_payout=settings.MIN_PAYOUT_AMOUNT,
        ),
        messages=MessageService(missions),
        ratings=RatingService(missions),
        inbox=InboxService(),
        dispatcher=NotificationDispatcher(push),
        processor=processor,
    )


_services: Optional[Services] = None


def init_services(services: Optional[Services] = None) -> Services:
    global _services
    _services = services or build_services(default_settings)
    return _services


def get_services() -> Services:
    if _services is None:
        raise RuntimeError("Services are not initialized")
    return _services
