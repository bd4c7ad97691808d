import logging
from decimal import Decimal

from app.config import settings
from app.utils.fees import split_price
from applications.mission.models import Mission, MissionStatus, MissionUrgency
from applications.user.models import User
from app.dummy.user import DEMO_LAT, DEMO_LON

logger = logging.getLogger(__name__)

MISSIONS = [
    ("Pick up dry cleaning", "Two shirts and a coat", "errands", Decimal("15"), MissionUrgency.LOW, 0.002),
    ("Grocery run", "Weekly groceries, list attached in chat", "shopping", Decimal("30"), MissionUrgency.MEDIUM, 0.01),
    ("Deliver documents", "Signed contract to the notary", "delivery", Decimal("45.50"), MissionUrgency.URGENT, 0.03),
]


async def seed_missions():
    client = await User.get_or_none(email="client@example.com")
    if not client:
        logger.warning("Seed users first: no demo client found")
        return

    for title, description, category, price, urgency, offset in MISSIONS:
        if await Mission.exists(client_id=client.id, title=title):
            logger.info("Mission exists: %s", title)
            continue
        split = split_price(price, settings.PLATFORM_COMMISSION_PERCENT)
        await Mission.create(
            client_id=client.id,
            title=title,
            description=description,
            category=category,
            pickup_address="Rue de Rivoli, Paris",
            pickup_latitude=DEMO_LAT + offset,
            pickup_longitude=DEMO_LON,
            urgency=urgency,
            client_price=price,
            platform_fee=split.platform_fee,
            provider_earning=split.provider_earning,
            status=MissionStatus.PENDING,
        )
        logger.info("Created mission: %s", title)
