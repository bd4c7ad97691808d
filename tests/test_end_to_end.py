"""
A full errand: post, accept, run, pay, rate, cash out.
"""
from decimal import Decimal

import pytest

from applications.communication.models import Notification, NotificationKind
from applications.mission.models import MissionStatus
from applications.payments.models import PaymentStatus
from applications.user.models import User, UserRole
from tests.factories import mission_draft

pytestmark = pytest.mark.usefixtures("db")


async def test_errand_from_post_to_payout(services, push, make_user):
    client = await make_user(UserRole.CLIENT)
    provider = await make_user(UserRole.PROVIDER)
    lifecycle, settlement = services.lifecycle, services.settlement

    created = await lifecycle.create(client, mission_draft(client_price=Decimal("50")))
    await services.dispatcher.dispatch(created.effects)
    push.send.assert_awaited_once()
    mission = created.value

    nearby = await services.matcher.find_nearby_missions(provider, provider.current_latitude, provider.current_longitude)
    assert [item.mission.id for item in nearby] == [mission.id]

    for step in (lifecycle.accept, lifecycle.start, lifecycle.complete):
        outcome = await step(mission.id, provider)
        await services.dispatcher.dispatch(outcome.effects)
    assert outcome.value.status == MissionStatus.COMPLETED

    handle = await settlement.create_intent(mission.id, client)
    confirmed = await settlement.confirm(handle.payment.id, actor=client)
    await services.dispatcher.dispatch(confirmed.effects)
    assert confirmed.value.status == PaymentStatus.COMPLETED
    assert confirmed.value.platform_fee == Decimal("7.50")
    assert (await User.get(id=provider.id)).balance == Decimal("42.50")

    await services.ratings.create(client, mission.id, 5)
    assert (await User.get(id=provider.id)).average_rating == 5.0

    receipt = await settlement.request_payout(provider, Decimal("42.50"))
    assert receipt.balance == Decimal("0")
    assert (await User.get(id=provider.id)).balance == Decimal("0")

    kinds = await Notification.filter(user_id=client.id).order_by("created_at").values_list("type", flat=True)
    assert list(kinds) == [
        NotificationKind.MISSION_ACCEPTED,
        NotificationKind.MISSION_STARTED,
        NotificationKind.MISSION_COMPLETED,
    ]
    assert await Notification.filter(user_id=provider.id).order_by("created_at").values_list("type", flat=True) == [
        NotificationKind.NEW_MISSION,
        NotificationKind.PAYMENT_RECEIVED,
    ]
