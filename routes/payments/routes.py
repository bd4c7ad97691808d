import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request

from app.auth import login_required, role_required
from app.deps import Services, get_services
from applications.payments.schemas import CreateIntentIn, PayoutIn, serialize_payment, serialize_payout
from applications.user.models import User, UserRole

logger = logging.getLogger(__name__)

router = APIRouter(tags=['Payments'])


@router.post("/create-intent/")
async def create_payment_intent(
    data: CreateIntentIn,
    user: User = Depends(role_required(UserRole.CLIENT)),
    services: Services = Depends(get_services),
):
    handle = await services.settlement.create_intent(data.mission_id, user)
    return {
        "client_secret": handle.client_secret,
        "payment_id": handle.payment.id,
        "amount": handle.payment.amount,
        "currency": handle.payment.currency,
    }


@router.post("/{payment_id}/confirm/")
async def confirm_payment(
    payment_id: str,
    background_tasks: BackgroundTasks,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    outcome = await services.settlement.confirm(payment_id, actor=user)
    if outcome.effects:
        background_tasks.add_task(services.dispatcher.dispatch, outcome.effects)
    return serialize_payment(outcome.value)


@router.get("/mission/{mission_id}/")
async def mission_payment(
    mission_id: str,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    return serialize_payment(await services.settlement.get_for_mission(user, mission_id))


@router.get("/history/")
async def payment_history(
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    return [serialize_payment(p) for p in await services.settlement.history(user)]


@router.get("/earnings/")
async def earnings(
    user: User = Depends(role_required(UserRole.PROVIDER)),
    services: Services = Depends(get_services),
):
    return await services.settlement.earnings(user)


@router.post("/payout/")
async def request_payout(
    data: PayoutIn,
    user: User = Depends(role_required(UserRole.PROVIDER)),
    services: Services = Depends(get_services),
):
    receipt = await services.settlement.request_payout(user, data.amount)
    return {"payout": serialize_payout(receipt.payout), "balance": receipt.balance}


@router.post("/webhook/")
async def stripe_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    stripe_signature: str = Header(None, alias="stripe-signature"),
    services: Services = Depends(get_services),
):
    payload = await request.body()
    event = services.processor.construct_event(payload, stripe_signature)
    logger.info("Stripe webhook %s", event.get("type"))

    outcome = await services.settlement.handle_webhook_event(event)
    if outcome.effects:
        background_tasks.add_task(services.dispatcher.dispatch, outcome.effects)
    return {"received": True}
