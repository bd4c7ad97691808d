from fastapi import APIRouter, Depends

from app.auth import login_required
from app.deps import Services, get_services
from applications.communication.schemas import serialize_notification
from applications.user.models import User

router = APIRouter(tags=['Notifications'])


@router.get("/")
async def list_notifications(
    unread_only: bool = False,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    return [serialize_notification(n) for n in await services.inbox.list(user, unread_only)]


@router.post("/read-all/")
async def mark_all_read(
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    return {"updated": await services.inbox.mark_all_read(user)}


@router.post("/{notification_id}/read/")
async def mark_read(
    notification_id: str,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    return serialize_notification(await services.inbox.mark_read(user, notification_id))
