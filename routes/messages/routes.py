from fastapi import APIRouter, BackgroundTasks, Depends, status

from app.auth import login_required
from app.deps import Services, get_services
from applications.communication.schemas import MessageIn, serialize_message
from applications.user.models import User

router = APIRouter(tags=['Messages'])


@router.post("/", status_code=status.HTTP_201_CREATED)
async def send_message(
    data: MessageIn,
    background_tasks: BackgroundTasks,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    outcome = await services.messages.send(user, data.mission_id, data.content)
    background_tasks.add_task(services.dispatcher.dispatch, outcome.effects)
    return serialize_message(outcome.value)


@router.get("/unread/count/")
async def unread_count(
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    return {"unread_count": await services.messages.unread_count(user)}


@router.get("/mission/{mission_id}/")
async def mission_messages(
    mission_id: str,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    messages = await services.messages.list_for_mission(user, mission_id)
    return [serialize_message(m) for m in messages]
