from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from app.auth import login_required, role_required
from app.deps import Services, get_services
from applications.mission.models import MissionStatus
from applications.mission.schemas import MissionCreate, serialize_detail, serialize_mission
from applications.user.models import User, UserRole

router = APIRouter(tags=['Missions'])


def _respond(outcome, services: Services, background_tasks: BackgroundTasks):
    if outcome.effects:
        background_tasks.add_task(services.dispatcher.dispatch, outcome.effects)
    return serialize_mission(outcome.value)


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_mission(
    data: MissionCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(role_required(UserRole.CLIENT)),
    services: Services = Depends(get_services),
):
    outcome = await services.lifecycle.create(user, data)
    return _respond(outcome, services, background_tasks)


@router.get("/")
async def my_missions(
    mission_status: Optional[MissionStatus] = Query(None, alias="status"),
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    missions = await services.lifecycle.list_for_user(user, mission_status)
    return [serialize_mission(m) for m in missions]


@router.get("/nearby/")
async def nearby_missions(
    latitude: float,
    longitude: float,
    radius: Optional[float] = None,
    user: User = Depends(role_required(UserRole.PROVIDER)),
    services: Services = Depends(get_services),
):
    nearby = await services.matcher.find_nearby_missions(user, latitude, longitude, radius)
    return [
        {**serialize_mission(item.mission), "distance_km": round(item.distance_km, 2)}
        for item in nearby
    ]


@router.get("/{mission_id}/")
async def get_mission(
    mission_id: str,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    return serialize_detail(await services.lifecycle.get(mission_id, user))


@router.post("/{mission_id}/accept/")
async def accept_mission(
    mission_id: str,
    background_tasks: BackgroundTasks,
    user: User = Depends(role_required(UserRole.PROVIDER)),
    services: Services = Depends(get_services),
):
    outcome = await services.lifecycle.accept(mission_id, user)
    return _respond(outcome, services, background_tasks)


@router.post("/{mission_id}/start/")
async def start_mission(
    mission_id: str,
    background_tasks: BackgroundTasks,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    outcome = await services.lifecycle.start(mission_id, user)
    return _respond(outcome, services, background_tasks)


@router.post("/{mission_id}/complete/")
async def complete_mission(
    mission_id: str,
    background_tasks: BackgroundTasks,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    outcome = await services.lifecycle.complete(mission_id, user)
    return _respond(outcome, services, background_tasks)


@router.post("/{mission_id}/cancel/")
async def cancel_mission(
    mission_id: str,
    background_tasks: BackgroundTasks,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    outcome = await services.lifecycle.cancel(mission_id, user)
    return _respond(outcome, services, background_tasks)
