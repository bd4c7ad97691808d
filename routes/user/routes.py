from fastapi import APIRouter, Depends

from app.auth import login_required
from app.deps import Services, get_services
from applications.user.models import User
from applications.user.schemas import (
    AvailabilityIn,
    LocationIn,
    NotificationTokenIn,
    ProfileIn,
    serialize_user,
)

router = APIRouter(tags=['User'])


@router.get("/me/")
async def me(user: User = Depends(login_required)):
    return serialize_user(user)


@router.patch("/profile/")
async def update_profile(
    data: ProfileIn,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    user = await services.accounts.update_profile(user, **data.model_dump(exclude_unset=True))
    return serialize_user(user)


@router.put("/location/")
async def update_location(
    data: LocationIn,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    user = await services.accounts.update_location(user, data.latitude, data.longitude)
    return {"current_latitude": user.current_latitude, "current_longitude": user.current_longitude}


@router.put("/availability/")
async def set_availability(
    data: AvailabilityIn,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    user = await services.accounts.set_availability(user, data.is_available)
    return {"is_available": user.is_available}


@router.put("/notification-token/")
async def set_notification_token(
    data: NotificationTokenIn,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    await services.accounts.set_notification_token(user, data.token)
    return {"success": True}

