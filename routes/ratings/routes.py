from fastapi import APIRouter, Depends, status

from app.auth import login_required
from app.deps import Services, get_services
from applications.rating.schemas import RatingIn, serialize_rating
from applications.user.models import User

router = APIRouter(tags=['Ratings'])


@router.post("/", status_code=status.HTTP_201_CREATED)
async def rate_mission(
    data: RatingIn,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    rating = await services.ratings.create(user, data.mission_id, data.score, data.comment)
    return serialize_rating(rating)


@router.get("/user/{user_id}/")
async def user_ratings(
    user_id: str,
    user: User = Depends(login_required),
    services: Services = Depends(get_services),
):
    return [serialize_rating(r) for r in await services.ratings.list_for_user(user_id)]
