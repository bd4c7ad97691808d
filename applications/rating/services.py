import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from tortoise.exceptions import IntegrityError

from app.exceptions import ConflictError, ValidationError
from app.policy import authorize
from applications.mission.models import MissionStatus
from applications.mission.store import MissionStore
from applications.rating.models import Rating
from applications.user.models import User

logger = logging.getLogger(__name__)


class RatingService:
    def __init__(self, missions: MissionStore):
        self.missions = missions

    async def create(self, rater: User, mission_id, score: int, comment: Optional[str] = None) -> Rating:
        if isinstance(score, bool) or not isinstance(score, int) or not 1 <= score <= 5:
            raise ValidationError("Score must be an integer between 1 and 5")

        mission = await self.missions.get(mission_id)
        authorize("rating.create", rater, mission)
        if mission.status != MissionStatus.COMPLETED:
            raise ConflictError("Can only rate completed missions")
        if await Rating.exists(mission_id=mission.id):
            raise ConflictError("Mission already rated")

        rated_id = mission.other_party(rater.id)
        if not rated_id:
            raise ConflictError("Cannot rate this mission")

        try:
            rating = await Rating.create(
                mission_id=mission.id,
                rater_id=rater.id,
                rated_id=rated_id,
                score=score,
                comment=comment,
            )
        except IntegrityError:
            raise ConflictError("Mission already rated")

        await self._refresh_aggregate(rated_id)
        logger.info("Mission %s rated %d by %s", mission.id, score, rater.id)
        return rating

    async def list_for_user(self, user_id: str) -> List[Rating]:
        return await Rating.filter(rated_id=user_id).order_by("-created_at")

    @staticmethod
    async def _refresh_aggregate(user_id: str) -> None:
        # one rating per mission, so recomputing from all rows is safe to race
        scores = await Rating.filter(rated_id=user_id).values_list("score", flat=True)
        total = len(scores)
        average = (
            float((Decimal(sum(scores)) / total).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
            if total
            else 0.0
        )
        await User.filter(id=user_id).update(average_rating=average, total_ratings=total)
