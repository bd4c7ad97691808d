from typing import Any, Dict, Optional

from pydantic import BaseModel

from applications.rating.models import Rating


class RatingIn(BaseModel):
    mission_id: str
    score: int
    comment: Optional[str] = None


def serialize_rating(rating: Rating) -> Dict[str, Any]:
    return {
        "id": rating.id,
        "mission_id": rating.mission_id,
        "rater_id": rating.rater_id,
        "rated_id": rating.rated_id,
        "score": rating.score,
        "comment": rating.comment,
        "created_at": rating.created_at,
    }
