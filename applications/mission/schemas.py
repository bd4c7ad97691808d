from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel

from applications.mission.models import Mission, MissionUrgency
from applications.user.models import User


class MissionCreate(BaseModel):
    title: str
    description: str
    category: str
    pickup_address: str
    pickup_latitude: Optional[float] = None
    pickup_longitude: Optional[float] = None
    delivery_address: Optional[str] = None
    delivery_latitude: Optional[float] = None
    delivery_longitude: Optional[float] = None
    urgency: MissionUrgency = MissionUrgency.MEDIUM
    client_price: Decimal
    estimated_duration: Optional[int] = None
    notes: Optional[str] = None


def user_summary(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone": user.phone,
        "average_rating": user.average_rating,
        "total_ratings": user.total_ratings,
    }


def serialize_mission(mission: Mission) -> Dict[str, Any]:
    return {
        "id": mission.id,
        "client_id": mission.client_id,
        "provider_id": mission.provider_id,
        "title": mission.title,
        "description": mission.description,
        "category": mission.category,
        "pickup_address": mission.pickup_address,
        "pickup_latitude": mission.pickup_latitude,
        "pickup_longitude": mission.pickup_longitude,
        "delivery_address": mission.delivery_address,
        "delivery_latitude": mission.delivery_latitude,
        "delivery_longitude": mission.delivery_longitude,
        "urgency": mission.urgency,
        "client_price": mission.client_price,
        "platform_fee": mission.platform_fee,
        "provider_earning": mission.provider_earning,
        "estimated_duration": mission.estimated_duration,
        "notes": mission.notes,
        "status": mission.status,
        "accepted_at": mission.accepted_at,
        "started_at": mission.started_at,
        "completed_at": mission.completed_at,
        "cancelled_at": mission.cancelled_at,
        "created_at": mission.created_at,
    }


def serialize_detail(detail) -> Dict[str, Any]:
    data = serialize_mission(detail.mission)
    data["client"] = user_summary(detail.client)
    data["provider"] = user_summary(detail.provider)
    data["messages"] = [
        {
            "id": m.id,
            "sender_id": m.sender_id,
            "receiver_id": m.receiver_id,
            "content": m.content,
            "is_read": m.is_read,
            "created_at": m.created_at,
        }
        for m in detail.messages
    ]
    data["rating"] = (
        {
            "id": detail.rating.id,
            "rater_id": detail.rating.rater_id,
            "rated_id": detail.rating.rated_id,
            "score": detail.rating.score,
            "comment": detail.rating.comment,
        }
        if detail.rating
        else None
    )
    data["payment"] = (
        {
            "id": detail.payment.id,
            "amount": detail.payment.amount,
            "status": detail.payment.status,
            "created_at": detail.payment.created_at,
        }
        if detail.payment
        else None
    )
    return data
