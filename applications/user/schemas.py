from typing import Any, Dict, Optional

from pydantic import BaseModel, EmailStr

from applications.user.models import User, UserRole


class RegisterIn(BaseModel):
    email: EmailStr
    password: str
    first_name: str
    last_name: str
    role: UserRole
    phone: Optional[str] = None


class ProfileIn(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    service_radius: Optional[float] = None


class LocationIn(BaseModel):
    latitude: float
    longitude: float


class AvailabilityIn(BaseModel):
    is_available: bool


class NotificationTokenIn(BaseModel):
    token: Optional[str] = None


def serialize_user(user: User) -> Dict[str, Any]:
    data = {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone": user.phone,
        "address": user.address,
        "role": user.role,
        "status": user.status,
        "current_latitude": user.current_latitude,
        "current_longitude": user.current_longitude,
        "average_rating": user.average_rating,
        "total_ratings": user.total_ratings,
        "created_at": user.created_at,
    }
    if user.role == UserRole.PROVIDER:
        data.update(
            is_available=user.is_available,
            service_radius=user.service_radius,
            balance=user.balance,
        )
    return data
