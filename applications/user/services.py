import logging
import re
from typing import Optional

from tortoise import timezone
from tortoise.exceptions import IntegrityError

from app.exceptions import ConflictError, PermissionDeniedError, ValidationError
from app.policy import authorize
from applications.user.models import User, UserRole, UserStatus
from applications.user.store import UserStore

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[\w\.\+-]+@[\w\.-]+\.\w+$")
PROFILE_FIELDS = ("first_name", "last_name", "phone", "address", "service_radius")


def _check_coordinates(latitude: float, longitude: float) -> None:
    if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        raise ValidationError("Coordinates are out of range")


class AccountService:
    def __init__(self, users: UserStore):
        self.users = users

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole,
        phone: Optional[str] = None,
    ) -> User:
        email = (email or "").strip().lower()
        if not EMAIL_RE.match(email):
            raise ValidationError("Invalid email address")
        if not password or len(password) < 6:
            raise ValidationError("Password must be at least 6 characters")
        if not (first_name or "").strip() or not (last_name or "").strip():
            raise ValidationError("First and last name are required")
        if role == UserRole.ADMIN:
            raise PermissionDeniedError("Admin accounts cannot be self-registered")

        if await User.exists(email=email):
            raise ConflictError("Email already registered")
        try:
            user = await User.create(
                email=email,
                password=password,
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                phone=phone,
                role=role,
            )
        except IntegrityError:
            raise ConflictError("Email already registered")

        logger.info("Registered %s %s", role.value.lower(), user.id)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        user = await User.get_or_none(email=(email or "").strip().lower())
        if not user or not user.verify_password(password):
            raise ValidationError("Invalid email or password")
        if user.status != UserStatus.ACTIVE:
            raise PermissionDeniedError("Account is not active")

        user.last_active_at = timezone.now()
        await user.save(update_fields=["last_active_at"])
        return user

    async def update_profile(self, user: User, **changes) -> User:
        updates = {k: v for k, v in changes.items() if k in PROFILE_FIELDS and v is not None}
        if "service_radius" in updates:
            if user.role != UserRole.PROVIDER:
                raise PermissionDeniedError("Only providers have a service radius")
            if updates["service_radius"] <= 0:
                raise ValidationError("Service radius must be positive")
        for name in ("first_name", "last_name"):
            if name in updates and not updates[name].strip():
                raise ValidationError(f"{name.replace('_', ' ').capitalize()} cannot be empty")

        if updates:
            await User.filter(id=user.id).update(**updates)
        return await self.users.get(user.id)

    async def update_location(self, user: User, latitude: float, longitude: float) -> User:
        _check_coordinates(latitude, longitude)
        await User.filter(id=user.id).update(
            current_latitude=latitude,
            current_longitude=longitude,
            last_active_at=timezone.now(),
        )
        return await self.users.get(user.id)

    async def set_availability(self, user: User, is_available: bool) -> User:
        authorize("user.availability", user)
        await User.filter(id=user.id).update(is_available=is_available)
        logger.info("Provider %s is now %s", user.id, "available" if is_available else "unavailable")
        return await self.users.get(user.id)

    async def set_notification_token(self, user: User, token: Optional[str]) -> User:
        await User.filter(id=user.id).update(notification_token=token or None)
        return await self.users.get(user.id)
