from decimal import Decimal
from typing import List

from tortoise.expressions import F
from tortoise.transactions import in_transaction

from app.exceptions import NotFoundError, ValidationError
from applications.user.models import User, UserRole, UserStatus


class UserStore:
    """User lookups plus the balance bookkeeping that must not lose updates."""

    async def get(self, user_id: str) -> User:
        user = await User.get_or_none(id=user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def available_providers(self) -> List[User]:
        return await User.filter(
            role=UserRole.PROVIDER,
            status=UserStatus.ACTIVE,
            is_available=True,
            current_latitude__isnull=False,
            current_longitude__isnull=False,
            notification_token__isnull=False,
        ).order_by("created_at")

    async def credit(self, user_id: str, amount: Decimal) -> None:
        await User.filter(id=user_id).update(balance=F("balance") + amount)

    async def debit(self, user_id: str, amount: Decimal) -> Decimal:
        """Take ``amount`` off the balance and return what is left."""
        async with in_transaction():
            user = await User.select_for_update().get_or_none(id=user_id)
            if not user:
                raise NotFoundError("User not found")
            if amount > user.balance:
                raise ValidationError("Insufficient balance")
            await User.filter(id=user_id).update(balance=F("balance") - amount)
            return user.balance - amount
