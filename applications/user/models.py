from decimal import Decimal
from enum import Enum

from passlib.context import CryptContext
from tortoise import fields, models

from app.config import settings
from app.utils.generate_unique import generate_prefixed_id

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


class UserRole(str, Enum):
    CLIENT = "CLIENT"
    PROVIDER = "PROVIDER"
    ADMIN = "ADMIN"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    INACTIVE = "INACTIVE"


ID_PREFIXES = {
    UserRole.CLIENT: "CLI",
    UserRole.PROVIDER: "PRV",
    UserRole.ADMIN: "ADM",
}


class User(models.Model):
    id = fields.CharField(pk=True, max_length=20)
    email = fields.CharField(max_length=100, unique=True)
    password = fields.CharField(max_length=128)
    first_name = fields.CharField(max_length=50)
    last_name = fields.CharField(max_length=50)
    phone = fields.CharField(max_length=30, null=True)
    address = fields.TextField(null=True)

    role = fields.CharEnumField(UserRole)
    status = fields.CharEnumField(UserStatus, default=UserStatus.ACTIVE)

    current_latitude = fields.FloatField(null=True)
    current_longitude = fields.FloatField(null=True)

    # provider-only
    is_available = fields.BooleanField(default=False)
    service_radius = fields.FloatField(null=True)
    balance = fields.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    average_rating = fields.FloatField(default=0.0)
    total_ratings = fields.IntField(default=0)

    notification_token = fields.CharField(max_length=256, null=True)
    stripe_customer_id = fields.CharField(max_length=100, null=True)

    last_active_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "users"

    def __str__(self):
        return f"{self.full_name} ({self.email})"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def has_location(self) -> bool:
        return self.current_latitude is not None and self.current_longitude is not None

    @classmethod
    def set_password(cls, password: str) -> str:
        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        return pwd_context.verify(password, self.password)

    async def save(self, *args, **kwargs):
        if not self.id:
            prefix = ID_PREFIXES.get(self.role, "USR")
            self.id = await generate_prefixed_id(User, prefix)
        if self.password and not self.password.startswith("$2b$"):
            self.password = self.set_password(self.password)

        await super().save(*args, **kwargs)
