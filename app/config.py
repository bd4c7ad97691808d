from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings
from tortoise import Tortoise

from app.utils.auto_routing import get_single_app_structure


class Settings(BaseSettings):
    DEBUG: bool = True
    APP_NAME: str = "Errand Marketplace"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    DB_HOST: str = "localhost"
    DB_NAME: str = "db.sqlite3"
    DB_USER: str = ""
    DB_PASSWORD: str = ""
    DB_PORT: int = 5432
    DB_ENGINE: str = "sqlite"

    DATABASE_URL: Optional[str] = None
    SECRET_KEY: str = "dev-access-secret-change-me"
    REFRESH_SECRET_KEY: str = "dev-refresh-secret-change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12

    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    CURRENCY: str = "eur"

    FIREBASE_KEY_BASE64: str = ""

    PLATFORM_COMMISSION_PERCENT: Decimal = Decimal("15")
    DEFAULT_SEARCH_RADIUS_KM: float = 10.0
    MIN_MISSION_PRICE: Decimal = Decimal("1")
    MIN_PAYOUT_AMOUNT: Decimal = Decimal("10")
    EXTERNAL_CALL_TIMEOUT: float = 10.0

    def model_post_init(self, __context):
        if self.DATABASE_URL:
            return
        if self.DB_ENGINE == "sqlite":
            self.DATABASE_URL = f"sqlite://{self.DB_NAME}"
        else:
            self.DATABASE_URL = (
                f"{self.DB_ENGINE}://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()


TORTOISE_ORM = {
    "connections": {
        "default": settings.DATABASE_URL,
    },
    "apps": get_single_app_structure(),
    "use_tz": True,
    "timezone": "UTC",
}


async def init_db():
    await Tortoise.init(config=TORTOISE_ORM)
    if settings.ENV != "production":
        await Tortoise.generate_schemas()


async def close_db():
    await Tortoise.close_connections()
