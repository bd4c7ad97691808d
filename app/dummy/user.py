import logging

from tortoise.transactions import in_transaction

from applications.user.models import User, UserRole

logger = logging.getLogger(__name__)

# Paris, around the Louvre
DEMO_LAT, DEMO_LON = 48.8606, 2.3376

USERS = [
    {
        "email": "admin@example.com",
        "first_name": "Admin",
        "last_name": "User",
        "password": "admin123",
        "role": UserRole.ADMIN,
    },
    {
        "email": "client@example.com",
        "first_name": "Claire",
        "last_name": "Client",
        "password": "client123",
        "role": UserRole.CLIENT,
    },
    {
        "email": "provider1@example.com",
        "first_name": "Paul",
        "last_name": "Provider",
        "password": "provider123",
        "role": UserRole.PROVIDER,
        "is_available": True,
        "service_radius": 5.0,
        "current_latitude": DEMO_LAT + 0.01,
        "current_longitude": DEMO_LON,
    },
    {
        "email": "provider2@example.com",
        "first_name": "Nina",
        "last_name": "Provider",
        "password": "provider123",
        "role": UserRole.PROVIDER,
        "is_available": True,
        "current_latitude": DEMO_LAT,
        "current_longitude": DEMO_LON + 0.05,
    },
]


async def seed_users():
    async with in_transaction():
        for user_data in USERS:
            user = await User.get_or_none(email=user_data["email"])
            if user:
                logger.info("User exists: %s", user.email)
                continue
            user = await User.create(**user_data)
            logger.info("Created %s user: %s", user.role.value.lower(), user.email)
