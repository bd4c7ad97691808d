"""
Shared fixtures: a fresh in-memory database per test, user factories and
services wired against mocked Stripe and Firebase gateways.
"""
import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test")

from itertools import count
from unittest.mock import Mock

import pytest
import pytest_asyncio
from tortoise import Tortoise

from app.config import settings
from app.deps import build_services
from app.utils.auto_routing import get_model_modules
from app.utils.firebase_push import PushGateway
from app.utils.stripe_gateway import PaymentProcessor
from applications.user.models import User, UserRole
from tests.factories import PARIS


@pytest_asyncio.fixture
async def db():
    await Tortoise.init(
        config={
            "connections": {"default": "sqlite://:memory:"},
            "apps": {"models": {"models": get_model_modules(), "default_connection": "default"}},
            "use_tz": True,
            "timezone": "UTC",
        }
    )
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def processor():
    gateway = Mock(spec=PaymentProcessor)
    gateway.create_customer.return_value = "cus_test"
    gateway.create_payment_intent.return_value = {
        "id": "pi_test_1",
        "client_secret": "pi_test_1_secret",
        "status": "requires_payment_method",
    }
    gateway.retrieve_intent.return_value = {"id": "pi_test_1", "status": "succeeded"}
    return gateway


@pytest.fixture
def push():
    gateway = Mock(spec=PushGateway)
    gateway.send.return_value = True
    gateway.send_multicast.side_effect = lambda tokens, *a, **kw: {t: True for t in tokens}
    return gateway


@pytest.fixture
def services(processor, push):
    return build_services(settings, processor=processor, push=push)


@pytest.fixture
def make_user():
    seq = count(1)

    async def factory(role=UserRole.CLIENT, **overrides):
        n = next(seq)
        values = {
            "email": f"{role.value.lower()}{n}@example.com",
            "password": "secret123",
            "first_name": role.value.capitalize(),
            "last_name": str(n),
            "role": role,
        }
        if role == UserRole.PROVIDER:
            values.update(
                is_available=True,
                current_latitude=PARIS[0],
                current_longitude=PARIS[1],
                notification_token=f"token-{n}",
            )
        values.update(overrides)
        return await User.create(**values)

    return factory

