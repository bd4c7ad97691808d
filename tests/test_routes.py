"""
HTTP surface: mounted sub-apps, bearer auth and the error body shape.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from jose import jwt

from app.config import settings
from app.deps import init_services
from app.exceptions import ValidationError
from app.main import app
from app.token import (
    ALGORITHM,
    NEW_ACCESS_TOKEN_HEADER,
    NEW_REFRESH_TOKEN_HEADER,
    issue_tokens,
    token_claims,
)
from applications.user.models import UserRole
from tests.factories import PARIS

pytestmark = pytest.mark.usefixtures("db")


@pytest_asyncio.fixture
async def http(services):
    init_services(services)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def bearer(user):
    return {"Authorization": f"Bearer {issue_tokens(user)['access_token']}"}


MISSION = {
    "title": "Pharmacy pickup",
    "description": "Prescription is ready at the counter",
    "category": "health",
    "pickup_address": "Rue de Rivoli",
    "pickup_latitude": PARIS[0],
    "pickup_longitude": PARIS[1],
    "client_price": "25.00",
}


async def test_register_then_login(http):
    response = await http.post(
        "/auth/register/",
        json={
            "email": "new@example.com",
            "password": "secret123",
            "first_name": "New",
            "last_name": "Client",
            "role": "CLIENT",
        },
    )
    assert response.status_code == 201
    assert response.json()["user"]["id"].startswith("CLI")

    response = await http.post("/auth/login/", data={"email": "new@example.com", "password": "secret123"})
    assert response.status_code == 200
    me = await http.get("/user/me/", headers={"Authorization": f"Bearer {response.json()['access_token']}"})
    assert me.json()["email"] == "new@example.com"


async def test_requires_token(http):
    response = await http.get("/missions/")
    assert response.status_code == 401


def expired_access_token(user):
    claims = {**token_claims(user), "type": "access", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM)


async def test_expired_token_is_renewed_from_refresh_header(http, make_user):
    client = await make_user(UserRole.CLIENT)
    headers = {
        "Authorization": f"Bearer {expired_access_token(client)}",
        "refresh-token": issue_tokens(client)["refresh_token"],
    }

    response = await http.get("/user/me/", headers=headers)

    assert response.status_code == 200
    assert response.json()["id"] == client.id
    renewed = response.headers[NEW_ACCESS_TOKEN_HEADER]
    assert response.headers[NEW_REFRESH_TOKEN_HEADER]

    again = await http.get("/user/me/", headers={"Authorization": f"Bearer {renewed}"})
    assert again.status_code == 200
    assert NEW_ACCESS_TOKEN_HEADER not in again.headers


async def test_refresh_endpoint_issues_a_new_pair(http, make_user):
    provider = await make_user(UserRole.PROVIDER)

    response = await http.post("/auth/refresh/", headers={"refresh-token": issue_tokens(provider)["refresh_token"]})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    me = await http.get("/user/me/", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.json()["id"] == provider.id

    rejected = await http.post("/auth/refresh/", headers={"refresh-token": body["access_token"]})
    assert rejected.status_code == 401


async def test_expired_token_without_refresh_header_is_rejected(http, make_user):
    client = await make_user(UserRole.CLIENT)

    response = await http.get("/user/me/", headers={"Authorization": f"Bearer {expired_access_token(client)}"})

    assert response.status_code == 401


async def test_mission_flow_over_http(http, make_user):
    client = await make_user(UserRole.CLIENT)
    provider = await make_user(UserRole.PROVIDER)

    created = await http.post("/missions/", json=MISSION, headers=bearer(client))
    assert created.status_code == 201
    mission_id = created.json()["id"]
    assert Decimal(str(created.json()["provider_earning"])) == Decimal("21.25")

    nearby = await http.get(
        "/missions/nearby/", params={"latitude": PARIS[0], "longitude": PARIS[1]}, headers=bearer(provider)
    )
    assert [m["id"] for m in nearby.json()] == [mission_id]

    accepted = await http.post(f"/missions/{mission_id}/accept/", headers=bearer(provider))
    assert accepted.json()["status"] == "ACCEPTED"

    again = await http.post(f"/missions/{mission_id}/accept/", headers=bearer(await make_user(UserRole.PROVIDER)))
    assert again.status_code == 409
    assert again.json() == {"success": False, "kind": "conflict", "message": "Mission is not available"}

    detail = await http.get(f"/missions/{mission_id}/", headers=bearer(client))
    assert detail.json()["provider"]["id"] == provider.id


async def test_domain_errors_map_to_status_codes(http, make_user):
    client = await make_user(UserRole.CLIENT)
    provider = await make_user(UserRole.PROVIDER)

    forbidden = await http.post("/missions/", json=MISSION, headers=bearer(provider))
    assert forbidden.status_code == 403
    admin = await make_user(UserRole.ADMIN)
    assert (await http.post("/missions/", json=MISSION, headers=bearer(admin))).status_code == 403

    invalid = await http.post("/missions/", json={**MISSION, "client_price": "0.10"}, headers=bearer(client))
    assert invalid.status_code == 400
    assert invalid.json()["kind"] == "validation_error"

    missing = await http.get("/missions/00000000-0000-4000-8000-000000000000/", headers=bearer(client))
    assert missing.status_code == 404
    assert missing.json()["kind"] == "not_found"


async def test_webhook_rejects_bad_signature(http, processor):
    processor.construct_event.side_effect = ValidationError("Invalid webhook payload or signature")

    response = await http.post("/payments/webhook/", content=b"{}", headers={"stripe-signature": "t=1,v1=bad"})

    assert response.status_code == 400
