from types import SimpleNamespace

import pytest

from app.exceptions import PermissionDeniedError
from app.policy import RULES, authorize, is_allowed
from applications.user.models import UserRole


def user(user_id, role):
    return SimpleNamespace(id=user_id, role=role)


CLIENT = user("CLI1", UserRole.CLIENT)
OTHER_CLIENT = user("CLI2", UserRole.CLIENT)
PROVIDER = user("PRV1", UserRole.PROVIDER)
OTHER_PROVIDER = user("PRV2", UserRole.PROVIDER)
ADMIN = user("ADM1", UserRole.ADMIN)

ASSIGNED = SimpleNamespace(client_id="CLI1", provider_id="PRV1")
OPEN = SimpleNamespace(client_id="CLI1", provider_id=None)


class TestRoleRules:
    def test_only_clients_create(self):
        assert is_allowed("mission.create", CLIENT)
        assert not is_allowed("mission.create", PROVIDER)
        assert not is_allowed("mission.create", ADMIN)

    def test_only_providers_accept(self):
        assert is_allowed("mission.accept", PROVIDER)
        assert not is_allowed("mission.accept", CLIENT)

    def test_payout_and_earnings_are_provider_only(self):
        for action in ("payment.payout", "payment.earnings"):
            assert is_allowed(action, PROVIDER)
            assert not is_allowed(action, CLIENT)


class TestRelationRules:
    def test_start_requires_assigned_provider(self):
        assert is_allowed("mission.start", PROVIDER, ASSIGNED)
        assert not is_allowed("mission.start", OTHER_PROVIDER, ASSIGNED)
        assert not is_allowed("mission.start", CLIENT, ASSIGNED)

    def test_unassigned_mission_has_no_provider_party(self):
        assert not is_allowed("mission.complete", PROVIDER, OPEN)
        assert is_allowed("mission.cancel", CLIENT, OPEN)

    def test_view_admin_override(self):
        assert is_allowed("mission.view", ADMIN, ASSIGNED)
        assert not is_allowed("mission.view", OTHER_CLIENT, ASSIGNED)

    def test_cancel_has_no_admin_override(self):
        assert not is_allowed("mission.cancel", ADMIN, ASSIGNED)

    def test_relation_rule_without_mission_is_denied(self):
        assert not is_allowed("message.send", CLIENT)


def test_authorize_raises_with_rule_message():
    with pytest.raises(PermissionDeniedError) as exc:
        authorize("mission.create", PROVIDER)
    assert exc.value.message == RULES["mission.create"].message
    assert exc.value.status_code == 403
