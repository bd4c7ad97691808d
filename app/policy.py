"""
Who may do what.

Every service operation calls ``authorize(action, user, mission)`` once before
touching state. A rule grants access when the caller has one of ``roles`` (if
any are listed) and stands in one of ``relations`` to the mission (if any are
listed). Admins bypass rules that set ``admin_override``.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Set

from app.exceptions import PermissionDeniedError
from applications.user.models import User, UserRole


class Relation(str, Enum):
    CLIENT = "client"
    PROVIDER = "provider"


@dataclass(frozen=True)
class Rule:
    message: str
    roles: FrozenSet[UserRole] = field(default_factory=frozenset)
    relations: FrozenSet[Relation] = field(default_factory=frozenset)
    admin_override: bool = False


PARTIES = frozenset({Relation.CLIENT, Relation.PROVIDER})

RULES = {
    "mission.create": Rule("Only clients can create missions", roles=frozenset({UserRole.CLIENT})),
    "mission.accept": Rule("Only providers can accept missions", roles=frozenset({UserRole.PROVIDER})),
    "mission.nearby": Rule("Only providers can view nearby missions", roles=frozenset({UserRole.PROVIDER})),
    "mission.start": Rule("Only the assigned provider can start this mission", relations=frozenset({Relation.PROVIDER})),
    "mission.complete": Rule("Only the assigned provider can complete this mission", relations=frozenset({Relation.PROVIDER})),
    "mission.cancel": Rule("Access denied", relations=PARTIES),
    "mission.view": Rule("Access denied", relations=PARTIES, admin_override=True),
    "payment.create_intent": Rule("Only the mission client can pay for it", relations=frozenset({Relation.CLIENT})),
    "payment.confirm": Rule("Access denied", relations=frozenset({Relation.CLIENT}), admin_override=True),
    "payment.view": Rule("Access denied", relations=PARTIES, admin_override=True),
    "payment.payout": Rule("Only providers can request payouts", roles=frozenset({UserRole.PROVIDER})),
    "payment.earnings": Rule("Only providers can view earnings", roles=frozenset({UserRole.PROVIDER})),
    "message.send": Rule("Access denied", relations=PARTIES),
    "message.read": Rule("Access denied", relations=PARTIES),
    "rating.create": Rule("Access denied", relations=PARTIES),
    "user.availability": Rule("Only providers can update availability", roles=frozenset({UserRole.PROVIDER})),
}


def relations_of(user: User, mission) -> Set[Relation]:
    found = set()
    if mission.client_id == user.id:
        found.add(Relation.CLIENT)
    if mission.provider_id is not None and mission.provider_id == user.id:
        found.add(Relation.PROVIDER)
    return found


def is_allowed(action: str, user: User, mission: Optional[object] = None) -> bool:
    rule = RULES[action]
    if rule.admin_override and user.role == UserRole.ADMIN:
        return True
    if rule.roles and user.role not in rule.roles:
        return False
    if rule.relations:
        return mission is not None and bool(rule.relations & relations_of(user, mission))
    return True


def authorize(action: str, user: User, mission: Optional[object] = None) -> None:
    if not is_allowed(action, user, mission):
        raise PermissionDeniedError(RULES[action].message)
