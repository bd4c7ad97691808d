import logging
from decimal import Decimal
from typing import List, Optional

from tortoise import timezone

from app.exceptions import ConflictError, ValidationError
from app.policy import authorize
from app.utils.fees import split_price, to_money
from applications.communication.effects import Notify, Outcome
from applications.communication.models import NotificationKind
from applications.mission.matcher import ProviderMatcher
from applications.mission.models import Assigned, Mission, MissionStatus
from applications.mission.schemas import MissionCreate
from applications.mission.store import MissionDetail, MissionStore
from applications.user.models import User, UserRole

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS = ("title", "description", "category", "pickup_address")


class MissionLifecycle:
    """
    The mission state machine.

        PENDING -> ACCEPTED -> IN_PROGRESS -> COMPLETED
        PENDING | ACCEPTED | IN_PROGRESS -> CANCELLED

    COMPLETED and CANCELLED are terminal. Every transition is a conditional
    update on the status read just before, so a lost race surfaces as
    ``ConflictError`` instead of a silent overwrite. Notifications are not
    sent here; each call returns them as effects for the dispatcher.
    """

    def __init__(
        self,
        missions: MissionStore,
        matcher: ProviderMatcher,
        commission_percent: Decimal = Decimal("15"),
        min_price: Decimal = Decimal("1"),
    ):
        self.missions = missions
        self.matcher = matcher
        self.commission_percent = commission_percent
        self.min_price = min_price

    def _validate(self, draft: MissionCreate) -> None:
        for name in REQUIRED_TEXT_FIELDS:
            if not (getattr(draft, name) or "").strip():
                raise ValidationError(f"{name.replace('_', ' ').capitalize()} is required")

        if draft.client_price is None or draft.client_price < self.min_price:
            raise ValidationError(f"Client price must be at least {self.min_price}")

        for prefix in ("pickup", "delivery"):
            lat = getattr(draft, f"{prefix}_latitude")
            lon = getattr(draft, f"{prefix}_longitude")
            if (lat is None) != (lon is None):
                raise ValidationError(f"{prefix.capitalize()} latitude and longitude must be given together")
            if lat is not None and not (-90 <= lat <= 90 and -180 <= lon <= 180):
                raise ValidationError(f"{prefix.capitalize()} coordinates are out of range")

        if draft.estimated_duration is not None and draft.estimated_duration <= 0:
            raise ValidationError("Estimated duration must be positive")

    async def create(self, client: User, draft: MissionCreate) -> Outcome[Mission]:
        authorize("mission.create", client)
        self._validate(draft)

        split = split_price(draft.client_price, self.commission_percent)
        values = draft.model_dump()
        values["client_price"] = to_money(draft.client_price)
        mission = await self.missions.create(
            client_id=client.id,
            platform_fee=split.platform_fee,
            provider_earning=split.provider_earning,
            status=MissionStatus.PENDING,
            **values,
        )
        logger.info("Mission %s created by %s for %s", mission.id, client.id, mission.client_price)

        try:
            providers = await self.matcher.find_nearby_providers(mission)
        except Exception:
            logger.exception("Provider matching failed for mission %s", mission.id)
            providers = []

        effects = [
            Notify(
                recipient_id=provider.id,
                kind=NotificationKind.NEW_MISSION,
                title="New mission available",
                body=f"{mission.title} - {mission.client_price}",
                data={"mission_id": str(mission.id)},
            )
            for provider in providers
        ]
        return Outcome(mission, effects)

    async def accept(self, mission_id, provider: User) -> Outcome[Mission]:
        authorize("mission.accept", provider)
        mission = await self.missions.get(mission_id)
        if mission.status != MissionStatus.PENDING:
            raise ConflictError("Mission is not available")

        if not await self.missions.assign(mission.id, provider.id, timezone.now()):
            raise ConflictError("Mission is not available")

        mission = await self.missions.get(mission.id)
        logger.info("Mission %s accepted by %s", mission.id, provider.id)
        return Outcome(
            mission,
            [
                self._notify_client(
                    mission,
                    NotificationKind.MISSION_ACCEPTED,
                    "Mission accepted",
                    f"{provider.first_name} accepted your mission",
                )
            ],
        )

    async def start(self, mission_id, provider: User) -> Outcome[Mission]:
        mission = await self._advance(
            mission_id,
            provider,
            action="mission.start",
            expected=MissionStatus.ACCEPTED,
            target=MissionStatus.IN_PROGRESS,
            conflict="Mission must be accepted first",
            started_at=timezone.now(),
        )
        return Outcome(
            mission,
            [self._notify_client(mission, NotificationKind.MISSION_STARTED, "Mission started", "Your mission has started")],
        )

    async def complete(self, mission_id, provider: User) -> Outcome[Mission]:
        mission = await self._advance(
            mission_id,
            provider,
            action="mission.complete",
            expected=MissionStatus.IN_PROGRESS,
            target=MissionStatus.COMPLETED,
            conflict="Mission must be in progress",
            completed_at=timezone.now(),
        )
        return Outcome(
            mission,
            [self._notify_client(mission, NotificationKind.MISSION_COMPLETED, "Mission completed", "Your mission is complete")],
        )

    async def cancel(self, mission_id, user: User) -> Outcome[Mission]:
        mission = await self.missions.get(mission_id)
        authorize("mission.cancel", user, mission)

        if mission.status == MissionStatus.COMPLETED:
            raise ConflictError("Cannot cancel completed missions")
        if mission.status == MissionStatus.CANCELLED:
            raise ConflictError("Mission is already cancelled")

        if not await self.missions.transition(
            mission.id, mission.status, MissionStatus.CANCELLED, cancelled_at=timezone.now()
        ):
            current = await self.missions.get(mission.id)
            if current.status == MissionStatus.COMPLETED:
                raise ConflictError("Cannot cancel completed missions")
            raise ConflictError("Mission changed while cancelling, please retry")

        mission = await self.missions.get(mission.id)
        logger.info("Mission %s cancelled by %s", mission.id, user.id)

        effects = []
        other_id = mission.other_party(user.id)
        if other_id:
            effects.append(
                Notify(
                    recipient_id=other_id,
                    kind=NotificationKind.MISSION_CANCELLED,
                    title="Mission cancelled",
                    body=f"The mission \"{mission.title}\" was cancelled",
                    data={"mission_id": str(mission.id)},
                )
            )
        return Outcome(mission, effects)

    async def get(self, mission_id, user: User) -> MissionDetail:
        mission = await self.missions.get(mission_id)
        authorize("mission.view", user, mission)
        return await self.missions.load_detail(mission)

    async def list_for_user(self, user: User, status: Optional[MissionStatus] = None) -> List[Mission]:
        if user.role == UserRole.CLIENT:
            return await self.missions.for_client(user.id, status)
        if user.role == UserRole.PROVIDER:
            return await self.missions.for_provider(user.id, status)
        return []

    async def _advance(self, mission_id, provider, *, action, expected, target, conflict, **changes) -> Mission:
        mission = await self.missions.get(mission_id)
        # status first: an unassigned mission has no provider to compare against
        if mission.status != expected:
            raise ConflictError(conflict)
        authorize(action, provider, mission)

        assignment = mission.assignment
        if not isinstance(assignment, Assigned) or assignment.provider_id != provider.id:
            raise ConflictError(conflict)

        if not await self.missions.transition(mission.id, expected, target, **changes):
            raise ConflictError(conflict)

        mission = await self.missions.get(mission.id)
        logger.info("Mission %s moved %s -> %s by %s", mission.id, expected.value, target.value, provider.id)
        return mission

    @staticmethod
    def _notify_client(mission: Mission, kind: NotificationKind, title: str, body: str) -> Notify:
        return Notify(
            recipient_id=mission.client_id,
            kind=kind,
            title=title,
            body=body,
            data={"mission_id": str(mission.id)},
        )
