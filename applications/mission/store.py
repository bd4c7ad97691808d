import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from app.exceptions import NotFoundError
from applications.communication.models import Message
from applications.mission.models import Mission, MissionStatus
from applications.payments.models import Payment
from applications.rating.models import Rating
from applications.user.models import User


@dataclass
class MissionDetail:
    mission: Mission
    client: User
    provider: Optional[User] = None
    messages: List[Message] = field(default_factory=list)
    rating: Optional[Rating] = None
    payment: Optional[Payment] = None


def parse_id(value) -> uuid.UUID:
    try:
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
    except ValueError:
        raise NotFoundError("Mission not found")


class MissionStore:
    """Persistence for missions.

    Status changes only happen through ``transition``, an UPDATE guarded by the
    status the caller observed, so concurrent writers cannot both win.
    """

    async def create(self, **values) -> Mission:
        return await Mission.create(**values)

    async def get(self, mission_id) -> Mission:
        mission = await Mission.get_or_none(id=parse_id(mission_id))
        if not mission:
            raise NotFoundError("Mission not found")
        return mission

    async def transition(
        self, mission_id, expected: MissionStatus, target: MissionStatus, **changes
    ) -> bool:
        updated = await Mission.filter(id=parse_id(mission_id), status=expected).update(
            status=target, **changes
        )
        return updated == 1

    async def assign(self, mission_id, provider_id: str, accepted_at: datetime) -> bool:
        return await self.transition(
            mission_id,
            MissionStatus.PENDING,
            MissionStatus.ACCEPTED,
            provider_id=provider_id,
            accepted_at=accepted_at,
        )

    async def pending_with_pickup(self) -> List[Mission]:
        return await Mission.filter(
            status=MissionStatus.PENDING,
            pickup_latitude__isnull=False,
            pickup_longitude__isnull=False,
        ).order_by("created_at")

    async def for_client(self, client_id: str, status: Optional[MissionStatus] = None) -> List[Mission]:
        query = Mission.filter(client_id=client_id)
        if status:
            query = query.filter(status=status)
        return await query.order_by("-created_at")

    async def for_provider(self, provider_id: str, status: Optional[MissionStatus] = None) -> List[Mission]:
        query = Mission.filter(provider_id=provider_id)
        if status:
            query = query.filter(status=status)
        return await query.order_by("-created_at")

    async def load_detail(self, mission: Mission) -> MissionDetail:
        client = await User.get(id=mission.client_id)
        provider = await User.get_or_none(id=mission.provider_id) if mission.provider_id else None
        return MissionDetail(
            mission=mission,
            client=client,
            provider=provider,
            messages=await Message.filter(mission_id=mission.id).order_by("created_at"),
            rating=await Rating.get_or_none(mission_id=mission.id),
            payment=await Payment.get_or_none(mission_id=mission.id),
        )
