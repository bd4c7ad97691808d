import logging
from dataclasses import dataclass
from typing import List, Optional

from app.exceptions import ValidationError
from app.policy import authorize
from app.utils.geo import haversine_km
from applications.mission.models import Mission
from applications.mission.store import MissionStore
from applications.user.models import User
from applications.user.store import UserStore

logger = logging.getLogger(__name__)


@dataclass
class NearbyMission:
    mission: Mission
    distance_km: float


class ProviderMatcher:
    """Proximity queries between missions and providers.

    Two radii are in play on purpose: browsing uses the radius the provider
    asks for, while new-mission alerts use each provider's own service radius.
    """

    def __init__(self, missions: MissionStore, users: UserStore, default_radius_km: float = 10.0):
        self.missions = missions
        self.users = users
        self.default_radius_km = default_radius_km

    async def find_nearby_missions(
        self,
        provider: User,
        latitude: float,
        longitude: float,
        radius_km: Optional[float] = None,
    ) -> List[NearbyMission]:
        authorize("mission.nearby", provider)
        radius = self.default_radius_km if radius_km is None else radius_km
        if radius <= 0:
            raise ValidationError("Radius must be positive")

        nearby = []
        for mission in await self.missions.pending_with_pickup():
            distance = haversine_km(latitude, longitude, mission.pickup_latitude, mission.pickup_longitude)
            if distance <= radius:
                nearby.append(NearbyMission(mission=mission, distance_km=distance))

        # sort is stable, so equal distances keep creation order
        nearby.sort(key=lambda item: item.distance_km)
        return nearby

    async def find_nearby_providers(self, mission: Mission) -> List[User]:
        if not mission.has_pickup_point:
            return []

        providers = []
        for provider in await self.users.available_providers():
            distance = haversine_km(
                mission.pickup_latitude,
                mission.pickup_longitude,
                provider.current_latitude,
                provider.current_longitude,
            )
            if distance <= (provider.service_radius or self.default_radius_km):
                providers.append(provider)

        logger.debug("Mission %s: %d providers in range", mission.id, len(providers))
        return providers
