import pytest

from app.exceptions import ConflictError, PermissionDeniedError, ValidationError
from applications.user.models import User, UserRole
from tests.factories import accepted_mission, completed_mission

pytestmark = pytest.mark.usefixtures("db")


class TestRatings:
    async def test_client_rates_provider(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        mission = await completed_mission(services, client, provider)

        rating = await services.ratings.create(client, mission.id, 5, "Quick and careful")

        assert rating.rated_id == provider.id
        provider = await User.get(id=provider.id)
        assert provider.average_rating == 5.0
        assert provider.total_ratings == 1

    async def test_average_rounds_half_up(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        for score in (4, 5, 5, 4):
            mission = await completed_mission(services, client, provider)
            await services.ratings.create(client, mission.id, score)

        provider = await User.get(id=provider.id)
        assert provider.total_ratings == 4
        assert provider.average_rating == 4.5

        mission = await completed_mission(services, client, provider)
        await services.ratings.create(client, mission.id, 4)
        # 22 / 5 = 4.4
        assert (await User.get(id=provider.id)).average_rating == 4.4

    async def test_one_rating_per_mission(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        mission = await completed_mission(services, client, provider)
        await services.ratings.create(client, mission.id, 4)

        with pytest.raises(ConflictError, match="already rated"):
            await services.ratings.create(provider, mission.id, 5)

    async def test_mission_must_be_completed(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        mission = await accepted_mission(services, client, provider)

        with pytest.raises(ConflictError, match="completed"):
            await services.ratings.create(client, mission.id, 4)

    @pytest.mark.parametrize("score", [0, 6, True, 4.5])
    async def test_score_range(self, services, make_user, score):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        mission = await completed_mission(services, client, provider)

        with pytest.raises(ValidationError):
            await services.ratings.create(client, mission.id, score)

    async def test_outsider_cannot_rate(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        mission = await completed_mission(services, client, provider)

        with pytest.raises(PermissionDeniedError):
            await services.ratings.create(await make_user(UserRole.CLIENT), mission.id, 1)

    async def test_list_for_user(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        mission = await completed_mission(services, client, provider)
        await services.ratings.create(provider, mission.id, 3)

        assert [r.score for r in await services.ratings.list_for_user(client.id)] == [3]
        assert await services.ratings.list_for_user(provider.id) == []
