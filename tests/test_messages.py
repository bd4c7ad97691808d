import pytest

from app.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from applications.communication.effects import Notify
from applications.communication.models import Message, NotificationKind
from applications.user.models import UserRole
from tests.factories import accepted_mission, completed_mission, mission_draft

pytestmark = pytest.mark.usefixtures("db")


class TestSend:
    async def test_client_messages_provider(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        mission = await accepted_mission(services, client, provider)

        outcome = await services.messages.send(client, mission.id, "  On the second floor  ")

        assert outcome.value.receiver_id == provider.id
        assert outcome.value.content == "On the second floor"
        assert outcome.effects == [
            Notify(
                recipient_id=provider.id,
                kind=NotificationKind.NEW_MESSAGE,
                title=f"Message from {client.first_name}",
                body="On the second floor",
                data={"mission_id": str(mission.id), "message_id": str(outcome.value.id)},
            )
        ]

    async def test_requires_assigned_provider(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        mission = (await services.lifecycle.create(client, mission_draft())).value

        with pytest.raises(ConflictError, match="no provider"):
            await services.messages.send(client, mission.id, "hello?")

    async def test_closed_mission_rejects_messages(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        mission = await completed_mission(services, client, provider)

        with pytest.raises(ConflictError, match="closed"):
            await services.messages.send(provider, mission.id, "thanks!")

    async def test_empty_content(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        mission = await accepted_mission(services, client, provider)

        with pytest.raises(ValidationError):
            await services.messages.send(client, mission.id, "   ")

    async def test_outsider_cannot_send(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        mission = await accepted_mission(services, client, provider)

        with pytest.raises(PermissionDeniedError):
            await services.messages.send(await make_user(UserRole.PROVIDER), mission.id, "hi")


class TestRead:
    async def test_listing_marks_incoming_as_read(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        mission = await accepted_mission(services, client, provider)
        await services.messages.send(client, mission.id, "first")
        await services.messages.send(provider, mission.id, "second")
        await services.messages.send(client, mission.id, "third")

        assert await services.messages.unread_count(provider) == 2

        messages = await services.messages.list_for_mission(provider, mission.id)

        assert [m.content for m in messages] == ["first", "second", "third"]
        assert await services.messages.unread_count(provider) == 0
        # the provider's own message stays unread for the client
        assert await services.messages.unread_count(client) == 1
        assert await Message.filter(receiver_id=client.id, is_read=False).count() == 1


class TestInbox:
    async def test_mark_read_and_mark_all(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        mission = await accepted_mission(services, client, provider)
        for text in ("one", "two", "three"):
            outcome = await services.messages.send(provider, mission.id, text)
            await services.dispatcher.dispatch(outcome.effects)

        inbox = await services.inbox.list(client)
        assert len(inbox) == 3

        first = await services.inbox.mark_read(client, inbox[0].id)
        assert first.is_read and first.read_at is not None
        assert len(await services.inbox.list(client, unread_only=True)) == 2

        assert await services.inbox.mark_all_read(client) == 2
        assert await services.inbox.list(client, unread_only=True) == []

    async def test_cannot_read_someone_elses_notification(self, services, make_user):
        client = await make_user(UserRole.CLIENT)
        provider = await make_user(UserRole.PROVIDER)
        mission = await accepted_mission(services, client, provider)
        outcome = await services.messages.send(provider, mission.id, "hi")
        await services.dispatcher.dispatch(outcome.effects)
        notification = (await services.inbox.list(client))[0]

        with pytest.raises(NotFoundError):
            await services.inbox.mark_read(provider, notification.id)
        with pytest.raises(NotFoundError):
            await services.inbox.mark_read(client, "garbage")
