import logging
import uuid
from typing import List

from tortoise import timezone

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.policy import authorize
from applications.communication.effects import Notify, Outcome
from applications.communication.models import Message, Notification, NotificationKind
from applications.mission.models import TERMINAL_STATUSES
from applications.mission.store import MissionStore
from applications.user.models import User

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, missions: MissionStore):
        self.missions = missions

    async def send(self, sender: User, mission_id, content: str) -> Outcome[Message]:
        mission = await self.missions.get(mission_id)
        authorize("message.send", sender, mission)

        content = (content or "").strip()
        if not content:
            raise ValidationError("Message content is required")

        receiver_id = mission.other_party(sender.id)
        if not receiver_id:
            raise ConflictError("Mission has no provider yet")
        if mission.status in TERMINAL_STATUSES:
            raise ConflictError("Mission is closed for new messages")

        message = await Message.create(
            mission_id=mission.id,
            sender_id=sender.id,
            receiver_id=receiver_id,
            content=content,
        )
        return Outcome(
            message,
            [
                Notify(
                    recipient_id=receiver_id,
                    kind=NotificationKind.NEW_MESSAGE,
                    title=f"Message from {sender.first_name}",
                    body=content,
                    data={"mission_id": str(mission.id), "message_id": str(message.id)},
                )
            ],
        )

    async def list_for_mission(self, user: User, mission_id) -> List[Message]:
        """Oldest first; marks everything addressed to ``user`` as read."""
        mission = await self.missions.get(mission_id)
        authorize("message.read", user, mission)

        messages = await Message.filter(mission_id=mission.id).order_by("created_at")
        await Message.filter(mission_id=mission.id, receiver_id=user.id, is_read=False).update(is_read=True)
        return messages

    async def unread_count(self, user: User) -> int:
        return await Message.filter(receiver_id=user.id, is_read=False).count()


class InboxService:
    """The in-app notification history written by the dispatcher."""

    async def list(self, user: User, unread_only: bool = False) -> List[Notification]:
        query = Notification.filter(user_id=user.id)
        if unread_only:
            query = query.filter(is_read=False)
        return await query.order_by("-created_at")

    async def mark_read(self, user: User, notification_id) -> Notification:
        try:
            notification_id = uuid.UUID(str(notification_id))
        except ValueError:
            raise NotFoundError("Notification not found")

        notification = await Notification.get_or_none(id=notification_id, user_id=user.id)
        if not notification:
            raise NotFoundError("Notification not found")
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = timezone.now()
            await notification.save(update_fields=["is_read", "read_at"])
        return notification

    async def mark_all_read(self, user: User) -> int:
        return await Notification.filter(user_id=user.id, is_read=False).update(
            is_read=True, read_at=timezone.now()
        )
