from typing import Any, Dict

from pydantic import BaseModel

from applications.communication.models import Message, Notification


class MessageIn(BaseModel):
    mission_id: str
    content: str


def serialize_message(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "mission_id": message.mission_id,
        "sender_id": message.sender_id,
        "receiver_id": message.receiver_id,
        "content": message.content,
        "is_read": message.is_read,
        "created_at": message.created_at,
    }


def serialize_notification(notification: Notification) -> Dict[str, Any]:
    return {
        "id": notification.id,
        "type": notification.type,
        "title": notification.title,
        "body": notification.body,
        "data": notification.data or {},
        "is_read": notification.is_read,
        "read_at": notification.read_at,
        "created_at": notification.created_at,
    }
