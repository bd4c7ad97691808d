import uuid
from enum import Enum

from tortoise import fields, models


class NotificationKind(str, Enum):
    NEW_MISSION = "NEW_MISSION"
    MISSION_ACCEPTED = "MISSION_ACCEPTED"
    MISSION_STARTED = "MISSION_STARTED"
    MISSION_COMPLETED = "MISSION_COMPLETED"
    MISSION_CANCELLED = "MISSION_CANCELLED"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    NEW_MESSAGE = "NEW_MESSAGE"


class Message(models.Model):
    """Chat between the two parties of a mission"""
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    mission = fields.ForeignKeyField("models.Mission", related_name="messages")
    sender = fields.ForeignKeyField("models.User", related_name="sent_messages")
    receiver = fields.ForeignKeyField("models.User", related_name="received_messages")
    content = fields.TextField()
    is_read = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "messages"

    def __str__(self):
        return f"{self.sender_id} -> {self.receiver_id}: {self.content[:50]}"


class Notification(models.Model):
    """Append-only in-app history of dispatched alerts"""
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="notifications")
    type = fields.CharEnumField(NotificationKind, max_length=30)
    title = fields.CharField(max_length=255)
    body = fields.TextField()
    data = fields.JSONField(null=True)
    is_read = fields.BooleanField(default=False)
    read_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "notifications"
