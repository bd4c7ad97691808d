import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union

from tortoise import fields, models


class MissionStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset({MissionStatus.COMPLETED, MissionStatus.CANCELLED})
ASSIGNED_STATUSES = frozenset({MissionStatus.ACCEPTED, MissionStatus.IN_PROGRESS, MissionStatus.COMPLETED})


class MissionUrgency(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


@dataclass(frozen=True)
class Unassigned:
    pass


@dataclass(frozen=True)
class Assigned:
    provider_id: str
    accepted_at: datetime


Assignment = Union[Unassigned, Assigned]

UNASSIGNED = Unassigned()


class Mission(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    client = fields.ForeignKeyField("models.User", related_name="client_missions")
    # written together with accepted_at by MissionStore.assign only
    provider = fields.ForeignKeyField("models.User", related_name="provider_missions", null=True)

    title = fields.CharField(max_length=200)
    description = fields.TextField()
    category = fields.CharField(max_length=100)

    pickup_address = fields.TextField()
    pickup_latitude = fields.FloatField(null=True)
    pickup_longitude = fields.FloatField(null=True)
    delivery_address = fields.TextField(null=True)
    delivery_latitude = fields.FloatField(null=True)
    delivery_longitude = fields.FloatField(null=True)

    urgency = fields.CharEnumField(MissionUrgency, default=MissionUrgency.MEDIUM)
    client_price = fields.DecimalField(max_digits=10, decimal_places=2)
    platform_fee = fields.DecimalField(max_digits=10, decimal_places=2)
    provider_earning = fields.DecimalField(max_digits=10, decimal_places=2)
    estimated_duration = fields.IntField(null=True)  # minutes
    notes = fields.TextField(null=True)

    status = fields.CharEnumField(MissionStatus, default=MissionStatus.PENDING)
    accepted_at = fields.DatetimeField(null=True)
    started_at = fields.DatetimeField(null=True)
    completed_at = fields.DatetimeField(null=True)
    cancelled_at = fields.DatetimeField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "missions"

    def __str__(self):
        return f"{self.title} [{self.status.value}]"

    @property
    def assignment(self) -> Assignment:
        if self.provider_id is None or self.accepted_at is None:
            return UNASSIGNED
        return Assigned(provider_id=self.provider_id, accepted_at=self.accepted_at)

    @property
    def has_pickup_point(self) -> bool:
        return self.pickup_latitude is not None and self.pickup_longitude is not None

    def other_party(self, user_id: str):
        """Id of the counterpart of ``user_id`` on this mission, None if unassigned."""
        if user_id == self.client_id:
            return self.provider_id
        return self.client_id
