from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Tuple, TypeVar

from applications.communication.models import NotificationKind

T = TypeVar("T")


@dataclass(frozen=True)
class Notify:
    """Tell ``recipient_id`` about something; performed later by the dispatcher."""

    recipient_id: str
    kind: NotificationKind
    title: str
    body: str
    data: Dict[str, Any] = field(default_factory=dict)

    def content_key(self) -> Tuple:
        return self.kind, self.title, self.body, tuple(sorted((k, str(v)) for k, v in self.data.items()))


@dataclass
class Outcome(Generic[T]):
    """Result of a state change plus the notifications it calls for."""

    value: T
    effects: List[Notify] = field(default_factory=list)
