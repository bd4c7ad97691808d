import asyncio
import logging
from collections import OrderedDict
from typing import Dict, Iterable, List

from app.utils.firebase_push import PushGateway
from applications.communication.effects import Notify
from applications.communication.models import Notification
from applications.user.models import User

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Performs ``Notify`` effects: a push if the recipient has a device
    token, and a ``Notification`` row for the in-app history.

    The two halves run independently and never raise; whatever breaks is
    logged and the rest carries on.
    """

    def __init__(self, push: PushGateway):
        self.push = push

    async def dispatch(self, effects: Iterable[Notify]) -> None:
        effects = list(effects)
        if not effects:
            return
        await asyncio.gather(self._push_all(effects), self._record_all(effects))

    async def _push_all(self, effects: List[Notify]) -> None:
        try:
            rows = await User.filter(
                id__in=list({e.recipient_id for e in effects}), notification_token__isnull=False
            ).values_list("id", "notification_token")
        except Exception:
            logger.exception("Could not resolve notification addresses")
            return
        tokens: Dict[str, str] = {user_id: token for user_id, token in rows if token}

        groups: "OrderedDict[tuple, List[Notify]]" = OrderedDict()
        for effect in effects:
            groups.setdefault(effect.content_key(), []).append(effect)

        for group in groups.values():
            targets = [tokens[e.recipient_id] for e in group if e.recipient_id in tokens]
            if not targets:
                continue
            first = group[0]
            data = {**first.data, "type": first.kind.value}
            try:
                if len(targets) == 1:
                    await self.push.send(targets[0], first.title, first.body, data)
                else:
                    await self.push.send_multicast(targets, first.title, first.body, data)
            except Exception:
                logger.exception("Push for %s to %d recipients failed", first.kind.value, len(targets))

    async def _record_all(self, effects: List[Notify]) -> None:
        for effect in effects:
            try:
                await Notification.create(
                    user_id=effect.recipient_id,
                    type=effect.kind,
                    title=effect.title,
                    body=effect.body,
                    data=effect.data,
                )
            except Exception:
                logger.exception("Could not store %s notification for %s", effect.kind.value, effect.recipient_id)
