import base64
import json
import logging
from typing import Dict, List, Optional

import firebase_admin
from firebase_admin import credentials, messaging
from firebase_admin.exceptions import FirebaseError

from app.utils.external import call_external

logger = logging.getLogger(__name__)


class PushGateway:
    """Best-effort push delivery through Firebase Cloud Messaging."""

    def __init__(self, key_base64: str = "", timeout: float = 10.0, app_name: str = "errands"):
        self.key_base64 = key_base64.replace("\n", "").replace("\r", "")
        self.timeout = timeout
        self.app_name = app_name
        self._app: Optional[firebase_admin.App] = None

    @property
    def enabled(self) -> bool:
        return bool(self.key_base64)

    def _get_app(self) -> firebase_admin.App:
        if self._app is None:
            firebase_json = json.loads(base64.b64decode(self.key_base64))
            cred = credentials.Certificate(firebase_json)
            self._app = firebase_admin.initialize_app(cred, name=self.app_name)
            logger.info("Firebase initialized %s", self._app.name)
        return self._app

    @staticmethod
    def _stringify(data: Optional[Dict]) -> Dict[str, str]:
        # FCM data payloads only carry strings
        return {str(k): str(v) for k, v in (data or {}).items()}

    async def send(self, token: str, title: str, body: str, data: Optional[Dict] = None) -> bool:
        if not self.enabled:
            logger.warning("Push disabled, dropping notification '%s'", title)
            return False

        message = messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            data=self._stringify(data),
            token=token,
            android=messaging.AndroidConfig(priority="high"),
            apns=messaging.APNSConfig(payload=messaging.APNSPayload(aps=messaging.Aps(sound="default"))),
        )
        try:
            await call_external(messaging.send, message, app=self._get_app(), timeout=self.timeout)
        except FirebaseError as exc:
            logger.error("Push to %s... failed: %s", token[:8], exc)
            return False
        return True

    async def send_multicast(
        self, tokens: List[str], title: str, body: str, data: Optional[Dict] = None
    ) -> Dict[str, bool]:
        if not self.enabled:
            logger.warning("Push disabled, dropping multicast '%s' to %d devices", title, len(tokens))
            return {token: False for token in tokens}

        message = messaging.MulticastMessage(
            notification=messaging.Notification(title=title, body=body),
            data=self._stringify(data),
            tokens=tokens,
        )
        try:
            batch = await call_external(
                messaging.send_each_for_multicast, message, app=self._get_app(), timeout=self.timeout
            )
        except FirebaseError as exc:
            logger.error("Multicast push failed: %s", exc)
            return {token: False for token in tokens}

        logger.info("%d/%d push notifications sent", batch.success_count, len(tokens))
        return {token: response.success for token, response in zip(tokens, batch.responses)}
