"""
Presence registry for the real-time gateway.

Maps an account to its live connection id and holds a per-connection outbox
the gateway drains. State lives in the Django cache (Redis in production),
so it is shared across processes and survives restarts.

The websocket gateway, which runs outside this project, calls connect() when a
socket authenticates, disconnect() when it closes and drain() to fetch the
events queued for a connection. Inside the project only deliver_to_connection()
writes here, through lookup() and enqueue().
"""
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

PRESENCE_KEY = "presence:{account_id}"
OUTBOX_KEY = "push:outbox:{connection_id}"


class PresenceRegistry:

    def __init__(self, backend=None, ttl_seconds: Optional[int] = None):
        self.cache = backend or cache
        self.ttl = ttl_seconds or settings.PRESENCE_TTL_SECONDS

    def connect(self, account_id: UUID, connection_id: str) -> None:
        self.cache.set(PRESENCE_KEY.format(account_id=account_id), connection_id, self.ttl)
        logger.info(f"Account {account_id} connected ({connection_id})")

    def disconnect(self, account_id: UUID, connection_id: Optional[str] = None) -> None:
        """Drop the presence entry; with connection_id, only if it is still current."""
        key = PRESENCE_KEY.format(account_id=account_id)
        if connection_id is not None and self.cache.get(key) != connection_id:
            return
        self.cache.delete(key)
        logger.info(f"Account {account_id} disconnected")

    def lookup(self, account_id: UUID) -> Optional[str]:
        return self.cache.get(PRESENCE_KEY.format(account_id=account_id))

    def enqueue(self, connection_id: str, message: Dict[str, Any]) -> None:
        key = OUTBOX_KEY.format(connection_id=connection_id)
        outbox = self.cache.get(key) or []
        outbox.append(message)
        self.cache.set(key, outbox, self.ttl)

    def drain(self, connection_id: str) -> List[Dict[str, Any]]:
        key = OUTBOX_KEY.format(connection_id=connection_id)
        outbox = self.cache.get(key) or []
        self.cache.delete(key)
        return outbox


registry = PresenceRegistry()
