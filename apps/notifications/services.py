"""Services for Notifications app."""
import logging
from typing import Any, Dict
from uuid import UUID

from apps.core.task_service import TaskService
from .presence import registry

logger = logging.getLogger(__name__)


def notify(account_id: UUID, event: str, payload: Dict[str, Any]) -> None:
    """
    Queue a push event for an account.

    Fire-and-forget: runs after the task mutation committed, so a dispatch
    failure is logged and never reported to the caller.
    """
    try:
        TaskService.push_notification(account_id=account_id, event=event, payload=payload)
    except Exception as e:
        logger.error(f"Push '{event}' for account {account_id} could not be queued: {e}")


def deliver_to_connection(account_id, event: str, payload: Dict[str, Any]) -> bool:
    """Place the event in the account's connection outbox; False when offline."""
    connection_id = registry.lookup(account_id)
    if not connection_id:
        logger.info(f"Account {account_id} is offline, dropping '{event}'")
        return False

    registry.enqueue(connection_id, {"event": event, "payload": payload})
    logger.info(f"Push '{event}' queued for account {account_id} on {connection_id}")
    return True
