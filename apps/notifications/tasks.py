from celery import shared_task
from apps.core.backends.local_backend import register_handler
from apps.notifications.services import deliver_to_connection
import logging

logger = logging.getLogger(__name__)


@shared_task
def deliver_push(account_id, event, payload):
    """
    Deliver a push event to the account's live connection, if any.
    """
    return deliver_to_connection(account_id, event, payload)


@register_handler("push_notification")
def push_notification_handler(account_id, event, payload):
    return deliver_to_connection(account_id, event, payload)
