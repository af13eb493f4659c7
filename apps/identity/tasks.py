from celery import shared_task
from apps.core.backends.local_backend import register_handler
from apps.identity.token_service import TokenService
import logging

logger = logging.getLogger(__name__)


@shared_task
def clear_expired_reset_tokens():
    """
    Clear reset/activation tokens whose expiry has passed.

    Scheduled by Celery beat every 5 minutes.
    """
    cleared = TokenService.clear_expired_tokens()
    logger.info(f"Cleared {cleared} expired reset tokens")
    return cleared


@register_handler("clear_expired_tokens")
def clear_expired_tokens_handler():
    return TokenService.clear_expired_tokens()
