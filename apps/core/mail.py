"""
Mail gateway.

deliver() never raises: it returns a DeliveryResult so each caller decides
whether a failed delivery is fatal (account activation) or best-effort
(password reset resend).
"""
import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    ok: bool
    error: Optional[str] = None


def deliver(to_email: str, subject: str, body: str) -> DeliveryResult:
    try:
        sent = send_mail(
            subject=subject,
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[to_email],
            fail_silently=False,
        )
    except Exception as e:
        logger.error(f"Mail delivery to {to_email} failed: {e}")
        return DeliveryResult(ok=False, error=str(e))

    if not sent:
        logger.error(f"Mail delivery to {to_email} was not accepted by the backend")
        return DeliveryResult(ok=False, error="not accepted")

    logger.info(f"Mail '{subject}' delivered to {to_email}")
    return DeliveryResult(ok=True)
