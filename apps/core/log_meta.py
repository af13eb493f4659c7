from typing import Optional

from django.http import HttpRequest


def build_log_meta(request: Optional[HttpRequest], **extra) -> dict:
    """
    Request context attached to log records via `extra=`.

    Keys are prefixed so they never collide with LogRecord attributes.
    """
    meta = {
        "req_ip": request.META.get("REMOTE_ADDR") if request else None,
        "req_user_agent": request.META.get("HTTP_USER_AGENT", "unknown") if request else "unknown",
    }
    meta.update({f"ctx_{key}": value for key, value in extra.items()})
    return meta
