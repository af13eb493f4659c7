"""
Uniform response envelope.

Every endpoint answers with {code, success, message, data}. Handlers call
respond() directly on success; failures raised as ServiceError are
rendered by the exception handlers registered in register_exception_handlers().
"""
import dataclasses
import logging

from django.core.serializers.json import DjangoJSONEncoder
from django.http import HttpRequest, JsonResponse
from ninja import NinjaAPI
from ninja.errors import AuthenticationError, ValidationError

from .errors import ServiceError
from .log_meta import build_log_meta

logger = logging.getLogger(__name__)


def _to_primitive(data):
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return dataclasses.asdict(data)
    if isinstance(data, (list, tuple)):
        return [_to_primitive(item) for item in data]
    if isinstance(data, dict):
        return {key: _to_primitive(value) for key, value in data.items()}
    return data


def envelope(code: str, message: str, data=None, success: bool = True) -> dict:
    return {
        "code": code,
        "success": success,
        "message": message,
        "data": _to_primitive(data),
    }


def respond(status: int, code: str, message: str, data=None) -> JsonResponse:
    """Build an envelope response; success is derived from the status."""
    return JsonResponse(
        envelope(code, message, data, success=status < 400),
        status=status,
        encoder=DjangoJSONEncoder,
    )


def register_exception_handlers(api: NinjaAPI) -> None:
    """Render service, schema and unexpected failures as envelopes."""

    @api.exception_handler(ServiceError)
    def service_error(request: HttpRequest, exc: ServiceError):
        return respond(exc.status_code, exc.code, exc.message, exc.data)

    @api.exception_handler(ValidationError)
    def schema_error(request: HttpRequest, exc: ValidationError):
        fields = []
        for error in exc.errors:
            loc = [str(part) for part in error.get("loc", []) if part not in ("body", "payload", "query")]
            fields.append(".".join(loc) or error.get("msg", "invalid"))
        logger.warning("BAD_REQUEST: request schema rejected", extra=build_log_meta(request, fields=fields))
        return respond(400, "BAD_REQUEST", f"Invalid input: {', '.join(fields)}")

    @api.exception_handler(AuthenticationError)
    def auth_error(request: HttpRequest, exc: AuthenticationError):
        return respond(401, "UNAUTHORIZED", "Authentication required")

    @api.exception_handler(Exception)
    def unexpected_error(request: HttpRequest, exc: Exception):
        logger.exception(f"INTERNAL_SERVER_ERROR: unhandled {type(exc).__name__}", extra=build_log_meta(request))
        return respond(500, "INTERNAL_SERVER_ERROR", "Something went wrong. Please try again later")
