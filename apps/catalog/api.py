"""
API endpoints for Catalog app.

Tags and statuses are read by every signed-in account; creating a status
is reserved for admins.
"""
import logging
from typing import Optional

from django.http import HttpRequest
from ninja import Router

from apps.core.log_meta import build_log_meta
from apps.core.responses import respond
from apps.identity.api import require_account
from .schemas import StatusCreate, TagCreate
from .services import create_status, create_tag, list_statuses, list_tags

logger = logging.getLogger(__name__)

tag_router = Router(tags=["Tags"])
status_router = Router(tags=["Status"])


@tag_router.post("/create", auth=None)
def create_tag_endpoint(request: HttpRequest, payload: TagCreate):
    require_account(request)
    logger.info("Attempt to create a new tag", extra=build_log_meta(request, label=payload.label))

    tag = create_tag(payload.label, payload.type, payload.color)
    return respond(201, "CREATED", "Tag created successfully", tag)


@tag_router.get("/fetch", auth=None)
def fetch_tags(request: HttpRequest, type: Optional[str] = None):
    require_account(request)
    tags = list_tags(type)
    if not tags:
        return respond(200, "SUCCESS", "No tags found", [])
    return respond(200, "SUCCESS", "Tags fetched successfully", tags)


@status_router.post("/create", auth=None)
def create_status_endpoint(request: HttpRequest, payload: StatusCreate):
    account = require_account(request)
    logger.info("Attempt to create a new status", extra=build_log_meta(request, name=payload.name))

    status = create_status(payload.name, payload.color, actor_role=account.role)
    return respond(201, "CREATED", "Status created successfully", status)


@status_router.get("/fetch", auth=None)
def fetch_statuses(request: HttpRequest):
    require_account(request)
    statuses = list_statuses()
    if not statuses:
        return respond(200, "SUCCESS", "No statuses found", [])
    return respond(200, "SUCCESS", "Statuses fetched successfully", statuses)
