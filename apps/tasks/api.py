"""
API endpoints for Tasks app.

Every endpoint requires a session; the acting account always comes from
the session, never from the request body.
"""
import logging
from datetime import datetime
from typing import Optional

from django.http import HttpRequest
from ninja import Router

from apps.core.log_meta import build_log_meta
from apps.core.responses import respond
from apps.identity.api import require_account
from .lifecycle import DEFAULT_PAGE_SIZE
from .schemas import CommentCreate, CommentDelete, StatusChange, TagAction, TagUpdate, TaskAssign, TaskCreate
from .services import get_task_lifecycle

logger = logging.getLogger(__name__)

router = Router(tags=["Tasks"])


@router.post("/create", auth=None)
def create_task(request: HttpRequest, payload: TaskCreate):
    """Create a task, or a self task when is_self is true."""
    account = require_account(request)
    logger.info("Attempt to create a new task", extra=build_log_meta(request, title=payload.title))

    task = get_task_lifecycle().create_task(payload.model_dump(), creator_id=account.id)
    message = "Self task created successfully" if task.is_self else "Task created successfully"
    return respond(201, "CREATED", message, task)


@router.post("/assign", auth=None)
def assign_task(request: HttpRequest, payload: TaskAssign):
    account = require_account(request)
    logger.info("Attempt to assign task to a user", extra=build_log_meta(request, task_id=payload.task_id))

    task = get_task_lifecycle().assign_task(payload.task_id, payload.assignee_id, actor_id=account.id)
    return respond(200, "SUCCESS", "Task successfully assigned", task)


@router.post("/changeStatus", auth=None)
def change_status(request: HttpRequest, payload: StatusChange):
    account = require_account(request)
    logger.info("Attempt to change status", extra=build_log_meta(request, task_id=payload.task_id))

    task = get_task_lifecycle().change_status(payload.task_id, payload.status_id, actor_id=account.id)
    return respond(200, "SUCCESS", "Task status changed successfully", task)


@router.get("/scoped", auth=None)
def fetch_scoped_tasks(
    request: HttpRequest,
    title: Optional[str] = None,
    priority: Optional[str] = None,
    status: Optional[str] = None,
    created_by: Optional[str] = None,
    assigned_to: Optional[str] = None,
    updated_by: Optional[str] = None,
    due_before: Optional[datetime] = None,
    tags: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
):
    """
    List the tasks visible to the caller's role.

    `tags` is a comma separated list of tag ids.
    """
    account = require_account(request)
    filters = {
        'title': title,
        'priority': priority,
        'status': status,
        'created_by': created_by,
        'assigned_to': assigned_to,
        'updated_by': updated_by,
        'due_before': due_before,
        'tags': tags,
    }
    page = get_task_lifecycle().fetch_scoped(account.id, filters, limit=limit, offset=offset)
    return respond(200, "SUCCESS", "All tasks fetched successfully", page)


@router.get("/user/self", auth=None)
def fetch_self_tasks(request: HttpRequest, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0):
    account = require_account(request)
    page = get_task_lifecycle().fetch_self_tasks(account.id, limit=limit, offset=offset)
    return respond(200, "SUCCESS", "Self tasks fetched successfully", page)


@router.post("/tags", auth=None)
def update_task_tag(request: HttpRequest, payload: TagUpdate):
    account = require_account(request)
    task = get_task_lifecycle().update_task_tag(payload.task_id, payload.tag_id, payload.action, actor_id=account.id)
    removed = (payload.action or '').strip().lower() == TagAction.REMOVE
    message = "Tag removed from task successfully" if removed else "Tag added to task successfully"
    return respond(200, "SUCCESS", message, task)


@router.post("/comments", auth=None)
def add_comment(request: HttpRequest, payload: CommentCreate):
    account = require_account(request)
    task = get_task_lifecycle().add_comment(payload.task_id, account.id, payload.comment)
    return respond(200, "SUCCESS", "Comment added to task successfully", task)


@router.delete("/comments", auth=None)
def delete_comment(request: HttpRequest, payload: CommentDelete):
    account = require_account(request)
    task = get_task_lifecycle().delete_comment(payload.task_id, payload.comment_id, actor_id=account.id)
    return respond(200, "SUCCESS", "Comment deleted from task successfully", task)


@router.get("/{task_id}", auth=None)
def fetch_task(request: HttpRequest, task_id: str):
    account = require_account(request)
    task = get_task_lifecycle().fetch_task(task_id, actor_id=account.id)
    return respond(200, "SUCCESS", "Task successfully fetched", task)


@router.delete("/{task_id}", auth=None)
def delete_task(request: HttpRequest, task_id: str):
    account = require_account(request)
    get_task_lifecycle().soft_delete_task(task_id, actor_id=account.id)
    return respond(200, "SUCCESS", "Task deleted successfully")
