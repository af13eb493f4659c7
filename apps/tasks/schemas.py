"""
API Schemas for Tasks app.

Fields are optional at the schema level; the lifecycle reports missing or
malformed values with its own messages.
"""
from typing import Any, Optional

from ninja import Schema


class TagAction:
    ADD = 'add'
    REMOVE = 'remove'


class TaskCreate(Schema):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    due_date: Any = None
    tags: Any = None
    assigned_to: Optional[str] = None
    is_self: Any = None


class TaskAssign(Schema):
    task_id: Optional[str] = None
    assignee_id: Optional[str] = None


class StatusChange(Schema):
    task_id: Optional[str] = None
    status_id: Optional[str] = None


class TagUpdate(Schema):
    task_id: Optional[str] = None
    tag_id: Optional[str] = None
    action: Optional[str] = None  # 'add' or 'remove'


class CommentCreate(Schema):
    task_id: Optional[str] = None
    comment: Optional[str] = None


class CommentDelete(Schema):
    task_id: Optional[str] = None
    comment_id: Optional[str] = None
