"""DTOs for Tasks app - references are resolved so clients never see bare ids."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID


@dataclass(frozen=True)
class AccountRefDTO:
    id: UUID
    name: str
    email: str
    role: str


@dataclass(frozen=True)
class TagRefDTO:
    id: UUID
    label: str
    color: str
    type: str


@dataclass(frozen=True)
class StatusRefDTO:
    id: UUID
    name: str
    color: str


@dataclass(frozen=True)
class CommentDTO:
    id: UUID
    comment: str
    author: Optional[AccountRefDTO]
    created_at: datetime


@dataclass(frozen=True)
class TaskDTO:
    id: UUID
    title: str
    description: str
    priority: str
    status: Optional[StatusRefDTO]
    tags: List[TagRefDTO]
    assigned_to: Optional[AccountRefDTO]
    created_by: Optional[AccountRefDTO]
    updated_by: Optional[AccountRefDTO]
    due_date: datetime
    completed_at: Optional[datetime]
    is_active: bool
    is_deleted: bool
    is_self: bool
    created_at: datetime
    updated_at: datetime
    comments: List[CommentDTO] = field(default_factory=list)


@dataclass(frozen=True)
class TaskPage:
    """One page of a task listing plus the unpaginated total."""
    tasks: List[TaskDTO]
    total_count: int
