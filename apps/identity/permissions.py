"""
Role policy for accounts and tasks.

Every role gate in the project is answered here. authorize() is a pure
function over (actor role, action, context): it reads nothing from the
database and never mutates state, so callers load what the context needs
and act on the returned Decision.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Optional, Type
from uuid import UUID

from django.db.models import Q

from apps.core.errors import (
    AuthorizationDenied,
    ServiceError,
    StateInvalid,
    ValidationFailed,
)
from .models import Role


class TaskAction:
    CREATE_TASK = "createTask"
    CREATE_SELF_TASK = "createSelfTask"
    ASSIGN_TASK = "assignTask"
    CHANGE_STATUS = "changeStatus"
    VIEW_TASK_SCOPE = "viewTaskScope"


@dataclass(frozen=True)
class TaskContext:
    """
    Facts about the task being acted on.

    assignee_* describe the proposed assignee (create/assign); task_* describe
    the stored task (assign/change status/view).
    """
    actor_id: Optional[UUID] = None
    actor_name: str = ""
    creator_id: Optional[UUID] = None
    assignee_id: Optional[UUID] = None
    assignee_role: Optional[str] = None
    task_assignee_id: Optional[UUID] = None
    tag_labels: FrozenSet[str] = field(default_factory=frozenset)
    current_status_id: Optional[UUID] = None
    target_status_id: Optional[UUID] = None
    is_self: bool = False


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""
    error: Type[ServiceError] = AuthorizationDenied

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str, error: Type[ServiceError] = AuthorizationDenied) -> "Decision":
        return cls(allowed=False, reason=reason, error=error)

    def raise_if_denied(self) -> None:
        if not self.allowed:
            raise self.error(self.reason)


# Roles allowed to perform each task action at all; scope rules apply on top.
ACTION_ROLES: Dict[str, FrozenSet[str]] = {
    TaskAction.CREATE_TASK: frozenset({Role.ADMIN, Role.MANAGER, Role.REQUESTER}),
    TaskAction.CREATE_SELF_TASK: frozenset({Role.ADMIN, Role.MANAGER, Role.REQUESTER, Role.EXECUTOR}),
    TaskAction.ASSIGN_TASK: frozenset({Role.ADMIN, Role.MANAGER}),
    TaskAction.CHANGE_STATUS: frozenset({Role.ADMIN, Role.MANAGER, Role.EXECUTOR}),
    TaskAction.VIEW_TASK_SCOPE: frozenset({Role.ADMIN, Role.MANAGER, Role.REQUESTER, Role.EXECUTOR}),
}

ROLE_DENIED_MESSAGES: Dict[str, str] = {
    TaskAction.CREATE_TASK: "You can only create self tasks",
    TaskAction.ASSIGN_TASK: "You are not authorized to assign tasks",
    TaskAction.CHANGE_STATUS: "You are not authorized to change status",
}


def manager_owns(actor_name: str, tag_labels: Iterable[str]) -> bool:
    """A manager's scope is every task carrying a tag labeled with their own name."""
    return bool(actor_name) and actor_name in set(tag_labels)


def _in_scope(actor_role: str, context: TaskContext) -> bool:
    if actor_role == Role.ADMIN:
        return True
    if actor_role == Role.MANAGER:
        return manager_owns(context.actor_name, context.tag_labels)
    if actor_role == Role.EXECUTOR:
        return context.actor_id in (context.task_assignee_id, context.creator_id)
    if actor_role == Role.REQUESTER:
        return context.actor_id == context.creator_id
    return False


def check_role(actor_role: str, action: str) -> Decision:
    """Role gate alone, for callers that must refuse before loading the task."""
    if actor_role in ACTION_ROLES[action]:
        return Decision.allow()
    return Decision.deny(ROLE_DENIED_MESSAGES.get(action, "You are not authorized to do this action"))


def authorize(actor_role: str, action: str, context: TaskContext) -> Decision:
    """
    Decide whether `actor_role` may perform `action` on the task in `context`.

    Self-assignment is refused for every role, and a status change to the
    current status is refused as a no-op transition.
    """
    if action not in ACTION_ROLES:
        raise ValueError(f"Unknown task action: {action}")

    if action in (TaskAction.CREATE_TASK, TaskAction.CREATE_SELF_TASK):
        if context.assignee_id is not None and context.assignee_id == context.creator_id:
            return Decision.deny("You cannot assign task to yourself", ValidationFailed)
        if actor_role not in ACTION_ROLES[action]:
            return Decision.deny(ROLE_DENIED_MESSAGES[action], ValidationFailed)
        if action == TaskAction.CREATE_TASK and context.assignee_role == Role.REQUESTER:
            return Decision.deny("You cannot assign task to a requester", ValidationFailed)
        return Decision.allow()

    role_decision = check_role(actor_role, action)
    if not role_decision.allowed:
        return role_decision

    if action == TaskAction.ASSIGN_TASK:
        if context.assignee_role == Role.REQUESTER:
            return Decision.deny("You cannot assign task to a requester", StateInvalid)
        if context.assignee_id is not None and context.assignee_id == context.creator_id:
            return Decision.deny("You cannot assign task to yourself", ValidationFailed)

    if action == TaskAction.CHANGE_STATUS:
        if context.current_status_id is not None and context.current_status_id == context.target_status_id:
            return Decision.deny("Cannot update with same status", StateInvalid)

    if not _in_scope(actor_role, context):
        return Decision.deny("This task is outside your scope")

    return Decision.allow()


def task_scope_filter(actor_id: UUID, actor_role: str, manager_tag_ids: Iterable[UUID] = ()) -> Q:
    """
    Query filter for the tasks an actor may list.

    requester: tasks they created; executor: tasks assigned to them;
    manager: tasks tagged with their own name; admin: everything.
    """
    if actor_role == Role.REQUESTER:
        return Q(created_by_id=actor_id)
    if actor_role == Role.EXECUTOR:
        return Q(assigned_to_id=actor_id)
    if actor_role == Role.MANAGER:
        return Q(tags__id__in=list(manager_tag_ids))
    return Q()


def can_delete_task(actor_role: str, actor_id: UUID, creator_id: Optional[UUID]) -> Decision:
    if actor_role == Role.ADMIN or actor_id == creator_id:
        return Decision.allow()
    return Decision.deny("Only the task creator can delete this task")


def can_delete_comment(actor_role: str, actor_id: UUID, author_id: Optional[UUID]) -> Decision:
    if actor_role == Role.ADMIN or actor_id == author_id:
        return Decision.allow()
    return Decision.deny("You can only delete your own comments")


# =============================================================================
# Account creation
# =============================================================================

# Role being created -> role its creator must hold (None: no creator needed)
ACCOUNT_CREATION_MATRIX: Dict[str, Optional[str]] = {
    Role.ADMIN: None,
    Role.MANAGER: Role.ADMIN,
    Role.REQUESTER: Role.ADMIN,
    Role.EXECUTOR: Role.MANAGER,
}

CREATION_DENIED_MESSAGES: Dict[str, str] = {
    Role.EXECUTOR: "Only manager can create an executor",
}


def requires_creator(role: str) -> bool:
    return ACCOUNT_CREATION_MATRIX.get(role) is not None


def check_account_creation(role: str, creator_role: Optional[str]) -> Decision:
    required = ACCOUNT_CREATION_MATRIX.get(role)
    if required is None or creator_role == required:
        return Decision.allow()
    return Decision.deny(
        CREATION_DENIED_MESSAGES.get(role, "Only admin can create this user"),
        ValidationFailed,
    )


def can_manage_account(actor_role: str, actor_id: UUID, target_created_by: Optional[UUID]) -> bool:
    """Admins manage every account; managers only the accounts they created."""
    if actor_role == Role.ADMIN:
        return True
    return actor_role == Role.MANAGER and target_created_by == actor_id
