"""
Task lifecycle: creation, assignment, status transitions and listings.

TaskLifecycle reads accounts, tags and statuses only through the lookups in
apps.tasks.ports and asks apps.identity.permissions before every mutation.
Push notifications are handed to the injected notifier once the surrounding
transaction commits.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional
from uuid import UUID

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.core.errors import (
    AuthorizationDenied,
    Conflict,
    InternalError,
    NotFound,
    ValidationFailed,
)
from apps.core.validators import clean_str, missing_fields, parse_id
from apps.identity.models import Role
from apps.identity.permissions import (
    TaskAction,
    TaskContext,
    authorize,
    can_delete_comment,
    can_delete_task,
    check_role,
    task_scope_filter,
)
from .dtos import AccountRefDTO, CommentDTO, StatusRefDTO, TagRefDTO, TaskDTO, TaskPage
from .models import Priority, SelfTaskMarker, Task, TaskComment
from .ports import AccountLookup, AccountRecord, StatusLookup, TagLookup
from .schemas import TagAction

logger = logging.getLogger(__name__)

Notifier = Callable[[UUID, str, Dict[str, Any]], Any]

REQUIRED_TASK_FIELDS = ['title', 'description', 'priority', 'due_date', 'tags', 'assigned_to', 'is_self']

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 1000
DEFAULT_PAGE_SIZE = 20


# =============================================================================
# DTO mapping
# =============================================================================

def _account_ref(account) -> Optional[AccountRefDTO]:
    if account is None:
        return None
    return AccountRefDTO(id=account.id, name=account.name, email=account.email, role=account.role)


def to_task_dto(task: Task) -> TaskDTO:
    """Map a Task loaded through with_references() to its display form."""
    return TaskDTO(
        id=task.id,
        title=task.title,
        description=task.description,
        priority=task.priority,
        status=StatusRefDTO(id=task.status.id, name=task.status.name, color=task.status.color),
        tags=[
            TagRefDTO(id=tag.id, label=tag.label, color=tag.color, type=tag.type)
            for tag in task.tags.all()
        ],
        assigned_to=_account_ref(task.assigned_to),
        created_by=_account_ref(task.created_by),
        updated_by=_account_ref(task.updated_by),
        due_date=task.due_date,
        completed_at=task.completed_at,
        is_active=task.is_active,
        is_deleted=task.is_deleted,
        is_self=task.is_self,
        created_at=task.created_at,
        updated_at=task.updated_at,
        comments=[
            CommentDTO(
                id=comment.id,
                comment=comment.comment,
                author=_account_ref(comment.author),
                created_at=comment.created_at,
            )
            for comment in task.comments.all()
        ],
    )


def with_references(queryset):
    return queryset.select_related(
        'status', 'assigned_to', 'created_by', 'updated_by'
    ).prefetch_related('tags', 'comments__author')


# =============================================================================
# Input helpers
# =============================================================================

def _parse_due_date(value) -> datetime:
    due_date = value if isinstance(value, datetime) else None
    if due_date is None and isinstance(value, str):
        try:
            due_date = parse_datetime(value.strip())
        except ValueError:
            due_date = None
    if due_date is None:
        raise ValidationFailed("Invalid due_date format")
    if timezone.is_naive(due_date):
        due_date = timezone.make_aware(due_date)
    return due_date


def _clean_labels(tags) -> List[str]:
    if not isinstance(tags, (list, tuple)):
        raise ValidationFailed("Tags must be a list of tag names")
    labels = []
    for tag in tags:
        label = clean_str(tag)
        if label and label not in labels:
            labels.append(label)
    return labels


def _page_bounds(limit, offset) -> tuple:
    try:
        limit = int(limit or DEFAULT_PAGE_SIZE)
        offset = int(offset or 0)
    except (TypeError, ValueError):
        raise ValidationFailed("limit and offset must be numbers")
    return max(limit, 1), max(offset, 0)


class TaskLifecycle:
    def __init__(
        self,
        accounts: AccountLookup,
        tags: TagLookup,
        statuses: StatusLookup,
        notifier: Optional[Notifier] = None,
    ):
        self.accounts = accounts
        self.tags = tags
        self.statuses = statuses
        self.notifier = notifier

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _get_actor(self, actor_id) -> AccountRecord:
        actor = self.accounts.get(parse_id(actor_id, "user id"))
        if actor is None:
            logger.error(f"NOT_FOUND: No such user found {actor_id}")
            raise NotFound("No such user found")
        return actor

    def _get_task(self, task_id: UUID) -> Task:
        task = Task.objects.filter(id=task_id).first()
        if task is None:
            logger.error(f"NOT_FOUND: No such task found {task_id}")
            raise NotFound("No such task found")
        return task

    def _context(self, actor: AccountRecord, task: Task, **extra) -> TaskContext:
        return TaskContext(
            actor_id=actor.id,
            actor_name=actor.name,
            creator_id=task.created_by_id,
            task_assignee_id=task.assigned_to_id,
            tag_labels=frozenset(task.tags.values_list('label', flat=True)),
            is_self=task.is_self,
            **extra,
        )

    def _load(self, task_id: UUID) -> TaskDTO:
        return to_task_dto(with_references(Task.objects.filter(id=task_id)).get())

    def _notify_on_commit(self, account_id: Optional[UUID], event: str, payload: Dict[str, Any]) -> None:
        if self.notifier is None or account_id is None:
            return
        notifier = self.notifier
        transaction.on_commit(lambda: notifier(account_id, event, payload))

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create_task(self, payload: dict, creator_id) -> TaskDTO:
        """
        Create a task, and its SelfTaskMarker when is_self is set.

        The duplicate re-check, the task row, its tags and the marker are
        written in one transaction; the unique constraint on
        (title, created_by, is_self) catches a race with a concurrent insert.
        """
        data = dict(payload)
        missing = missing_fields(data, REQUIRED_TASK_FIELDS)
        if missing:
            logger.error(f"BAD_REQUEST: Missing required fields: {', '.join(missing)}")
            raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")

        title = clean_str(data['title'])
        description = clean_str(data['description'])
        if not title or not description:
            raise ValidationFailed("Missing required fields: title, description")
        if len(title) > TITLE_MAX_LENGTH:
            raise ValidationFailed(f"Title must be at most {TITLE_MAX_LENGTH} characters")
        if len(description) > DESCRIPTION_MAX_LENGTH:
            raise ValidationFailed(f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters")

        priority = (clean_str(data['priority']) or '').lower()
        if priority not in Priority.values:
            raise ValidationFailed("Invalid priority specified")

        creator_id = parse_id(creator_id, "created_by")
        assignee_id = parse_id(data['assigned_to'], "assigned_to")
        if creator_id == assignee_id:
            logger.error(f"BAD_REQUEST: {creator_id} tried to assign a task to themselves")
            raise ValidationFailed("You cannot assign task to yourself")

        is_self = data['is_self']
        if not isinstance(is_self, bool):
            raise ValidationFailed("is_self must be a boolean value")

        due_date = _parse_due_date(data['due_date'])

        labels = _clean_labels(data['tags'])
        if not labels:
            logger.error("BAD_REQUEST: At least one tag is required")
            raise ValidationFailed("At least one tag is required")

        default_status = self.statuses.get_by_name(settings.DEFAULT_TASK_STATUS)
        if default_status is None:
            logger.error(f"BAD_REQUEST: Default status '{settings.DEFAULT_TASK_STATUS}' not found")
            raise ValidationFailed(f"Default status '{settings.DEFAULT_TASK_STATUS}' not found")

        tag_records = self.tags.find_by_labels(labels)
        if {tag.label for tag in tag_records} != set(labels):
            logger.error(f"BAD_REQUEST: One or more tag names are invalid: {labels}")
            raise ValidationFailed("One or more tag names are invalid")

        creator = self.accounts.get(creator_id)
        if creator is None:
            logger.error(f"NOT_FOUND: Creator {creator_id} does not exist")
            raise NotFound("User doesn't exist to create task")
        assignee = self.accounts.get(assignee_id)
        if assignee is None:
            logger.error(f"NOT_FOUND: Assignee {assignee_id} does not exist")
            raise NotFound("User doesn't exist to assign task")

        action = TaskAction.CREATE_SELF_TASK if is_self else TaskAction.CREATE_TASK
        authorize(
            creator.role,
            action,
            TaskContext(
                actor_id=creator.id,
                actor_name=creator.name,
                creator_id=creator.id,
                assignee_id=assignee.id,
                assignee_role=assignee.role,
                is_self=is_self,
            ),
        ).raise_if_denied()

        try:
            with transaction.atomic():
                duplicate = Task.objects.filter(
                    title=title,
                    created_by_id=creator.id,
                    is_self=is_self,
                    is_deleted=False,
                ).exists()
                if duplicate:
                    logger.error(f"CONFLICT: {creator.id} already has a task titled {title}")
                    raise Conflict("You already have a task with this title")

                task = Task.objects.create(
                    title=title,
                    description=description,
                    priority=priority,
                    status_id=default_status.id,
                    assigned_to_id=assignee.id,
                    due_date=due_date,
                    created_by_id=creator.id,
                    is_self=is_self,
                )
                task.tags.set([tag.id for tag in tag_records])

                if is_self:
                    SelfTaskMarker.objects.create(account_id=creator.id, task_id=task.id)
        except IntegrityError:
            logger.error(f"CONFLICT: Duplicate task {title} for {creator.id}")
            raise Conflict("Task with same title already exists")
        except DatabaseError:
            logger.exception(f"INTERNAL_SERVER_ERROR: Error creating task {title}")
            raise InternalError("Error creating task")

        logger.info(f"CREATED: Task {task.id} created by {creator.id} (self={is_self})")

        self._notify_on_commit(
            assignee.id,
            'task_assigned',
            {'task_id': str(task.id), 'title': task.title, 'assigned_by': creator.name},
        )
        return self._load(task.id)

    def assign_task(self, task_id, assignee_id, actor_id) -> TaskDTO:
        task_id = parse_id(task_id, "task id")
        assignee_id = parse_id(assignee_id, "user id")
        actor = self._get_actor(actor_id)

        assignee = self.accounts.get(assignee_id)
        if assignee is None:
            logger.error(f"NOT_FOUND: No such user found to assign task {assignee_id}")
            raise NotFound("No such user found to assign task")

        task = Task.objects.filter(id=task_id).first()
        if task is None:
            logger.error(f"NOT_FOUND: Task {task_id} not found")
            raise NotFound("Task not found")

        authorize(
            actor.role,
            TaskAction.ASSIGN_TASK,
            self._context(actor, task, assignee_id=assignee.id, assignee_role=assignee.role),
        ).raise_if_denied()

        Task.objects.filter(id=task.id).update(
            assigned_to_id=assignee.id,
            updated_by_id=actor.id,
            updated_at=timezone.now(),
        )
        logger.info(f"Task {task.id} assigned to {assignee.id} by {actor.id}")

        self._notify_on_commit(
            assignee.id,
            'task_assigned',
            {'task_id': str(task.id), 'title': task.title, 'assigned_by': actor.name},
        )
        return self._load(task.id)

    def change_status(self, task_id, status_id, actor_id) -> TaskDTO:
        """
        Move a task to another status.

        Moving to the current status is refused without touching the row.
        completed_at follows the COMPLETED_STATUS status name.
        """
        task_id = parse_id(task_id, "task id")
        status_id = parse_id(status_id, "status id")
        actor = self._get_actor(actor_id)

        check_role(actor.role, TaskAction.CHANGE_STATUS).raise_if_denied()

        task = self._get_task(task_id)

        authorize(
            actor.role,
            TaskAction.CHANGE_STATUS,
            self._context(actor, task, current_status_id=task.status_id, target_status_id=status_id),
        ).raise_if_denied()

        status = self.statuses.get(status_id)
        if status is None:
            logger.error(f"NOT_FOUND: No such status found {status_id}")
            raise NotFound("No such status found")

        now = timezone.now()
        Task.objects.filter(id=task.id).update(
            status_id=status.id,
            updated_by_id=actor.id,
            completed_at=now if status.name == settings.COMPLETED_STATUS else None,
            updated_at=now,
        )
        logger.info(f"SUCCESS: Task {task.id} moved to status {status.name} by {actor.id}")

        if task.created_by_id != actor.id:
            self._notify_on_commit(
                task.created_by_id,
                'task_status_changed',
                {'task_id': str(task.id), 'title': task.title, 'status': status.name},
            )
        return self._load(task.id)

    def update_task_tag(self, task_id, tag_id, action, actor_id) -> TaskDTO:
        task_id = parse_id(task_id, "task id")
        tag_id = parse_id(tag_id, "tag id")
        action = (clean_str(action) or TagAction.ADD).lower()
        if action not in (TagAction.ADD, TagAction.REMOVE):
            raise ValidationFailed("Action must be either 'add' or 'remove'")

        actor = self._get_actor(actor_id)
        task = self._get_task(task_id)

        tag = self.tags.get(tag_id)
        if tag is None:
            logger.error(f"NOT_FOUND: No such tag found {tag_id}")
            raise NotFound("No such tag found")

        authorize(actor.role, TaskAction.VIEW_TASK_SCOPE, self._context(actor, task)).raise_if_denied()

        present = task.tags.filter(id=tag.id).exists()
        if action == TagAction.REMOVE:
            if not present:
                raise Conflict("Tag does not exist in the task")
            task.tags.remove(tag.id)
        else:
            if present:
                raise Conflict("Tag already exists in the task")
            task.tags.add(tag.id)

        Task.objects.filter(id=task.id).update(updated_by_id=actor.id, updated_at=timezone.now())
        logger.info(f"Tag {tag.label} {action} on task {task.id} by {actor.id}")
        return self._load(task.id)

    def add_comment(self, task_id, author_id, text) -> TaskDTO:
        task_id = parse_id(task_id, "task id")
        text = clean_str(text)
        if not text:
            raise ValidationFailed("Comment is required")

        task = self._get_task(task_id)
        author = self._get_actor(author_id)

        authorize(author.role, TaskAction.VIEW_TASK_SCOPE, self._context(author, task)).raise_if_denied()

        comment = TaskComment.objects.create(task_id=task.id, author_id=author.id, comment=text)
        logger.info(f"Comment {comment.id} added to task {task.id} by {author.id}")
        return self._load(task.id)

    def delete_comment(self, task_id, comment_id, actor_id) -> TaskDTO:
        task_id = parse_id(task_id, "task id")
        comment_id = parse_id(comment_id, "comment id")
        actor = self._get_actor(actor_id)
        task = self._get_task(task_id)

        comment = TaskComment.objects.filter(id=comment_id, task_id=task.id).first()
        if comment is None:
            logger.error(f"NOT_FOUND: Comment {comment_id} not in task {task.id}")
            raise NotFound("No such comment found in the task")

        can_delete_comment(actor.role, actor.id, comment.author_id).raise_if_denied()

        comment.delete()
        logger.info(f"Comment {comment_id} deleted from task {task.id} by {actor.id}")
        return self._load(task.id)

    def soft_delete_task(self, task_id, actor_id) -> None:
        task_id = parse_id(task_id, "task id")
        actor = self._get_actor(actor_id)

        task = Task.objects.filter(id=task_id, is_deleted=False).first()
        if task is None:
            raise NotFound("No such task found")

        can_delete_task(actor.role, actor.id, task.created_by_id).raise_if_denied()

        Task.objects.filter(id=task.id).update(
            is_deleted=True,
            is_active=False,
            updated_by_id=actor.id,
            updated_at=timezone.now(),
        )
        logger.info(f"Task {task.id} soft-deleted by {actor.id}")

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def fetch_task(self, task_id, actor_id) -> TaskDTO:
        task_id = parse_id(task_id, "task id")
        actor = self._get_actor(actor_id)
        task = self._get_task(task_id)
        authorize(actor.role, TaskAction.VIEW_TASK_SCOPE, self._context(actor, task)).raise_if_denied()
        return self._load(task.id)

    def fetch_scoped(self, actor_id, filters: Optional[dict] = None, limit=DEFAULT_PAGE_SIZE, offset=0) -> TaskPage:
        """
        List the tasks the actor's role lets them see, oldest due date first.

        Filters narrow the role scope and never widen it. Self tasks are left
        to fetch_self_tasks; soft-deleted tasks are still listed.
        """
        actor = self.accounts.get(parse_id(actor_id, "user id"))
        if actor is None:
            raise AuthorizationDenied("Missing or invalid user identity")
        check_role(actor.role, TaskAction.VIEW_TASK_SCOPE).raise_if_denied()

        limit, offset = _page_bounds(limit, offset)

        manager_tag_ids: Iterable[UUID] = ()
        if actor.role == Role.MANAGER:
            manager_tag_ids = [tag.id for tag in self.tags.find_by_labels([actor.name])]

        queryset = Task.objects.filter(task_scope_filter(actor.id, actor.role, manager_tag_ids))
        queryset = self._apply_filters(queryset, filters or {}).filter(is_self=False)
        queryset = queryset.distinct().order_by('due_date', 'created_at')

        total_count = queryset.count()
        tasks = [to_task_dto(task) for task in with_references(queryset)[offset:offset + limit]]

        if not tasks:
            logger.info(f"NOT_FOUND: No tasks found for {actor.id} with filters {filters}")
            raise NotFound("No tasks found for the given filter", data=[])

        logger.info(f"Fetched {len(tasks)} of {total_count} tasks for {actor.id}")
        return TaskPage(tasks=tasks, total_count=total_count)

    def _apply_filters(self, queryset, filters: dict):
        title = clean_str(filters.get('title'))
        if title:
            queryset = queryset.filter(title__icontains=title)

        for field in ('created_by', 'assigned_to', 'updated_by', 'status'):
            if filters.get(field):
                queryset = queryset.filter(**{f"{field}_id": parse_id(filters[field], field)})

        priority = clean_str(filters.get('priority'))
        if priority:
            queryset = queryset.filter(priority=priority.lower())

        if filters.get('due_before'):
            queryset = queryset.filter(due_date__lte=_parse_due_date(filters['due_before']))

        tag_ids = filters.get('tags')
        if tag_ids:
            if isinstance(tag_ids, str):
                tag_ids = tag_ids.split(',')
            queryset = queryset.filter(tags__id__in=[parse_id(tag_id, "tags") for tag_id in tag_ids])

        return queryset

    def fetch_self_tasks(self, account_id, limit=DEFAULT_PAGE_SIZE, offset=0) -> TaskPage:
        account_id = parse_id(account_id, "user id")
        limit, offset = _page_bounds(limit, offset)

        task_ids = SelfTaskMarker.objects.filter(account_id=account_id).values('task_id')
        queryset = Task.objects.filter(id__in=task_ids).order_by('due_date', 'created_at')

        total_count = queryset.count()
        tasks = [to_task_dto(task) for task in with_references(queryset)[offset:offset + limit]]

        if not tasks:
            logger.info(f"NOT_FOUND: No self task found for {account_id}")
            raise NotFound("No self task found", data=[])

        return TaskPage(tasks=tasks, total_count=total_count)
