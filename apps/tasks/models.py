import uuid
from django.db import models

from apps.catalog.models import Status, Tag
from apps.identity.models import Account


class Priority(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'


class Task(models.Model):
    """
    A unit of work raised by one account and carried out by another.

    Self tasks (is_self=True) are personal to-dos; they are listed through
    SelfTaskMarker instead of the scoped fetch.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=100)
    description = models.TextField(max_length=1000)
    priority = models.CharField(max_length=10, choices=Priority.choices, db_index=True)
    status = models.ForeignKey(Status, on_delete=models.PROTECT, related_name='tasks')
    tags = models.ManyToManyField(Tag, related_name='tasks', blank=True)
    assigned_to = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='assigned_tasks',
    )
    due_date = models.DateTimeField(db_index=True)
    created_by = models.ForeignKey(Account, on_delete=models.PROTECT, related_name='created_tasks')
    updated_by = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='updated_tasks',
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    is_deleted = models.BooleanField(default=False)
    is_self = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['due_date']
        constraints = [
            models.UniqueConstraint(
                fields=['title', 'created_by', 'is_self'],
                name='unique_task_title_per_creator',
            ),
        ]

    def __str__(self):
        return self.title


class TaskComment(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='comments')
    author = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='task_comments')
    comment = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return f"Comment by {self.author_id} on {self.task_id}"


class SelfTaskMarker(models.Model):
    """Index of an account's self tasks, written in the same transaction as the task."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    account = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='self_task_markers')
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='self_markers')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['account', 'task'], name='unique_self_task_marker'),
        ]
