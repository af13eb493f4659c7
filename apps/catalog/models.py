import uuid
from django.db import models


class TagType(models.TextChoices):
    TASK = 'task', 'Task'
    PROJECT = 'project', 'Project'
    USER = 'user', 'User'
    PRIORITY = 'priority', 'Priority'


class Tag(models.Model):
    """
    Label attached to tasks. A 'user' tag labeled with a manager's name puts
    the task in that manager's scope.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    label = models.CharField(max_length=100, db_index=True)
    color = models.CharField(max_length=7, default='#000000')
    type = models.CharField(max_length=20, choices=TagType.choices, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['label']
        constraints = [
            models.UniqueConstraint(fields=['label', 'type'], name='unique_tag_label_type'),
        ]

    def __str__(self):
        return f"{self.label} ({self.type})"


class Status(models.Model):
    """Admin-managed task status. The set is open; 'New' is the default."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)
    color = models.CharField(max_length=7)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'statuses'

    def __str__(self):
        return self.name
