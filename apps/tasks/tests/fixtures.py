"""Shared accounts, tags and statuses for the task tests."""
from datetime import timedelta
from unittest.mock import MagicMock

from django.utils import timezone

from apps.catalog.models import Status, Tag, TagType
from apps.identity.models import Account, Role
from apps.tasks.services import get_task_lifecycle


class TaskFixtures:
    """Accounts, tags and statuses shared by the task tests."""

    def setUp(self):
        self.admin = Account.objects.create(
            name='Root', email='root@test.com', mobile='9000000001', role=Role.ADMIN, is_active=True,
        )
        self.manager = Account.objects.create(
            name='Mona', email='mona@test.com', mobile='9000000002', role=Role.MANAGER,
            is_active=True, created_by=self.admin,
        )
        self.other_manager = Account.objects.create(
            name='Omar', email='omar@test.com', mobile='9000000003', role=Role.MANAGER,
            is_active=True, created_by=self.admin,
        )
        self.requester = Account.objects.create(
            name='Raj', email='raj@test.com', mobile='9000000004', role=Role.REQUESTER,
            is_active=True, created_by=self.admin,
        )
        self.executor = Account.objects.create(
            name='Esha', email='esha@test.com', mobile='9000000005', role=Role.EXECUTOR,
            is_active=True, created_by=self.manager,
        )
        self.executor2 = Account.objects.create(
            name='Eli', email='eli@test.com', mobile='9000000006', role=Role.EXECUTOR,
            is_active=True, created_by=self.manager,
        )

        self.status_new = Status.objects.create(name='New', color='#3B82F6')
        self.status_progress = Status.objects.create(name='In Progress', color='#F59E0B')
        self.status_done = Status.objects.create(name='Completed', color='#10B981')

        self.tag_bug = Tag.objects.create(label='Bug', type=TagType.TASK, color='#EF4444')
        self.tag_mona = Tag.objects.create(label='Mona', type=TagType.USER, color='#111111')
        self.tag_omar = Tag.objects.create(label='Omar', type=TagType.USER, color='#222222')

        self.notifier = MagicMock()
        self.lifecycle = get_task_lifecycle()
        self.lifecycle.notifier = self.notifier

    def payload(self, **overrides):
        data = {
            'title': 'Fix login',
            'description': 'Login fails on Safari',
            'priority': 'high',
            'due_date': (timezone.now() + timedelta(days=3)).isoformat(),
            'tags': ['Bug', 'Mona'],
            'assigned_to': str(self.executor.id),
            'is_self': False,
        }
        data.update(overrides)
        return data

    def make_task(self, creator=None, **overrides):
        creator = creator or self.requester
        return self.lifecycle.create_task(self.payload(**overrides), creator.id)

