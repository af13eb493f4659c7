"""
Tests for the task lifecycle.
Covers creation (including the self-task dual write), assignment, status
transitions, scoped listings, tags, comments and soft deletion.
"""
from unittest.mock import patch
from uuid import uuid4

from django.db import DatabaseError
from django.test import TestCase, override_settings

from apps.catalog.models import Status
from apps.core.errors import AuthorizationDenied, Conflict, InternalError, NotFound, StateInvalid, ValidationFailed
from apps.tasks.models import SelfTaskMarker, Task, TaskComment
from apps.tasks.tests.fixtures import TaskFixtures


class CreateTaskTest(TaskFixtures, TestCase):

    def test_create_task_resolves_references(self):
        task = self.make_task()

        self.assertEqual(task.status.name, 'New')
        self.assertEqual({t.label for t in task.tags}, {'Bug', 'Mona'})
        self.assertEqual(task.assigned_to.id, self.executor.id)
        self.assertEqual(task.created_by.name, 'Raj')
        self.assertFalse(task.is_self)
        self.assertFalse(SelfTaskMarker.objects.exists())

    def test_create_notifies_assignee_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True):
            task = self.make_task()
        self.notifier.assert_called_once()
        account_id, event, payload = self.notifier.call_args.args
        self.assertEqual(account_id, self.executor.id)
        self.assertEqual(event, 'task_assigned')
        self.assertEqual(payload['task_id'], str(task.id))

    def test_missing_fields(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.lifecycle.create_task({'title': 'x'}, self.requester.id)
        self.assertEqual(
            ctx.exception.message,
            "Missing required fields: description, priority, due_date, tags, assigned_to, is_self",
        )

    def test_invalid_priority(self):
        with self.assertRaises(ValidationFailed):
            self.make_task(priority='urgent')

    def test_is_self_must_be_boolean(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.make_task(is_self='yes')
        self.assertEqual(ctx.exception.message, "is_self must be a boolean value")

    def test_at_least_one_tag(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.make_task(tags=['  '])
        self.assertEqual(ctx.exception.message, "At least one tag is required")

    def test_unknown_tag_label(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.make_task(tags=['Bug', 'Nope'])
        self.assertEqual(ctx.exception.message, "One or more tag names are invalid")

    def test_missing_default_status(self):
        self.status_new.delete()
        with self.assertRaises(ValidationFailed) as ctx:
            self.make_task()
        self.assertEqual(ctx.exception.message, "Default status 'New' not found")

    def test_cannot_assign_to_self(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.make_task(assigned_to=str(self.requester.id))
        self.assertEqual(ctx.exception.message, "You cannot assign task to yourself")
        self.assertFalse(Task.objects.exists())

    def test_self_assignment_rejected_before_account_lookup(self):
        ghost = uuid4()
        with self.assertRaises(ValidationFailed) as ctx:
            self.lifecycle.create_task(self.payload(assigned_to=str(ghost)), ghost)
        self.assertEqual(ctx.exception.message, "You cannot assign task to yourself")

    def test_unknown_assignee(self):
        with self.assertRaises(NotFound):
            self.make_task(assigned_to=str(uuid4()))

    def test_executor_must_create_self_tasks(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.make_task(creator=self.executor, assigned_to=str(self.executor2.id))
        self.assertEqual(ctx.exception.message, "You can only create self tasks")

    def test_requester_cannot_be_assignee(self):
        with self.assertRaises(ValidationFailed):
            self.make_task(creator=self.manager, assigned_to=str(self.requester.id))

    def test_self_task_writes_marker(self):
        task = self.make_task(creator=self.executor, assigned_to=str(self.executor2.id), is_self=True)
        self.assertTrue(task.is_self)
        self.assertTrue(SelfTaskMarker.objects.filter(account=self.executor, task_id=task.id).exists())

    def test_duplicate_self_task_conflicts(self):
        self.make_task(creator=self.executor, assigned_to=str(self.executor2.id), is_self=True, title='T')
        with self.assertRaises(Conflict) as ctx:
            self.make_task(creator=self.executor, assigned_to=str(self.executor2.id), is_self=True, title='T')

        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(Task.objects.filter(title='T').count(), 1)
        self.assertEqual(SelfTaskMarker.objects.count(), 1)

    def test_soft_deleted_twin_still_blocks_title(self):
        task = self.make_task(title='Reused')
        self.lifecycle.soft_delete_task(str(task.id), self.requester.id)

        with self.assertRaises(Conflict) as ctx:
            self.make_task(title='Reused')

        self.assertEqual(ctx.exception.message, "Task with same title already exists")
        self.assertEqual(Task.objects.filter(title='Reused').count(), 1)

    def test_unique_constraint_catches_concurrent_duplicate(self):
        self.make_task(creator=self.executor, assigned_to=str(self.executor2.id), is_self=True, title='Race')

        with patch('django.db.models.query.QuerySet.exists', return_value=False):
            with self.assertRaises(Conflict) as ctx:
                self.make_task(creator=self.executor, assigned_to=str(self.executor2.id), is_self=True, title='Race')

        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(Task.objects.filter(title='Race').count(), 1)
        self.assertEqual(SelfTaskMarker.objects.count(), 1)

    def test_same_title_allowed_across_self_flag(self):
        self.make_task(creator=self.manager, title='Shared')
        self.make_task(creator=self.manager, title='Shared', is_self=True)
        self.assertEqual(Task.objects.filter(title='Shared').count(), 2)

    def test_marker_failure_rolls_back_task(self):
        with patch('apps.tasks.lifecycle.SelfTaskMarker.objects.create', side_effect=DatabaseError("write failed")):
            with self.assertRaises(InternalError) as ctx:
                self.make_task(creator=self.executor, assigned_to=str(self.executor2.id), is_self=True)

        self.assertEqual(ctx.exception.message, "Error creating task")
        self.assertFalse(Task.objects.exists())
        self.assertFalse(SelfTaskMarker.objects.exists())


class AssignTaskTest(TaskFixtures, TestCase):

    def setUp(self):
        super().setUp()
        self.task = self.make_task()

    def test_manager_reassigns_task_in_scope(self):
        task = self.lifecycle.assign_task(str(self.task.id), str(self.executor2.id), self.manager.id)
        self.assertEqual(task.assigned_to.id, self.executor2.id)
        self.assertEqual(task.updated_by.id, self.manager.id)

    def test_unknown_assignee(self):
        with self.assertRaises(NotFound) as ctx:
            self.lifecycle.assign_task(str(self.task.id), str(uuid4()), self.admin.id)
        self.assertEqual(ctx.exception.message, "No such user found to assign task")

    def test_unknown_task(self):
        with self.assertRaises(NotFound) as ctx:
            self.lifecycle.assign_task(str(uuid4()), str(self.executor2.id), self.admin.id)
        self.assertEqual(ctx.exception.message, "Task not found")

    def test_assign_to_requester_is_unprocessable(self):
        with self.assertRaises(StateInvalid):
            self.lifecycle.assign_task(str(self.task.id), str(self.requester.id), self.admin.id)
        self.assertEqual(Task.objects.get(id=self.task.id).assigned_to_id, self.executor.id)

    def test_assign_to_creator_is_rejected(self):
        manager_task = self.make_task(creator=self.manager, title='Manager task')
        with self.assertRaises(ValidationFailed):
            self.lifecycle.assign_task(str(manager_task.id), str(self.manager.id), self.admin.id)

    def test_out_of_scope_manager(self):
        with self.assertRaises(AuthorizationDenied):
            self.lifecycle.assign_task(str(self.task.id), str(self.executor2.id), self.other_manager.id)

    def test_requester_cannot_assign(self):
        with self.assertRaises(AuthorizationDenied):
            self.lifecycle.assign_task(str(self.task.id), str(self.executor2.id), self.requester.id)

    def test_invalid_ids(self):
        with self.assertRaises(ValidationFailed) as ctx:
            self.lifecycle.assign_task('bad', str(self.executor2.id), self.admin.id)
        self.assertEqual(ctx.exception.message, "Missing or invalid task id")


class ChangeStatusTest(TaskFixtures, TestCase):

    def setUp(self):
        super().setUp()
        self.task = self.make_task()

    def test_executor_moves_assigned_task(self):
        with self.captureOnCommitCallbacks(execute=True):
            task = self.lifecycle.change_status(str(self.task.id), str(self.status_progress.id), self.executor.id)

        self.assertEqual(task.status.name, 'In Progress')
        self.assertIsNone(task.completed_at)
        self.notifier.assert_called_with(self.requester.id, 'task_status_changed', {
            'task_id': str(self.task.id), 'title': 'Fix login', 'status': 'In Progress',
        })

    def test_completed_status_sets_completed_at(self):
        task = self.lifecycle.change_status(str(self.task.id), str(self.status_done.id), self.admin.id)
        self.assertIsNotNone(task.completed_at)
        task = self.lifecycle.change_status(str(self.task.id), str(self.status_progress.id), self.admin.id)
        self.assertIsNone(task.completed_at)

    def test_same_status_is_unprocessable_and_untouched(self):
        before = Task.objects.get(id=self.task.id).updated_at
        with self.assertRaises(StateInvalid) as ctx:
            self.lifecycle.change_status(str(self.task.id), str(self.status_new.id), self.admin.id)

        self.assertEqual(ctx.exception.code, "UNPROCESSABLE_ENTITY")
        self.assertEqual(Task.objects.get(id=self.task.id).updated_at, before)

    def test_requester_is_forbidden(self):
        with self.assertRaises(AuthorizationDenied) as ctx:
            self.lifecycle.change_status(str(self.task.id), str(self.status_progress.id), self.requester.id)
        self.assertEqual(ctx.exception.message, "You are not authorized to change status")

    def test_unknown_status(self):
        with self.assertRaises(NotFound) as ctx:
            self.lifecycle.change_status(str(self.task.id), str(uuid4()), self.admin.id)
        self.assertEqual(ctx.exception.message, "No such status found")

    def test_unknown_task(self):
        with self.assertRaises(NotFound):
            self.lifecycle.change_status(str(uuid4()), str(self.status_progress.id), self.admin.id)

    def test_executor_outside_task(self):
        with self.assertRaises(AuthorizationDenied):
            self.lifecycle.change_status(str(self.task.id), str(self.status_progress.id), self.executor2.id)

    def test_manager_scope(self):
        self.lifecycle.change_status(str(self.task.id), str(self.status_progress.id), self.manager.id)
        with self.assertRaises(AuthorizationDenied):
            self.lifecycle.change_status(str(self.task.id), str(self.status_done.id), self.other_manager.id)


class FetchScopedTest(TaskFixtures, TestCase):

    def setUp(self):
        super().setUp()
        self.mona_task = self.make_task(title='Mona task', tags=['Bug', 'Mona'])
        self.omar_task = self.make_task(title='Omar task', tags=['Omar'], assigned_to=str(self.executor2.id))
        self.manager_task = self.make_task(creator=self.manager, title='Manager own', tags=['Bug'])
        self.self_task = self.make_task(
            creator=self.executor, title='Self', tags=['Mona'], assigned_to=str(self.executor2.id), is_self=True,
        )

    def titles(self, page):
        return {task.title for task in page.tasks}

    def test_requester_sees_created_tasks(self):
        page = self.lifecycle.fetch_scoped(self.requester.id)
        self.assertEqual(self.titles(page), {'Mona task', 'Omar task'})
        self.assertEqual(page.total_count, 2)

    def test_executor_sees_assigned_tasks(self):
        page = self.lifecycle.fetch_scoped(self.executor.id)
        self.assertEqual(self.titles(page), {'Mona task', 'Manager own'})

    def test_manager_sees_exactly_name_tagged_tasks(self):
        page = self.lifecycle.fetch_scoped(self.manager.id)
        self.assertEqual(self.titles(page), {'Mona task'})

    def test_admin_sees_all_non_self_tasks(self):
        page = self.lifecycle.fetch_scoped(self.admin.id)
        self.assertEqual(self.titles(page), {'Mona task', 'Omar task', 'Manager own'})

    def test_filters_narrow_scope(self):
        page = self.lifecycle.fetch_scoped(self.admin.id, {'title': 'omar'})
        self.assertEqual(self.titles(page), {'Omar task'})

        # A tag filter cannot pull another manager's tasks into scope
        with self.assertRaises(NotFound):
            self.lifecycle.fetch_scoped(self.manager.id, {'tags': str(self.tag_omar.id)})

    def test_pagination(self):
        page = self.lifecycle.fetch_scoped(self.admin.id, limit=2, offset=0)
        self.assertEqual(len(page.tasks), 2)
        self.assertEqual(page.total_count, 3)
        page = self.lifecycle.fetch_scoped(self.admin.id, limit=0, offset=-5)
        self.assertEqual(len(page.tasks), 3)

    def test_empty_listing_is_not_found_with_empty_data(self):
        with self.assertRaises(NotFound) as ctx:
            self.lifecycle.fetch_scoped(self.other_manager.id, {'title': 'nothing'})
        self.assertEqual(ctx.exception.data, [])

    def test_soft_deleted_tasks_stay_listed(self):
        self.lifecycle.soft_delete_task(str(self.omar_task.id), self.requester.id)
        page = self.lifecycle.fetch_scoped(self.requester.id)
        self.assertIn('Omar task', self.titles(page))

    def test_unknown_actor(self):
        with self.assertRaises(AuthorizationDenied):
            self.lifecycle.fetch_scoped(uuid4())

    def test_self_tasks_listing(self):
        page = self.lifecycle.fetch_self_tasks(self.executor.id)
        self.assertEqual(self.titles(page), {'Self'})
        with self.assertRaises(NotFound) as ctx:
            self.lifecycle.fetch_self_tasks(self.requester.id)
        self.assertEqual(ctx.exception.data, [])


class TagsCommentsDeleteTest(TaskFixtures, TestCase):

    def setUp(self):
        super().setUp()
        self.task = self.make_task(tags=['Bug'])

    def test_add_and_remove_tag(self):
        task = self.lifecycle.update_task_tag(str(self.task.id), str(self.tag_mona.id), 'add', self.requester.id)
        self.assertIn('Mona', {t.label for t in task.tags})

        with self.assertRaises(Conflict):
            self.lifecycle.update_task_tag(str(self.task.id), str(self.tag_mona.id), 'add', self.requester.id)

        task = self.lifecycle.update_task_tag(str(self.task.id), str(self.tag_mona.id), 'remove', self.requester.id)
        self.assertNotIn('Mona', {t.label for t in task.tags})

        with self.assertRaises(Conflict) as ctx:
            self.lifecycle.update_task_tag(str(self.task.id), str(self.tag_mona.id), 'remove', self.requester.id)
        self.assertEqual(ctx.exception.message, "Tag does not exist in the task")

    def test_invalid_tag_action(self):
        with self.assertRaises(ValidationFailed):
            self.lifecycle.update_task_tag(str(self.task.id), str(self.tag_mona.id), 'toggle', self.requester.id)

    def test_comments(self):
        task = self.lifecycle.add_comment(str(self.task.id), self.executor.id, '  On it  ')
        self.assertEqual(task.comments[0].comment, 'On it')
        self.assertEqual(task.comments[0].author.id, self.executor.id)

        comment_id = task.comments[0].id
        with self.assertRaises(AuthorizationDenied):
            self.lifecycle.delete_comment(str(self.task.id), str(comment_id), self.requester.id)

        task = self.lifecycle.delete_comment(str(self.task.id), str(comment_id), self.executor.id)
        self.assertEqual(task.comments, [])
        self.assertFalse(TaskComment.objects.exists())

    def test_comment_requires_text(self):
        with self.assertRaises(ValidationFailed):
            self.lifecycle.add_comment(str(self.task.id), self.executor.id, '   ')

    def test_delete_unknown_comment(self):
        with self.assertRaises(NotFound) as ctx:
            self.lifecycle.delete_comment(str(self.task.id), str(uuid4()), self.admin.id)
        self.assertEqual(ctx.exception.message, "No such comment found in the task")

    def test_soft_delete(self):
        with self.assertRaises(AuthorizationDenied):
            self.lifecycle.soft_delete_task(str(self.task.id), self.executor.id)

        self.lifecycle.soft_delete_task(str(self.task.id), self.requester.id)
        task = Task.objects.get(id=self.task.id)
        self.assertTrue(task.is_deleted)
        self.assertFalse(task.is_active)

        with self.assertRaises(NotFound):
            self.lifecycle.soft_delete_task(str(self.task.id), self.requester.id)

    def test_fetch_single_task_in_scope(self):
        task = self.lifecycle.fetch_task(str(self.task.id), self.executor.id)
        self.assertEqual(task.id, self.task.id)
        with self.assertRaises(AuthorizationDenied):
            self.lifecycle.fetch_task(str(self.task.id), self.other_manager.id)


@override_settings(DEFAULT_TASK_STATUS='Backlog')
class DefaultStatusSettingTest(TaskFixtures, TestCase):

    def test_default_status_comes_from_settings(self):
        Status.objects.create(name='Backlog', color='#999999')
        task = self.make_task()
        self.assertEqual(task.status.name, 'Backlog')
