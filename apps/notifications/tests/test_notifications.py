"""Tests for presence and push delivery."""
from unittest.mock import patch
from uuid import uuid4

from django.core.cache import cache
from django.test import TestCase, override_settings

from apps.notifications.presence import PresenceRegistry, registry
from apps.notifications.services import notify
from apps.notifications.tasks import deliver_push


class PresenceRegistryTest(TestCase):

    def setUp(self):
        cache.clear()
        self.registry = PresenceRegistry(ttl_seconds=60)
        self.account_id = uuid4()

    def test_connect_and_lookup(self):
        self.registry.connect(self.account_id, 'conn-1')
        self.assertEqual(self.registry.lookup(self.account_id), 'conn-1')

    def test_reconnect_replaces_connection(self):
        self.registry.connect(self.account_id, 'conn-1')
        self.registry.connect(self.account_id, 'conn-2')
        self.registry.disconnect(self.account_id, 'conn-1')
        self.assertEqual(self.registry.lookup(self.account_id), 'conn-2')

    def test_disconnect(self):
        self.registry.connect(self.account_id, 'conn-1')
        self.registry.disconnect(self.account_id)
        self.assertIsNone(self.registry.lookup(self.account_id))

    def test_outbox_drain_empties_queue(self):
        self.registry.enqueue('conn-1', {'event': 'a'})
        self.registry.enqueue('conn-1', {'event': 'b'})
        self.assertEqual([m['event'] for m in self.registry.drain('conn-1')], ['a', 'b'])
        self.assertEqual(self.registry.drain('conn-1'), [])


@override_settings(TASK_BACKEND='local')
class NotifyTest(TestCase):

    def setUp(self):
        cache.clear()
        self.account_id = uuid4()

    def test_online_account_receives_event(self):
        registry.connect(self.account_id, 'conn-9')
        notify(self.account_id, 'task_assigned', {'task_id': 'abc'})

        self.assertEqual(registry.drain('conn-9'), [{'event': 'task_assigned', 'payload': {'task_id': 'abc'}}])

    def test_offline_account_is_skipped(self):
        self.assertFalse(deliver_push(str(self.account_id), 'task_assigned', {}))

    def test_dispatch_failure_is_not_raised(self):
        with patch('apps.notifications.services.TaskService.push_notification', side_effect=ValueError('no broker')):
            notify(self.account_id, 'task_assigned', {})
