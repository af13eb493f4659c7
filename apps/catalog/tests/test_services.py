"""Tests for tag and status reference data."""
from uuid import uuid4

from django.core.management import call_command
from django.test import TestCase

from apps.catalog.models import Status, Tag, TagType
from apps.catalog.services import StatusCatalog, TagCatalog, create_status, create_tag
from apps.core.errors import Conflict, ValidationFailed


class CreateTagTest(TestCase):

    def test_create_tag_defaults_color(self):
        record = create_tag('Backend', TagType.TASK)
        self.assertEqual(record.color, '#000000')
        self.assertEqual(record.type, 'task')

    def test_create_tag_rejects_case_insensitive_duplicate(self):
        create_tag('Backend', TagType.TASK, '#112233')
        with self.assertRaises(Conflict):
            create_tag('backend', TagType.TASK)

    def test_same_label_allowed_for_other_type(self):
        create_tag('Alice', TagType.USER)
        record = create_tag('Alice', TagType.PROJECT)
        self.assertEqual(Tag.objects.filter(label='Alice').count(), 2)
        self.assertEqual(record.type, 'project')

    def test_create_tag_requires_valid_type(self):
        with self.assertRaises(ValidationFailed) as ctx:
            create_tag('Backend', 'epic')
        self.assertEqual(ctx.exception.message, "Invalid type specified")

    def test_create_tag_missing_fields(self):
        with self.assertRaises(ValidationFailed) as ctx:
            create_tag('  ', None)
        self.assertEqual(ctx.exception.message, "Missing required fields: label, type")


class CreateStatusTest(TestCase):

    def test_create_status(self):
        record = create_status('Blocked', '#ff0000')
        self.assertEqual(record.name, 'Blocked')

    def test_duplicate_status_conflicts(self):
        create_status('Blocked', '#ff0000')
        with self.assertRaises(Conflict):
            create_status('Blocked', '#00ff00')

    def test_invalid_color_rejected(self):
        with self.assertRaises(ValidationFailed):
            create_status('Blocked', 'red')


class CatalogLookupTest(TestCase):

    def setUp(self):
        self.tag = Tag.objects.create(label='Alice', type=TagType.USER)
        Tag.objects.create(label='Alice', type=TagType.PROJECT)
        self.status = Status.objects.create(name='New', color='#3B82F6')

    def test_find_by_labels_returns_every_type(self):
        records = TagCatalog().find_by_labels(['Alice', 'Missing'])
        self.assertEqual({r.type for r in records}, {'user', 'project'})

    def test_get_unknown_tag(self):
        self.assertIsNone(TagCatalog().get(uuid4()))
        self.assertEqual(TagCatalog().get(self.tag.id).label, 'Alice')

    def test_status_lookup(self):
        catalog = StatusCatalog()
        self.assertEqual(catalog.get_by_name('New').id, self.status.id)
        self.assertIsNone(catalog.get_by_name('Archived'))
        self.assertEqual(catalog.get(self.status.id).name, 'New')


class SeedCatalogCommandTest(TestCase):

    def test_seed_is_idempotent(self):
        call_command('seed_catalog', verbosity=0)
        call_command('seed_catalog', verbosity=0)
        self.assertEqual(
            set(Status.objects.values_list('name', flat=True)),
            {'New', 'In Progress', 'Completed'},
        )
