from django.core.management.base import BaseCommand

from apps.catalog.models import Status, Tag, TagType


class Command(BaseCommand):
    help = 'Seeds the default task statuses and priority tags'

    STATUSES = [
        {'name': 'New', 'color': '#3B82F6'},
        {'name': 'In Progress', 'color': '#F59E0B'},
        {'name': 'Completed', 'color': '#10B981'},
    ]

    TAGS = [
        {'label': 'Bug', 'type': TagType.TASK, 'color': '#EF4444'},
        {'label': 'Feature', 'type': TagType.TASK, 'color': '#6366F1'},
        {'label': 'Urgent', 'type': TagType.PRIORITY, 'color': '#DC2626'},
    ]

    def handle(self, *args, **options):
        for s in self.STATUSES:
            status, created = Status.objects.get_or_create(name=s['name'], defaults={'color': s['color']})
            if created:
                self.stdout.write(self.style.SUCCESS(f'Created status: {status.name}'))
            else:
                self.stdout.write(self.style.WARNING(f'Status exists: {status.name}'))

        for t in self.TAGS:
            tag, created = Tag.objects.get_or_create(
                label=t['label'],
                type=t['type'],
                defaults={'color': t['color']},
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'Created tag: {tag.label} ({tag.type})'))
            else:
                self.stdout.write(self.style.WARNING(f'Tag exists: {tag.label}'))
