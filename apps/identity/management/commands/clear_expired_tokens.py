from django.core.management.base import BaseCommand

from apps.core.task_service import TaskService


class Command(BaseCommand):
    help = 'Queues the sweep of expired reset/activation tokens'

    def handle(self, *args, **options):
        task_id = TaskService.clear_expired_tokens()
        self.stdout.write(self.style.SUCCESS(f'Queued clear_expired_tokens (id={task_id})'))
