"""
Celery configuration for the Tako project.
"""
import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('config')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

# Celery Beat Schedule
app.conf.beat_schedule = {
    'clear-expired-reset-tokens': {
        'task': 'apps.identity.tasks.clear_expired_reset_tokens',
        'schedule': crontab(minute='*/5'),
    },
}
