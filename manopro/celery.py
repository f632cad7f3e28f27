"""
Celery configuration for Mano-Pro.

Tasks are auto-discovered from every installed app's tasks.py module.
Notification delivery and the daily overdue-invoice sweep run in workers;
lifecycle operations stay synchronous and transactional.
"""

import os

from celery import Celery
from celery.schedules import crontab
from kombu import Exchange, Queue

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'manopro.settings')

app = Celery('manopro')

# All celery-related configuration keys use the CELERY_ prefix in settings.
app.config_from_object('django.conf:settings', namespace='CELERY')

app.autodiscover_tasks()


# ==================== QUEUE CONFIGURATION ====================

default_exchange = Exchange('default', type='direct')
notifications_exchange = Exchange('notifications', type='direct')

app.conf.task_queues = (
    Queue('default', default_exchange, routing_key='default'),
    Queue('notifications', notifications_exchange, routing_key='notifications'),
)

app.conf.task_default_queue = 'default'
app.conf.task_default_exchange = 'default'
app.conf.task_default_routing_key = 'default'

app.conf.task_routes = {
    'notifications.tasks.*': {'queue': 'notifications', 'routing_key': 'notifications'},
}


# ==================== PERIODIC TASKS ====================

app.conf.beat_schedule = {
    'mark-overdue-invoices-daily': {
        'task': 'payments.tasks.mark_overdue_invoices',
        'schedule': crontab(minute=15, hour=2),
    },
}


# ==================== RETRY CONFIGURATION ====================

app.conf.task_default_retry_delay = 30
app.conf.task_max_retries = 3


# ==================== SERIALIZATION ====================

app.conf.task_serializer = 'json'
app.conf.result_serializer = 'json'
app.conf.accept_content = ['json']
app.conf.timezone = 'Europe/Paris'
app.conf.enable_utc = True


# ==================== TASK EXECUTION ====================

app.conf.task_acks_late = True
app.conf.task_reject_on_worker_lost = True
app.conf.task_time_limit = 300
app.conf.task_soft_time_limit = 240


@app.task(bind=True)
def health_check(self):
    """Simple health check task to verify Celery is running."""
    import platform
    import sys
    from datetime import datetime, timezone

    return {
        'status': 'healthy',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'python_version': sys.version,
        'platform': platform.platform(),
        'task_id': self.request.id,
    }
