"""
Celery Configuration for Shoplink Backend

Runs the asynchronous side of the marketplace: payment distribution after
delivery confirmation and the periodic sweep for delivered orders that were
never settled.
"""

import os

from celery import Celery


# Set the default Django settings module for the 'celery' program.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "shoplinkBackend.settings")

app = Celery("shoplinkBackend")

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
app.autodiscover_tasks(["payment_system.Tasks"])

app.conf.beat_schedule = {
    # Settle delivered orders whose distribution task was lost or failed
    "distribute-delivered-orders": {
        "task": "payment_system.Tasks.payment_tasks.distribute_delivered_orders_task",
        "schedule": 60.0 * 30.0,  # Every 30 minutes
        "options": {"expires": 10.0 * 60.0, "queue": "payment_tasks"},
    },
}

app.conf.update(
    task_routes={
        "payment_system.Tasks.payment_tasks.*": {"queue": "payment_tasks"},
    },
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    result_expires=60 * 60 * 24,
    worker_max_tasks_per_child=1000,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=10 * 60,
    task_soft_time_limit=8 * 60,
)
