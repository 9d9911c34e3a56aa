"""Celery application configuration."""

from celery import Celery

from config import settings

celery_app = Celery(
    "sitelens",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # All audit tasks go to the "audits" queue
    task_routes={
        "worker.tasks.*": {"queue": "audits"},
    },

    # Report STARTED so job status can say "running"
    task_track_started=True,

    # Task execution settings
    task_acks_late=True,  # Acknowledge after task completes
    task_reject_on_worker_lost=True,  # Requeue if worker dies
    worker_prefetch_multiplier=1,  # One audit at a time per worker process

    # Hard stop a little after the audit's own deadline
    task_time_limit=int(settings.audit_deadline) + 30,

    # Result expiration (24 hours)
    result_expires=86400,

    broker_connection_retry_on_startup=True,
)

celery_app.autodiscover_tasks(["worker"])
