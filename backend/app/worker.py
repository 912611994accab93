"""
Celery Worker Configuration

Runs SEO audit jobs in the background. Each audit is one task on the
`audit` queue; many audits can run side by side on the worker pool.
"""

import logging

from celery import Celery
from celery.signals import after_setup_logger

from app.config import settings

logger = logging.getLogger(__name__)


# Create Celery app
celery_app = Celery(
    "seopulse",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=[
        "app.tasks.audit_tasks",
    ],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=3600,  # 1 hour max per task
    task_soft_time_limit=3300,  # 55 min soft limit

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=4,
    worker_max_tasks_per_child=100,

    # Result backend settings
    result_expires=86400,  # 24 hours
    result_extended=True,

    # Audits are attempted once
    task_max_retries=0,

    # Queue routing
    task_routes={
        "app.tasks.audit_tasks.*": {"queue": "audit"},
    },

    # Default queue
    task_default_queue="default",
)


@after_setup_logger.connect
def setup_app_logging(**kwargs):
    """Apply LOG_LEVEL to the application loggers inside the worker."""
    logging.getLogger("app").setLevel(settings.LOG_LEVEL.upper())


# Task base class with common functionality
class SEOPulseTask(celery_app.Task):
    """Base task class with failure logging."""

    abstract = True

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        """Handle task failure."""
        logger.error(f"Task {self.name}[{task_id}] failed: {type(exc).__name__}: {exc}")

    def on_success(self, retval, task_id, args, kwargs):
        """Handle task success."""
        logger.info(f"Task {self.name}[{task_id}] succeeded")


# Register base class
celery_app.Task = SEOPulseTask
