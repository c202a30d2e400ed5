"""Celery app that carries queued Telegram deliveries.

The webhook process imports this module so ``deliver_notification.delay`` is
produced on this app; the worker consumes the same queue::

    celery -A celery_app worker -Q notifications
"""
from __future__ import annotations

import os
from celery import Celery

from issue_notifications.config import DEFAULT_DELIVERY_QUEUE, DELIVERY_TASK


def broker_url() -> str:
    return os.getenv("CELERY_BROKER_URL") or os.getenv("REDIS_URL") or "redis://localhost:6379/0"


def delivery_queue() -> str:
    return os.getenv("NOTIFY_QUEUE") or DEFAULT_DELIVERY_QUEUE


def create_celery_app() -> Celery:
    """Build the delivery app and make it the current Celery app."""
    queue = delivery_queue()
    celery_app = Celery(
        "issue_notifications",
        broker=broker_url(),
        backend=os.getenv("CELERY_RESULT_BACKEND") or None,
        include=["issue_notifications.tasks"],
        set_as_current=True,
    )

    celery_app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        task_ignore_result=True,
        # Ack after the task ran so a crashed worker redelivers the message.
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        broker_connection_retry_on_startup=True,
        task_default_queue=queue,
        task_routes={DELIVERY_TASK: {"queue": queue}},
    )

    return celery_app


celery_app = create_celery_app()
