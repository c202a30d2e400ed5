from __future__ import annotations

import logging

from celery import shared_task

from .channels import send_telegram
from .config import DELIVERY_TASK

LOGGER = logging.getLogger(__name__)


class DeliveryFailed(RuntimeError):
    """The messenger did not accept a message."""


@shared_task(
    bind=True,
    name=DELIVERY_TASK,
    max_retries=3,
    default_retry_delay=30,
)
def deliver_notification(self, chat_id: str, text: str) -> bool:
    if send_telegram(chat_id, text):
        return True
    LOGGER.warning("Delivery to %s failed (attempt %d)", chat_id, self.request.retries + 1)
    exc = DeliveryFailed(f"telegram rejected message for {chat_id}")
    raise self.retry(exc=exc, countdown=30 * (2 ** self.request.retries))


def enqueue_notification(chat_id: str, text: str) -> bool:
    """Sender that hands the message to a Celery worker instead of sending inline."""
    deliver_notification.delay(chat_id, text)
    return True
