from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List

from .directory import RecipientDirectory
from .models import IssueSnapshot, Notification, NotificationEvent, User
from .router import route, should_process

LOGGER = logging.getLogger(__name__)

Sender = Callable[[str, str], bool]


@dataclass(slots=True)
class EventResult:
    """Outcome of processing one issue event."""

    status: str  # processed, skipped
    notifications: List[Notification] = field(default_factory=list)
    delivered: int = 0


def build_notifications(
    issue: IssueSnapshot, current_user: User, directory: RecipientDirectory
) -> List[Notification]:
    event = NotificationEvent.from_change(issue, current_user)
    return route(event, directory)


def deliver_notifications(notifications: Iterable[Notification], sender: Sender) -> int:
    """Hand every notification to the sender; a failing send never stops the rest."""
    delivered = 0
    for notification in notifications:
        try:
            if sender(notification.destination, notification.text):
                delivered += 1
        except Exception:
            LOGGER.exception("Failed to dispatch notification to %s", notification.destination)
    return delivered


def process_event(
    issue: IssueSnapshot,
    current_user: User,
    directory: RecipientDirectory,
    sender: Sender,
) -> EventResult:
    if issue.is_draft:
        LOGGER.info("Skipping draft issue")
        return EventResult(status="skipped")
    if not should_process(issue):
        LOGGER.info("Skipping issue %s: nothing to notify about", issue.id)
        return EventResult(status="skipped")

    notifications = build_notifications(issue, current_user, directory)
    delivered = deliver_notifications(notifications, sender)
    LOGGER.info(
        "Issue %s: delivered %d of %d notification(s)", issue.id, delivered, len(notifications)
    )
    return EventResult(status="processed", notifications=notifications, delivered=delivered)
