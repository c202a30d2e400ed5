"""Decide who hears about an issue event and what they are told.

Routing is a priority cascade: :data:`RULES` is evaluated top to bottom, every
matching rule contributes its notifications, and the first matching *terminal*
rule ends the evaluation. This reproduces the behaviour where, for example, a
new subscription silences every other message of the same event.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .config import FIELD_ASSIGNEE
from .directory import RecipientDirectory, merge_recipients
from .mentions import extract_mentions, extract_mentions_from
from .messages import (
    MessageKind,
    render_assigned,
    render_commented,
    render_created,
    render_removed,
    render_reopened,
    render_resolved,
    render_subscribed,
)
from .models import Category, IssueSnapshot, Notification, NotificationEvent
from .summarizer import has_tracked_changes, is_important, summarize_changes

LOGGER = logging.getLogger(__name__)

Predicate = Callable[[NotificationEvent, RecipientDirectory], bool]
Handler = Callable[[NotificationEvent, RecipientDirectory], List[Notification]]

ALL_WATCHERS = (Category.WATCHERS, Category.WATCHERS_IMPORTANT)


@dataclass(frozen=True, slots=True)
class Rule:
    name: str
    applies: Predicate
    build: Handler
    terminal: bool


def should_process(issue: IssueSnapshot) -> bool:
    """Trigger guard: only events that can produce a notification pass."""
    return bool(
        issue.added_comments
        or issue.becomes_resolved
        or issue.becomes_reported
        or issue.becomes_unresolved
        or issue.becomes_removed
        or issue.added_tags
        or has_tracked_changes(issue)
    )


def _fan_out(destinations: Sequence[str], text: str, kind: MessageKind) -> List[Notification]:
    return [Notification(destination=d, text=text, kind=kind) for d in destinations]


def _watchers(event: NotificationEvent, directory: RecipientDirectory, *categories: Category) -> List[str]:
    return directory.resolve(event.watcher_logins(), *categories)


def _assignee(event: NotificationEvent, directory: RecipientDirectory) -> List[str]:
    return directory.resolve([event.assignee_login_if_needed()], Category.ASSIGNEES)


def _card_fields(event: NotificationEvent) -> dict:
    return {
        "title": event.title,
        "link": event.link,
        "assignee_name": event.assignee_name,
        "actor_name": event.actor_name,
        "state": event.issue.state,
        "priority": event.issue.priority,
    }


# -- new subscription ---------------------------------------------------------

def _new_watcher_destinations(event: NotificationEvent, directory: RecipientDirectory) -> List[str]:
    return directory.resolve(event.new_watcher_logins(), *ALL_WATCHERS)


def _has_new_watchers(event: NotificationEvent, directory: RecipientDirectory) -> bool:
    return bool(_new_watcher_destinations(event, directory))


def _subscribed(event: NotificationEvent, directory: RecipientDirectory) -> List[Notification]:
    text = render_subscribed(**_card_fields(event))
    return _fan_out(_new_watcher_destinations(event, directory), text, MessageKind.SUBSCRIBED)


# -- issue created ------------------------------------------------------------

def _is_created(event: NotificationEvent, directory: RecipientDirectory) -> bool:
    return event.issue.becomes_reported


def _created(event: NotificationEvent, directory: RecipientDirectory) -> List[Notification]:
    recipients = merge_recipients(
        _watchers(event, directory, *ALL_WATCHERS),
        _assignee(event, directory),
        directory.resolve(extract_mentions(event.issue.description), Category.MENTIONS),
    )
    return _fan_out(recipients, render_created(**_card_fields(event)), MessageKind.CREATED)


# -- new comments -------------------------------------------------------------

def _has_new_comments(event: NotificationEvent, directory: RecipientDirectory) -> bool:
    return bool(event.issue.added_comments)


def _commented(event: NotificationEvent, directory: RecipientDirectory) -> List[Notification]:
    comments = event.issue.added_comments
    mentioned = extract_mentions_from(comment.text for comment in comments)
    recipients = merge_recipients(
        _watchers(event, directory, *ALL_WATCHERS),
        _assignee(event, directory),
        directory.resolve(mentioned, Category.MENTIONS),
    )
    text = render_commented(
        title=event.title,
        link=event.link,
        comments=[(c.text, c.url, c.author.display_name) for c in comments],
    )
    return _fan_out(recipients, text, MessageKind.COMMENTED)


# -- assigned to someone else -------------------------------------------------

def _new_assignee_destination(event: NotificationEvent, directory: RecipientDirectory) -> Optional[str]:
    if not event.issue.is_changed(FIELD_ASSIGNEE):
        return None
    return directory.lookup(event.assignee_login_if_needed(), Category.ASSIGNEES)


def _is_assigned(event: NotificationEvent, directory: RecipientDirectory) -> bool:
    return _new_assignee_destination(event, directory) is not None


def _assigned(event: NotificationEvent, directory: RecipientDirectory) -> List[Notification]:
    destination = _new_assignee_destination(event, directory)
    text = render_assigned(title=event.title, link=event.link, actor_name=event.actor_name)
    return _fan_out([destination], text, MessageKind.ASSIGNED)


# -- removed ------------------------------------------------------------------

def _is_removed(event: NotificationEvent, directory: RecipientDirectory) -> bool:
    return event.issue.becomes_removed


def _removed(event: NotificationEvent, directory: RecipientDirectory) -> List[Notification]:
    recipients = merge_recipients(
        _watchers(event, directory, *ALL_WATCHERS),
        _assignee(event, directory),
    )
    text = render_removed(title=event.title, link=event.link, actor_name=event.actor_name)
    return _fan_out(recipients, text, MessageKind.REMOVED)


# -- resolved / reopened ------------------------------------------------------

def _is_resolved(event: NotificationEvent, directory: RecipientDirectory) -> bool:
    return event.issue.becomes_resolved


def _resolved(event: NotificationEvent, directory: RecipientDirectory) -> List[Notification]:
    text = render_resolved(title=event.title, link=event.link, actor_name=event.actor_name)
    recipients = _watchers(event, directory, Category.WATCHERS_IMPORTANT)
    return _fan_out(recipients, text, MessageKind.RESOLVED)


def _is_reopened(event: NotificationEvent, directory: RecipientDirectory) -> bool:
    return event.issue.becomes_unresolved


def _reopened(event: NotificationEvent, directory: RecipientDirectory) -> List[Notification]:
    text = render_reopened(title=event.title, link=event.link, actor_name=event.actor_name)
    recipients = _watchers(event, directory, Category.WATCHERS_IMPORTANT)
    return _fan_out(recipients, text, MessageKind.REOPENED)


# -- field changes ------------------------------------------------------------

def _has_changes(event: NotificationEvent, directory: RecipientDirectory) -> bool:
    return has_tracked_changes(event.issue)


def _changed(event: NotificationEvent, directory: RecipientDirectory) -> List[Notification]:
    text = summarize_changes(event.issue, event.actor_name)
    recipients = merge_recipients(
        _watchers(event, directory, Category.WATCHERS),
        _assignee(event, directory),
    )
    notifications = _fan_out(recipients, text, MessageKind.CHANGED)
    # Resolved separately from the list above, so a user in both watcher
    # categories gets the message twice.
    if is_important(event.issue):
        important = _watchers(event, directory, Category.WATCHERS_IMPORTANT)
        notifications.extend(_fan_out(important, text, MessageKind.CHANGED))
    return notifications


RULES: Sequence[Rule] = (
    Rule("subscribed", _has_new_watchers, _subscribed, terminal=True),
    Rule("created", _is_created, _created, terminal=True),
    Rule("commented", _has_new_comments, _commented, terminal=True),
    Rule("assigned", _is_assigned, _assigned, terminal=False),
    Rule("removed", _is_removed, _removed, terminal=True),
    Rule("resolved", _is_resolved, _resolved, terminal=False),
    Rule("reopened", _is_reopened, _reopened, terminal=False),
    Rule("changed", _has_changes, _changed, terminal=False),
)


def route(
    event: NotificationEvent,
    directory: RecipientDirectory,
    rules: Sequence[Rule] = RULES,
) -> List[Notification]:
    """Run the rule cascade for one event and collect its notifications."""
    notifications: List[Notification] = []
    for rule in rules:
        if not rule.applies(event, directory):
            continue
        produced = rule.build(event, directory)
        LOGGER.info(
            "Rule '%s' matched issue %s: %d notification(s)", rule.name, event.issue.id, len(produced)
        )
        notifications.extend(produced)
        if rule.terminal:
            break
    return notifications
