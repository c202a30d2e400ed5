"""Text templates for each message kind.

Messages use the Telegram Markdown subset: ``*bold*``, ``_italic_`` and
``[label](url)`` links. Every renderer takes only the values it prints.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

from .config import NOT_SPECIFIED


class MessageKind(str, Enum):
    """Message classes, valued by the emoji marker that prefixes them."""

    SUBSCRIBED = "📳"
    CREATED = "📨"
    COMMENTED = "💬"
    ASSIGNED = "❗️"
    REMOVED = "❌️"
    RESOLVED = "✅"
    REOPENED = "▶"
    CHANGED = "✏️"


def attribution(name: str) -> str:
    return f"© _{name}_"


def _or_fallback(value: Optional[str]) -> str:
    return value or NOT_SPECIFIED


def _card(
    headline: str,
    *,
    assignee_name: str,
    actor_label: str,
    actor_name: str,
    link: str,
    state: Optional[str],
    priority: Optional[str],
) -> str:
    lines = [
        headline,
        f"Assignee: {assignee_name}",
        f"{actor_label}: {actor_name}",
        f"Link: {link}",
        f"State: {_or_fallback(state)}",
        f"Priority: {_or_fallback(priority)}",
    ]
    return "\n".join(lines)


def render_subscribed(
    *, title: str, link: str, assignee_name: str, actor_name: str,
    state: Optional[str], priority: Optional[str],
) -> str:
    return _card(
        f"{MessageKind.SUBSCRIBED.value} You are subscribed to the issue {title}",
        assignee_name=assignee_name,
        actor_label="Subscribed by",
        actor_name=actor_name,
        link=link,
        state=state,
        priority=priority,
    )


def render_created(
    *, title: str, link: str, assignee_name: str, actor_name: str,
    state: Optional[str], priority: Optional[str],
) -> str:
    return _card(
        f"{MessageKind.CREATED.value} New issue created: {title}",
        assignee_name=assignee_name,
        actor_label="Created by",
        actor_name=actor_name,
        link=link,
        state=state,
        priority=priority,
    )


def render_commented(
    *, title: str, link: str, comments: Sequence[Tuple[str, str, str]]
) -> str:
    """``comments`` holds ``(text, url, author_name)`` for each new comment."""
    text = f"{MessageKind.COMMENTED.value} {link} {title}"
    for body, url, author_name in comments:
        text += f"\n\n{body} [🔗]({url})\n{attribution(author_name)}"
    return text


def render_assigned(*, title: str, link: str, actor_name: str) -> str:
    return f"{MessageKind.ASSIGNED.value} {link} {title}\n{attribution(actor_name)}"


def _transition(kind: MessageKind, verb: str, title: str, link: str, actor_name: str) -> str:
    return f"{kind.value} {link} {title} has been {verb}\n{attribution(actor_name)}"


def render_removed(*, title: str, link: str, actor_name: str) -> str:
    return _transition(MessageKind.REMOVED, "deleted", title, link, actor_name)


def render_resolved(*, title: str, link: str, actor_name: str) -> str:
    return _transition(MessageKind.RESOLVED, "resolved", title, link, actor_name)


def render_reopened(*, title: str, link: str, actor_name: str) -> str:
    return _transition(MessageKind.REOPENED, "reopened", title, link, actor_name)


def render_changed(*, title: str, link: str, lines: Iterable[str], actor_name: str) -> str:
    body = [f"{MessageKind.CHANGED.value} {link} {title}", *lines, attribution(actor_name)]
    return "\n".join(body)
