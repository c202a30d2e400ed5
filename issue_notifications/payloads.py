"""Turn inbound webhook JSON into issue snapshots.

Expected shape::

    {"current_user": {"login": "jane", "name": "Jane Doe"},
     "issue": {"id": "PRJ-1", "summary": "...", "url": "...",
               "state": "Open", "assignee": {"login": "bob"},
               "comments": [...], "tags": [...],
               "changes": {"State": {"old": "Submitted"}},
               "becomes_resolved": false, ...}}
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from .config import CUSTOM_FIELDS
from .models import Comment, IssueSnapshot, Tag, User


class PayloadError(ValueError):
    """Raised when an inbound event payload is malformed."""


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, Mapping):
        value = value.get("name") or value.get("presentation")
    return None if value is None else str(value)


def parse_user(raw: Any, where: str) -> Optional[User]:
    if raw is None:
        return None
    if isinstance(raw, str):
        return User(login=raw) if raw else None
    if not isinstance(raw, Mapping):
        raise PayloadError(f"{where} must be an object or a login")
    login = raw.get("login")
    if not login:
        raise PayloadError(f"{where} is missing 'login'")
    name = raw.get("name") or raw.get("fullName") or raw.get("visibleName") or ""
    return User(login=str(login), name=str(name))


def _old_value(raw: Any) -> Any:
    if isinstance(raw, Mapping) and raw.get("login"):
        return parse_user(raw, "old value")
    return _text(raw)


def _list(issue: Mapping[str, Any], key: str) -> list:
    items = issue.get(key) or []
    if not isinstance(items, list):
        raise PayloadError(f"issue.{key} must be a list")
    return items


def _comment(raw: Any, index: int) -> Comment:
    if not isinstance(raw, Mapping):
        raise PayloadError(f"issue.comments[{index}] must be an object")
    author = parse_user(raw.get("author"), f"issue.comments[{index}].author")
    if author is None:
        raise PayloadError(f"issue.comments[{index}] has no author")
    return Comment(
        author=author,
        text=str(raw.get("text") or ""),
        url=str(raw.get("url") or ""),
        is_new=bool(raw.get("is_new")),
    )


def _tag(raw: Any, index: int) -> Tag:
    if not isinstance(raw, Mapping) or not raw.get("name"):
        raise PayloadError(f"issue.tags[{index}] must be an object with a name")
    owner = parse_user(raw.get("owner"), f"issue.tags[{index}].owner")
    if owner is None:
        raise PayloadError(f"issue.tags[{index}] has no owner")
    return Tag(name=str(raw["name"]), owner=owner, is_new=bool(raw.get("is_new")))


def parse_issue(issue: Mapping[str, Any]) -> IssueSnapshot:
    if not isinstance(issue, Mapping):
        raise PayloadError("'issue' must be an object")
    issue_id = issue.get("id")
    if not issue_id:
        raise PayloadError("issue is missing 'id'")

    changes = issue.get("changes") or {}
    if not isinstance(changes, Mapping):
        raise PayloadError("issue.changes must map field names to old values")
    old_values: Dict[str, Any] = {}
    for name, change in changes.items():
        old = change.get("old") if isinstance(change, Mapping) else None
        old_values[name] = _old_value(old)

    raw_fields = issue.get("fields") or {}
    if not isinstance(raw_fields, Mapping):
        raise PayloadError("issue.fields must be an object")
    by_name = {str(name).strip().lower(): value for name, value in raw_fields.items()}
    custom_fields = {
        name: _text(by_name[name.lower()]) for name in CUSTOM_FIELDS if name.lower() in by_name
    }

    return IssueSnapshot(
        id=str(issue_id),
        title=str(issue.get("summary") or issue.get("title") or ""),
        description=_text(issue.get("description")),
        url=str(issue.get("url") or ""),
        state=_text(issue.get("state")),
        priority=_text(issue.get("priority")),
        type=_text(issue.get("type")),
        project=_text(issue.get("project")),
        assignee=parse_user(issue.get("assignee"), "issue.assignee"),
        reporter=parse_user(issue.get("reporter"), "issue.reporter"),
        custom_fields=custom_fields,
        comments=tuple(_comment(raw, i) for i, raw in enumerate(_list(issue, "comments"))),
        tags=tuple(_tag(raw, i) for i, raw in enumerate(_list(issue, "tags"))),
        changed=frozenset(changes),
        old_values=old_values,
        becomes_reported=bool(issue.get("becomes_reported")),
        becomes_resolved=bool(issue.get("becomes_resolved")),
        becomes_unresolved=bool(issue.get("becomes_unresolved")),
        becomes_removed=bool(issue.get("becomes_removed")),
    )


def parse_event(payload: Any) -> Tuple[IssueSnapshot, User]:
    """Return the issue snapshot and the session user of a webhook payload."""
    if not isinstance(payload, Mapping):
        raise PayloadError("payload must be a JSON object")
    current_user = parse_user(payload.get("current_user"), "current_user")
    if current_user is None:
        raise PayloadError("payload is missing 'current_user'")
    return parse_issue(payload.get("issue")), current_user
