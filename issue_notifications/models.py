from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from .config import DRAFT_ISSUE_ID, STAR_TAG, UNASSIGNED
from .messages import MessageKind


class Category(str, Enum):
    """Independent subscription categories of the recipient directory."""

    WATCHERS = "watchers"
    WATCHERS_IMPORTANT = "watchers_important"
    ASSIGNEES = "assignees"
    MENTIONS = "mentions"


@dataclass(frozen=True, slots=True)
class User:
    """A tracker account: ``login`` is the identity, ``name`` the display name."""

    login: str
    name: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.login


@dataclass(frozen=True, slots=True)
class Comment:
    author: User
    text: str = ""
    url: str = ""
    is_new: bool = False


@dataclass(frozen=True, slots=True)
class Tag:
    name: str
    owner: User
    is_new: bool = False


def _norm(name: str) -> str:
    return name.strip().lower()


@dataclass(frozen=True, slots=True)
class IssueSnapshot:
    """Read-only view of an issue at the moment of a change event.

    ``changed`` holds the names of the fields that changed in this event and
    ``old_values`` their previous values. Those and ``custom_fields`` are keyed
    case-insensitively and copied, so later changes to the caller's dicts do
    not leak into the snapshot.
    """

    id: str
    title: str = ""
    description: Optional[str] = None
    url: str = ""
    state: Optional[str] = None
    priority: Optional[str] = None
    type: Optional[str] = None
    project: Optional[str] = None
    assignee: Optional[User] = None
    reporter: Optional[User] = None
    custom_fields: Mapping[str, Optional[str]] = field(default_factory=dict)
    comments: Tuple[Comment, ...] = ()
    tags: Tuple[Tag, ...] = ()
    changed: FrozenSet[str] = frozenset()
    old_values: Mapping[str, Any] = field(default_factory=dict)
    becomes_reported: bool = False
    becomes_resolved: bool = False
    becomes_unresolved: bool = False
    becomes_removed: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "changed", frozenset(_norm(name) for name in self.changed))
        object.__setattr__(
            self, "old_values", {_norm(name): value for name, value in self.old_values.items()}
        )
        object.__setattr__(
            self, "custom_fields", {_norm(name): value for name, value in self.custom_fields.items()}
        )
        object.__setattr__(self, "comments", tuple(self.comments))
        object.__setattr__(self, "tags", tuple(self.tags))

    def is_changed(self, name: str) -> bool:
        return _norm(name) in self.changed

    def old_value(self, name: str) -> Any:
        return self.old_values.get(_norm(name))

    def custom_field(self, name: str) -> Optional[str]:
        return self.custom_fields.get(_norm(name))

    @property
    def added_comments(self) -> List[Comment]:
        return [comment for comment in self.comments if comment.is_new]

    @property
    def added_tags(self) -> List[Tag]:
        return [tag for tag in self.tags if tag.is_new]

    @property
    def is_draft(self) -> bool:
        return self.id == DRAFT_ISSUE_ID


@dataclass(frozen=True, slots=True)
class NotificationEvent:
    """Everything the router needs for one triggering event.

    Built fresh per event; holds no state between events.
    """

    issue: IssueSnapshot
    actor: User

    @classmethod
    def from_change(cls, issue: IssueSnapshot, current_user: User) -> "NotificationEvent":
        """The reporter is the actor of a creation event, the session user otherwise."""
        actor = issue.reporter if issue.becomes_reported and issue.reporter else current_user
        return cls(issue=issue, actor=actor)

    @property
    def link(self) -> str:
        return f"[{self.issue.id}]({self.issue.url})"

    @property
    def title(self) -> str:
        return self.issue.title

    @property
    def actor_name(self) -> str:
        return self.actor.display_name

    @property
    def assignee_name(self) -> str:
        if self.issue.assignee is None:
            return UNASSIGNED
        return self.issue.assignee.display_name

    def watcher_logins(self, tags: Optional[List[Tag]] = None) -> List[str]:
        """Owners of "Star" tags other than the actor, in first-seen order."""
        source = self.issue.tags if tags is None else tags
        logins: Dict[str, None] = {}
        for tag in source:
            if tag.name == STAR_TAG and tag.owner.login != self.actor.login:
                logins.setdefault(tag.owner.login)
        return list(logins)

    def new_watcher_logins(self) -> List[str]:
        return self.watcher_logins(self.issue.added_tags)

    def assignee_login_if_needed(self) -> Optional[str]:
        """The assignee's login when there is one and it is not the actor."""
        assignee = self.issue.assignee
        if assignee is not None and assignee.login and assignee.login != self.actor.login:
            return assignee.login
        return None


@dataclass(frozen=True, slots=True)
class Notification:
    """One rendered message for one destination."""

    destination: str
    text: str
    kind: Optional[MessageKind] = field(default=None, compare=False)
