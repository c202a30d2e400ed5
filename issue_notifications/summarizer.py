"""Human-readable descriptions of the tracked-field changes of an issue."""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from .config import (
    FIELD_ASSIGNEE,
    FIELD_DESCRIPTION,
    FIELD_GIT_BRANCH,
    FIELD_IN_PRODUCTION,
    FIELD_PRIORITY,
    FIELD_PROJECT,
    FIELD_STATE,
    FIELD_SUMMARY,
    FIELD_TYPE,
    IMPORTANT_FIELDS,
    NOT_SPECIFIED,
    TRACKED_FIELDS,
    UNASSIGNED,
)
from .messages import render_changed
from .models import IssueSnapshot, User


def _display(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, User):
        return value.display_name
    return str(value)


def _arrow(old: Any, new: Any, fallback: str = NOT_SPECIFIED) -> str:
    return f"{_display(old) or fallback} -> *{_display(new) or NOT_SPECIFIED}*"


def _summary_line(issue: IssueSnapshot) -> Optional[str]:
    return "Title changed"


def _description_line(issue: IssueSnapshot) -> Optional[str]:
    return "Description changed"


def _git_branch_line(issue: IssueSnapshot) -> Optional[str]:
    branch = issue.custom_field(FIELD_GIT_BRANCH)
    if not branch:
        return None
    return "git branch: " + _arrow(issue.old_value(FIELD_GIT_BRANCH), branch)


def _in_production_line(issue: IssueSnapshot) -> Optional[str]:
    value = issue.custom_field(FIELD_IN_PRODUCTION)
    if not value:
        return None
    return _arrow(issue.old_value(FIELD_IN_PRODUCTION), value)


def _state_line(issue: IssueSnapshot) -> Optional[str]:
    return _arrow(issue.old_value(FIELD_STATE), issue.state)


def _assignee_line(issue: IssueSnapshot) -> Optional[str]:
    if issue.assignee is None:
        return "Assignee removed!"
    return "Assignee: " + _arrow(issue.old_value(FIELD_ASSIGNEE), issue.assignee, UNASSIGNED)


def _priority_line(issue: IssueSnapshot) -> Optional[str]:
    return "Priority: " + _arrow(issue.old_value(FIELD_PRIORITY), issue.priority)


def _type_line(issue: IssueSnapshot) -> Optional[str]:
    return "Type: " + _arrow(issue.old_value(FIELD_TYPE), issue.type)


def _project_line(issue: IssueSnapshot) -> Optional[str]:
    return f"New project: *{issue.project or NOT_SPECIFIED}*"


_LINE_RENDERERS: Dict[str, Callable[[IssueSnapshot], Optional[str]]] = {
    FIELD_SUMMARY: _summary_line,
    FIELD_DESCRIPTION: _description_line,
    FIELD_GIT_BRANCH: _git_branch_line,
    FIELD_IN_PRODUCTION: _in_production_line,
    FIELD_STATE: _state_line,
    FIELD_ASSIGNEE: _assignee_line,
    FIELD_PRIORITY: _priority_line,
    FIELD_TYPE: _type_line,
    FIELD_PROJECT: _project_line,
}


def has_tracked_changes(issue: IssueSnapshot) -> bool:
    return any(issue.is_changed(name) for name in TRACKED_FIELDS)


def change_lines(issue: IssueSnapshot) -> List[str]:
    """One line per changed tracked field, in tracked-field order."""
    lines: List[str] = []
    for name in TRACKED_FIELDS:
        if not issue.is_changed(name):
            continue
        line = _LINE_RENDERERS[name](issue)
        if line:
            lines.append(line)
    return lines


def summarize_changes(issue: IssueSnapshot, actor_name: str) -> str:
    return render_changed(
        link=f"[{issue.id}]({issue.url})",
        title=issue.title,
        lines=change_lines(issue),
        actor_name=actor_name,
    )


def is_important(issue: IssueSnapshot) -> bool:
    """Assignee, priority and project changes are the important ones."""
    return any(issue.is_changed(name) for name in IMPORTANT_FIELDS)
