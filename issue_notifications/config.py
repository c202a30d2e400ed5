"""Shared constants for the issue notification router."""
from __future__ import annotations

STAR_TAG = "Star"
DRAFT_ISSUE_ID = "Issue.Draft"

FIELD_SUMMARY = "summary"
FIELD_DESCRIPTION = "description"
FIELD_GIT_BRANCH = "Git branch"
FIELD_IN_PRODUCTION = "In Production"
FIELD_STATE = "State"
FIELD_ASSIGNEE = "Assignee"
FIELD_PRIORITY = "Priority"
FIELD_TYPE = "Type"
FIELD_PROJECT = "project"

# Order matters: it is the line order of the change message.
TRACKED_FIELDS = (
    FIELD_SUMMARY,
    FIELD_DESCRIPTION,
    FIELD_GIT_BRANCH,
    FIELD_IN_PRODUCTION,
    FIELD_STATE,
    FIELD_ASSIGNEE,
    FIELD_PRIORITY,
    FIELD_TYPE,
    FIELD_PROJECT,
)
IMPORTANT_FIELDS = (FIELD_ASSIGNEE, FIELD_PRIORITY, FIELD_PROJECT)
CUSTOM_FIELDS = (FIELD_GIT_BRANCH, FIELD_IN_PRODUCTION)

NOT_SPECIFIED = "not specified"
UNASSIGNED = "unassigned"

DEFAULT_TELEGRAM_API_URL = "https://api.telegram.org"
TRUTHY = {"1", "true", "yes", "on"}

DELIVERY_TASK = "issue_notifications.tasks.deliver_notification"
DEFAULT_DELIVERY_QUEUE = "notifications"
