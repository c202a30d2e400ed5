import pytest

from issue_notifications.directory import RecipientDirectory


@pytest.fixture
def directory():
    return RecipientDirectory.from_mapping(
        {
            "watchers": {"dave": "100", "carol": "300"},
            "watchers_important": {"erin": "500", "carol": "300"},
            "assignees": {"alice": "111", "bob": "222"},
            "mentions": {"bob": "222", "carol": "333", "alice": "111"},
        }
    )
