from issue_notifications.models import IssueSnapshot, Tag, User

ALICE = User("alice", "Alice Smith")
BOB = User("bob", "Bob Jones")
CAROL = User("carol", "Carol White")
DAVE = User("dave", "Dave Brown")
ERIN = User("erin", "Erin Green")
URSULA = User("ursula", "Ursula Reporter")
GHOST = User("ghost", "Not Configured")


def star(owner, is_new=False):
    return Tag(name="Star", owner=owner, is_new=is_new)


def make_issue(**overrides):
    values = {
        "id": "PRJ-7",
        "title": "Checkout fails",
        "description": "Steps to reproduce inside.",
        "url": "https://tracker.example.com/issue/PRJ-7",
        "state": "Open",
        "priority": "Normal",
        "type": "Bug",
        "project": "Shop",
    }
    values.update(overrides)
    return IssueSnapshot(**values)
