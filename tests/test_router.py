from issue_notifications.directory import RecipientDirectory
from issue_notifications.messages import MessageKind
from issue_notifications.models import Comment, NotificationEvent, Tag
from issue_notifications.router import RULES, route, should_process
from issue_notifications.service import build_notifications

from helpers import ALICE, BOB, CAROL, DAVE, ERIN, GHOST, URSULA, make_issue, star


def destinations(notifications, kind=None):
    return [n.destination for n in notifications if kind is None or n.kind == kind]


def kinds(notifications):
    return [n.kind for n in notifications]


def test_rules_are_evaluated_in_priority_order():
    assert [(rule.name, rule.terminal) for rule in RULES] == [
        ("subscribed", True),
        ("created", True),
        ("commented", True),
        ("assigned", False),
        ("removed", True),
        ("resolved", False),
        ("reopened", False),
        ("changed", False),
    ]


def test_created_issue_notifies_assignee_and_mentions(directory):
    issue = make_issue(
        description="@bob can you take a look? @bob @ursula",
        assignee=ALICE,
        reporter=URSULA,
        becomes_reported=True,
    )
    notifications = build_notifications(issue, GHOST, directory)

    assert destinations(notifications) == ["111", "222"]
    assert set(kinds(notifications)) == {MessageKind.CREATED}
    text = notifications[0].text
    assert text.startswith("📨 New issue created: Checkout fails\n")
    assert "Assignee: Alice Smith" in text
    assert "Created by: Ursula Reporter" in text
    assert "Link: [PRJ-7](https://tracker.example.com/issue/PRJ-7)" in text
    assert text.endswith("State: Open\nPriority: Normal")


def test_created_issue_skips_assignee_who_reported_it(directory):
    issue = make_issue(description=None, assignee=ALICE, reporter=ALICE, becomes_reported=True)
    assert build_notifications(issue, BOB, directory) == []


def test_created_issue_merges_watchers_assignee_and_mentions():
    directory = RecipientDirectory.from_mapping(
        {
            "watchers": {"dave": "100", "carol": "300", "ursula": "900"},
            "watchers_important": {"erin": "500", "carol": "300"},
            "assignees": {"alice": "111"},
            "mentions": {"bob": "222", "carol": "300", "alice": "111"},
        }
    )
    issue = make_issue(
        description="@carol @bob @alice see the trace",
        assignee=ALICE,
        reporter=URSULA,
        becomes_reported=True,
        tags=(star(DAVE), star(ERIN), star(CAROL), star(URSULA)),
    )
    notifications = build_notifications(issue, BOB, directory)

    assert destinations(notifications) == ["100", "500", "300", "111", "222"]
    assert set(kinds(notifications)) == {MessageKind.CREATED}


def test_new_comments_reach_watchers_assignee_and_mentions(directory):
    issue = make_issue(
        assignee=ALICE,
        tags=(star(DAVE), star(ERIN)),
        comments=(
            Comment(author=ALICE, text="Old remark @bob", url="https://t/c/1"),
            Comment(author=DAVE, text="Reproduced, @carol knows the cause", url="https://t/c/2", is_new=True),
            Comment(author=BOB, text="Fix is on the way", url="https://t/c/3", is_new=True),
        ),
    )
    notifications = build_notifications(issue, BOB, directory)

    assert destinations(notifications) == ["100", "500", "111", "333"]
    assert set(kinds(notifications)) == {MessageKind.COMMENTED}
    assert notifications[0].text == (
        "💬 [PRJ-7](https://tracker.example.com/issue/PRJ-7) Checkout fails"
        "\n\nReproduced, @carol knows the cause [🔗](https://t/c/2)\n© _Dave Brown_"
        "\n\nFix is on the way [🔗](https://t/c/3)\n© _Bob Jones_"
    )


def test_comment_suppresses_field_change_messages(directory):
    issue = make_issue(
        tags=(star(DAVE),),
        comments=(Comment(author=BOB, text="done", is_new=True),),
        changed={"Priority"},
        becomes_resolved=True,
    )
    notifications = build_notifications(issue, BOB, directory)
    assert kinds(notifications) == [MessageKind.COMMENTED]


def test_recipients_are_deduplicated_across_sources():
    directory = RecipientDirectory.from_mapping(
        {
            "watchers": {"alice": "111"},
            "assignees": {"alice": "111"},
            "mentions": {"alice": "111"},
        }
    )
    issue = make_issue(
        assignee=ALICE,
        tags=(star(ALICE),),
        comments=(Comment(author=BOB, text="@alice @alice see above", is_new=True),),
    )
    assert destinations(build_notifications(issue, BOB, directory)) == ["111"]


def test_new_star_from_someone_else_only_confirms_subscription(directory):
    issue = make_issue(
        tags=(star(DAVE), star(ERIN, is_new=True)),
        changed={"Priority"},
        old_values={"Priority": "Minor"},
    )
    notifications = build_notifications(issue, BOB, directory)

    assert destinations(notifications) == ["500"]
    assert kinds(notifications) == [MessageKind.SUBSCRIBED]
    assert notifications[0].text.startswith("📳 You are subscribed to the issue Checkout fails\n")
    assert "Subscribed by: Bob Jones" in notifications[0].text


def test_own_star_does_not_confirm_subscription(directory):
    issue = make_issue(tags=(star(ERIN, is_new=True),), changed={"Priority"})
    notifications = build_notifications(issue, ERIN, directory)
    assert MessageKind.SUBSCRIBED not in kinds(notifications)


def test_unconfigured_star_owner_falls_through_to_changes(directory):
    issue = make_issue(tags=(star(DAVE), star(GHOST, is_new=True)), changed={"State"})
    notifications = build_notifications(issue, BOB, directory)
    assert kinds(notifications) == [MessageKind.CHANGED]
    assert destinations(notifications) == ["100"]


def test_resolution_only_reaches_important_watchers(directory):
    issue = make_issue(tags=(star(DAVE), star(ERIN), star(CAROL)), becomes_resolved=True)
    notifications = build_notifications(issue, BOB, directory)

    assert destinations(notifications) == ["500", "300"]
    assert set(kinds(notifications)) == {MessageKind.RESOLVED}
    assert notifications[0].text == (
        "✅ [PRJ-7](https://tracker.example.com/issue/PRJ-7) Checkout fails has been resolved\n© _Bob Jones_"
    )


def test_reopen_layers_with_state_change(directory):
    issue = make_issue(
        tags=(star(DAVE), star(ERIN)),
        becomes_unresolved=True,
        changed={"State"},
        old_values={"State": "Fixed"},
    )
    notifications = build_notifications(issue, BOB, directory)

    assert destinations(notifications, MessageKind.REOPENED) == ["500"]
    assert destinations(notifications, MessageKind.CHANGED) == ["100"]
    assert "has been reopened" in notifications[0].text


def test_reassignment_notifies_new_assignee_and_watchers(directory):
    issue = make_issue(
        assignee=BOB,
        tags=(star(DAVE), star(ERIN), star(CAROL)),
        changed={"Assignee"},
        old_values={"Assignee": ALICE},
    )
    notifications = build_notifications(issue, ALICE, directory)

    assert destinations(notifications, MessageKind.ASSIGNED) == ["222"]
    assert notifications[0].text == (
        "❗️ [PRJ-7](https://tracker.example.com/issue/PRJ-7) Checkout fails\n© _Alice Smith_"
    )
    # All-changes watchers plus the assignee, then the important-only watchers
    # in a second pass, which is why carol appears twice.
    assert destinations(notifications, MessageKind.CHANGED) == ["100", "300", "222", "500", "300"]
    changed = [n for n in notifications if n.kind == MessageKind.CHANGED]
    assert "Assignee: Alice Smith -> *Bob Jones*" in changed[0].text


def test_self_assignment_sends_no_direct_message(directory):
    issue = make_issue(assignee=BOB, changed={"Assignee"})
    notifications = build_notifications(issue, BOB, directory)
    assert MessageKind.ASSIGNED not in kinds(notifications)
    assert notifications == []


def test_unimportant_change_skips_important_watchers(directory):
    issue = make_issue(tags=(star(DAVE), star(ERIN)), changed={"summary"})
    notifications = build_notifications(issue, BOB, directory)
    assert destinations(notifications) == ["100"]


def test_removal_stops_resolution_and_change_messages(directory):
    issue = make_issue(
        assignee=ALICE,
        tags=(star(DAVE), star(ERIN)),
        becomes_removed=True,
        becomes_resolved=True,
        changed={"State"},
    )
    notifications = build_notifications(issue, BOB, directory)

    assert kinds(notifications) == [MessageKind.REMOVED] * 3
    assert destinations(notifications) == ["100", "500", "111"]
    assert "has been deleted" in notifications[0].text


def test_assignment_layers_before_removal(directory):
    issue = make_issue(assignee=ALICE, becomes_removed=True, changed={"Assignee"})
    notifications = build_notifications(issue, BOB, directory)
    assert kinds(notifications) == [MessageKind.ASSIGNED, MessageKind.REMOVED]


def test_actor_is_never_a_watcher_recipient(directory):
    issue = make_issue(tags=(star(DAVE), star(CAROL)), changed={"State"})
    notifications = build_notifications(issue, DAVE, directory)
    assert destinations(notifications) == ["300"]


def test_unconfigured_users_are_never_addressed(directory):
    ghost_issue = dict(
        description="@ghost please review",
        assignee=GHOST,
        tags=(star(GHOST, is_new=True),),
    )
    events = [
        make_issue(becomes_reported=True, reporter=URSULA, **ghost_issue),
        make_issue(comments=(Comment(author=BOB, text="@ghost?", is_new=True),), **ghost_issue),
        make_issue(changed={"Assignee", "Priority"}, **ghost_issue),
        make_issue(becomes_resolved=True, **ghost_issue),
        make_issue(becomes_removed=True, **ghost_issue),
    ]
    for issue in events:
        assert build_notifications(issue, BOB, directory) == []


def test_route_stops_at_first_terminal_rule(directory):
    issue = make_issue(becomes_reported=True, reporter=URSULA, assignee=ALICE, changed={"Priority"})
    event = NotificationEvent.from_change(issue, BOB)
    assert event.actor == URSULA
    assert kinds(route(event, directory)) == [MessageKind.CREATED]


def test_should_process_requires_a_relevant_change():
    assert should_process(make_issue()) is False
    assert should_process(make_issue(changed={"Spent Time"})) is False
    assert should_process(make_issue(changed={"State"})) is True
    assert should_process(make_issue(becomes_removed=True)) is True
    assert should_process(make_issue(tags=(Tag("Urgent", BOB, is_new=True),))) is True
    assert should_process(make_issue(comments=(Comment(author=BOB, is_new=True),))) is True
