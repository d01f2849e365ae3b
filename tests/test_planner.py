"""
Tests for ReconciliationPlanner (notion_sync/sync/planner.py).

Covers the first-sync, linked, deleted and orphaned cases, and checks that
every input item ends up in exactly one action.
"""

from datetime import datetime, timedelta, timezone

from notion_sync.core.models import ReminderItem, SyncRecord
from notion_sync.sync.planner import ActionKind, ReconciliationPlanner


T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def apple(title, apple_id, minutes=0, **kw):
    return ReminderItem(title=title, apple_id=apple_id,
                        modification_date=T0 + timedelta(minutes=minutes), **kw)


def remote(title, remote_id, minutes=0, **kw):
    return ReminderItem(title=title, remote_id=remote_id,
                        modification_date=T0 + timedelta(minutes=minutes), **kw)


def record_for(apple_id, remote_id, synced_title="synced", record_id=None):
    record = SyncRecord(
        mapping_id="m",
        apple_id=apple_id,
        remote_id=remote_id,
        last_synced_hash=ReminderItem(title=synced_title).content_hash,
        last_apple_modification=T0,
        last_remote_modification=T0,
    )
    if record_id:
        record.id = record_id
    return record


def kinds(actions):
    return [action.kind for action in actions]


class TestFirstSync:
    """No records yet: creates and title matches."""

    def test_creates_on_both_sides(self):
        planner = ReconciliationPlanner()
        actions = planner.plan([apple("A", "r1")], [remote("B", "p1")], [])

        assert kinds(actions) == [ActionKind.CREATE_IN_REMOTE, ActionKind.CREATE_IN_APPLE]
        assert actions[0].item.apple_id == "r1"
        assert actions[1].item.remote_id == "p1"

    def test_title_match_newer_apple_updates_remote_with_page_id(self):
        planner = ReconciliationPlanner()
        actions = planner.plan(
            [apple("Same", "r1", minutes=10, notes="keep me")],
            [remote("Same", "p1", minutes=5)],
            [],
        )

        assert kinds(actions) == [ActionKind.UPDATE_REMOTE]
        item = actions[0].item
        assert item.apple_id == "r1"
        assert item.remote_id == "p1"
        assert actions[0].record is None

    def test_title_match_newer_remote_updates_apple_with_reminder_id(self):
        planner = ReconciliationPlanner()
        actions = planner.plan(
            [apple("Same", "r1", minutes=1)],
            [remote("Same", "p1", minutes=5, is_completed=True)],
            [],
        )

        assert kinds(actions) == [ActionKind.UPDATE_APPLE]
        item = actions[0].item
        assert item.apple_id == "r1"
        assert item.remote_id == "p1"
        assert item.is_completed

    def test_duplicate_titles_pair_first_unmatched(self):
        planner = ReconciliationPlanner()
        actions = planner.plan(
            [apple("Dup", "r1", minutes=9), apple("Dup", "r2", minutes=9)],
            [remote("Dup", "p1"), remote("Dup", "p2")],
            [],
        )

        assert kinds(actions) == [ActionKind.UPDATE_REMOTE, ActionKind.UPDATE_REMOTE]
        assert [(a.item.apple_id, a.item.remote_id) for a in actions] == [("r1", "p1"), ("r2", "p2")]

    def test_linked_page_is_not_title_matched(self):
        planner = ReconciliationPlanner()
        linked = record_for("r-old", "p1", synced_title="Same")
        actions = planner.plan(
            [apple("Same", "r-old"), apple("Same", "r-new")],
            [remote("Same", "p1")],
            [linked],
        )

        assert kinds(actions) == [ActionKind.SKIP, ActionKind.CREATE_IN_REMOTE]


class TestLinkedItems:

    def test_deleted_in_notion_deletes_reminder(self):
        planner = ReconciliationPlanner()
        record = record_for("r1", "p1")
        actions = planner.plan([apple("A", "r1")], [], [record])

        assert kinds(actions) == [ActionKind.DELETE_FROM_APPLE]
        assert actions[0].record is record

    def test_deleted_in_reminders_archives_page(self):
        planner = ReconciliationPlanner()
        record = record_for("r1", "p1")
        actions = planner.plan([], [remote("A", "p1")], [record])

        assert kinds(actions) == [ActionKind.DELETE_FROM_REMOTE]

    def test_gone_on_both_sides_cleans_up_record(self):
        planner = ReconciliationPlanner()
        actions = planner.plan([], [], [record_for("r1", "p1")])

        assert kinds(actions) == [ActionKind.CLEANUP_RECORD]
        assert actions[0].item is None

    def test_unchanged_pair_is_skipped(self):
        planner = ReconciliationPlanner()
        actions = planner.plan(
            [apple("A", "r1")], [remote("A", "p1")], [record_for("r1", "p1", synced_title="A")]
        )
        assert kinds(actions) == [ActionKind.SKIP]

    def test_conflict_flag_is_carried(self):
        planner = ReconciliationPlanner()
        actions = planner.plan(
            [apple("apple edit", "r1", minutes=3)],
            [remote("notion edit", "p1", minutes=7)],
            [record_for("r1", "p1", synced_title="A")],
        )

        assert kinds(actions) == [ActionKind.UPDATE_APPLE]
        assert actions[0].conflict
        assert actions[0].item.title == "notion edit"


class TestCompleteness:

    def test_every_item_covered_exactly_once(self):
        planner = ReconciliationPlanner()
        apple_items = [apple("linked", "r1"), apple("new", "r2"), apple("match", "r3", minutes=9),
                       apple("orphan-apple", "r4")]
        remote_items = [remote("linked", "p1"), remote("match", "p2"), remote("fresh", "p3")]
        records = [
            record_for("r1", "p1", synced_title="linked"),
            record_for("r4", "p-gone"),
            record_for("r-gone", "p-gone-2"),
        ]

        actions = planner.plan(apple_items, remote_items, records)

        seen_apple = [a.item.apple_id for a in actions if a.item and a.item.apple_id]
        seen_remote = [a.item.remote_id for a in actions if a.item and a.item.remote_id]
        assert sorted(seen_apple) == ["r1", "r2", "r3", "r4"]
        assert sorted(seen_remote) == ["p2", "p3"]
        assert len(actions) == 6

        # Record-backed actions come first
        assert kinds(actions)[:3] == [ActionKind.SKIP, ActionKind.DELETE_FROM_APPLE,
                                      ActionKind.CLEANUP_RECORD]
        assert kinds(actions)[3:] == [ActionKind.CREATE_IN_REMOTE, ActionKind.UPDATE_REMOTE,
                                      ActionKind.CREATE_IN_APPLE]
