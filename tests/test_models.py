"""
Tests for domain models (notion_sync/core/models.py).
"""

from datetime import datetime, timezone, timedelta

import pytest

from notion_sync.core.models import (
    Priority,
    ReminderItem,
    SyncConfig,
    SyncHistoryEntry,
    SyncMapping,
    SyncOperation,
    SyncRecord,
    SyncStats,
    SyncStatus,
)


class TestPriority:
    """Priority conversion between EventKit numbers and Notion labels."""

    @pytest.mark.parametrize("value,expected", [
        (0, Priority.NONE),
        (1, Priority.HIGH),
        (3, Priority.HIGH),
        (4, Priority.MEDIUM),
        (6, Priority.MEDIUM),
        (7, Priority.LOW),
        (9, Priority.LOW),
        (None, Priority.NONE),
        (42, Priority.NONE),
    ])
    def test_from_apple_ranges(self, value, expected):
        assert Priority.from_apple(value) is expected

    def test_apple_values(self):
        assert Priority.HIGH.apple_value == 1
        assert Priority.MEDIUM.apple_value == 5
        assert Priority.LOW.apple_value == 9
        assert Priority.NONE.apple_value == 0

    def test_from_notion_is_case_insensitive(self):
        assert Priority.from_notion("High") is Priority.HIGH
        assert Priority.from_notion(" medium ") is Priority.MEDIUM
        assert Priority.from_notion("urgent") is Priority.NONE
        assert Priority.from_notion(None) is Priority.NONE

    def test_notion_value_is_capitalized(self):
        assert Priority.LOW.notion_value == "Low"


class TestReminderItemHash:
    """Content hash covers synced fields only."""

    def test_same_content_same_hash(self):
        a = ReminderItem(title="Buy milk", apple_id="r1")
        b = ReminderItem(title="Buy milk", remote_id="p1", notes="n://abcd1234",
                         modification_date=datetime(2020, 1, 1, tzinfo=timezone.utc))
        assert a.content_hash == b.content_hash

    def test_synced_fields_change_hash(self):
        base = ReminderItem(title="Buy milk")
        assert base.content_hash != ReminderItem(title="Buy oat milk").content_hash
        assert base.content_hash != ReminderItem(title="Buy milk", is_completed=True).content_hash
        assert base.content_hash != ReminderItem(title="Buy milk", priority=Priority.HIGH).content_hash

    def test_date_only_due_hashes_by_day(self):
        utc = ReminderItem(title="x", due_date=datetime(2024, 5, 1, tzinfo=timezone.utc))
        shifted = ReminderItem(title="x", due_date=datetime(2024, 5, 1, 17, 30, tzinfo=timezone.utc))
        assert utc.content_hash == shifted.content_hash

    def test_timed_due_ignores_microseconds(self):
        a = ReminderItem(title="x", due_date=datetime(2024, 5, 1, 9, 0, 0, 1, tzinfo=timezone.utc),
                         has_due_time=True)
        b = ReminderItem(title="x", due_date=datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc),
                         has_due_time=True)
        assert a.content_hash == b.content_hash

    def test_timed_and_date_only_differ(self):
        due = datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert (ReminderItem(title="x", due_date=due).content_hash
                != ReminderItem(title="x", due_date=due, has_due_time=True).content_hash)

    def test_timed_due_is_zone_independent(self):
        utc = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        plus_two = utc.astimezone(timezone(timedelta(hours=2)))
        assert (ReminderItem(title="x", due_date=utc, has_due_time=True).content_hash
                == ReminderItem(title="x", due_date=plus_two, has_due_time=True).content_hash)


class TestSyncRecord:

    def test_short_id_is_first_eight_hex_chars(self):
        record = SyncRecord(
            id="3F2504E0-4F89-11D3-9A0C-0305E82C3301",
            mapping_id="m", apple_id="a", remote_id="r", last_synced_hash="h",
            last_apple_modification=datetime.now(timezone.utc),
            last_remote_modification=datetime.now(timezone.utc),
        )
        assert record.short_id == "3f2504e0"

    def test_dict_round_trip_keeps_status(self):
        record = SyncRecord(
            mapping_id="m", apple_id="a", remote_id="r", last_synced_hash="h",
            last_apple_modification=datetime(2024, 1, 1, tzinfo=timezone.utc),
            last_remote_modification=datetime(2024, 1, 2, tzinfo=timezone.utc),
            status=SyncStatus.CONFLICT,
        )
        restored = SyncRecord.from_dict(record.to_dict())
        assert restored == record

    def test_unknown_status_becomes_error(self):
        data = {
            "id": "x", "mapping_id": "m", "apple_id": "a", "remote_id": "r",
            "status": "bogus",
        }
        restored = SyncRecord.from_dict(data)
        assert restored.status is SyncStatus.ERROR
        assert restored.last_apple_modification == datetime.fromtimestamp(0, tz=timezone.utc)


class TestSyncMapping:

    def test_completed_labels_defaults(self, mapping):
        mapping.status_completed_value = None
        assert mapping.completed_labels == ["Done"]

    def test_completed_labels_prefers_list(self, mapping):
        mapping.status_completed_values = ["Done", "Archived"]
        assert mapping.completed_labels == ["Done", "Archived"]

    def test_from_dict_requires_core_fields(self):
        with pytest.raises(KeyError):
            SyncMapping.from_dict({"apple_list_id": "l"})

    def test_dict_round_trip(self, mapping):
        mapping.last_sync_date = datetime(2024, 2, 2, 12, 0, tzinfo=timezone.utc)
        assert SyncMapping.from_dict(mapping.to_dict()) == mapping

    def test_display_name(self, mapping):
        assert mapping.display_name == "Work <-> Tasks"


class TestSyncStats:

    def test_merge_accumulates(self):
        total = SyncStats(created=1)
        total.merge(SyncStats(updated=2, conflicts=1, errors=["boom"]))
        assert (total.created, total.updated, total.conflicts) == (1, 2, 1)
        assert total.errors == ["boom"]
        assert total.total_changes == 3
        assert "1 errors" in total.summary()


class TestSyncHistoryEntry:

    def test_unknown_operation_falls_back(self):
        entry = SyncHistoryEntry.from_dict({"mapping_id": "m", "operation": "weird"})
        assert entry.operation is SyncOperation.INCREMENTAL_SYNC
        assert not entry.has_errors


class TestSyncConfig:

    def test_defaults_use_home_override(self, isolated_home):
        config = SyncConfig()
        assert config.state_path.startswith(str(isolated_home))
        assert config.sync_interval_minutes == 5

    def test_interval_clamped(self):
        assert SyncConfig(sync_interval_minutes=0).sync_interval_minutes == 1

    def test_save_and_load(self, tmp_path):
        path = str(tmp_path / "config.json")
        config = SyncConfig(state_path=str(tmp_path / "s.json"), sync_interval_minutes=15,
                            notion_timeout=10.0, history_limit=20)
        config.save_to_file(path)

        loaded = SyncConfig.load_from_file(path)
        assert loaded.sync_interval_minutes == 15
        assert loaded.notion_timeout == 10.0
        assert loaded.history_limit == 20
        assert loaded.state_path == str(tmp_path / "s.json")

    def test_load_missing_or_corrupt_returns_defaults(self, tmp_path):
        assert SyncConfig.load_from_file(str(tmp_path / "missing.json")).sync_interval_minutes == 5

        corrupt = tmp_path / "bad.json"
        corrupt.write_text('{"sync": ')
        assert SyncConfig.load_from_file(str(corrupt)).sync_interval_minutes == 5
