#!/usr/bin/env python3
"""
Global pytest configuration and fixtures.

This module provides:
- Platform-specific test skipping (macOS/EventKit tests)
- Isolation of the notion-sync home directory
- Shared mapping, clock and fake-side fixtures
"""

import os
import platform
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from notion_sync.core.models import SyncMapping  # noqa: E402
from notion_sync.core.paths import get_path_manager  # noqa: E402
from notion_sync.state.store import JsonSyncStateStore  # noqa: E402
from tests.fakes import Clock, FakeNotion, FakeReminders  # noqa: E402

HAS_EVENTKIT = False

try:
    if platform.system() == "Darwin":
        import objc  # noqa: F401
        import EventKit  # noqa: F401
        HAS_EVENTKIT = True
except ImportError:
    pass


def pytest_configure(config):
    """Configure pytest environment."""
    config.addinivalue_line("markers", "macos: test requires macOS")
    config.addinivalue_line("markers", "eventkit: test requires EventKit framework")


def pytest_collection_modifyitems(config, items):
    """
    Modify test collection to skip platform-specific tests.

    Automatically skip macOS/EventKit tests on non-Darwin platforms.
    """
    skip_macos = pytest.mark.skip(reason="macOS/EventKit tests require Darwin platform")
    skip_eventkit = pytest.mark.skip(reason="Test requires EventKit framework")

    for item in items:
        if "macos" in item.keywords and platform.system() != "Darwin":
            item.add_marker(skip_macos)

        if "eventkit" in item.keywords and not HAS_EVENTKIT:
            item.add_marker(skip_eventkit)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point NOTION_SYNC_HOME at a temp dir so tests never touch real state."""
    monkeypatch.setenv("NOTION_SYNC_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("NOTION_API_KEY", raising=False)
    get_path_manager().reset()
    yield tmp_path / "home"
    get_path_manager().reset()


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def mapping() -> SyncMapping:
    """Mapping with title, due date, priority and status bindings."""
    return SyncMapping(
        id="mapping-1",
        apple_list_id="list-1",
        apple_list_name="Work",
        remote_database_id="db-1",
        remote_database_name="Tasks",
        title_property_id="title",
        title_property_name="Name",
        due_date_property_id="due%3A",
        due_date_property_name="Due",
        priority_property_id="prio",
        priority_property_name="Priority",
        status_property_id="stat",
        status_property_name="Status",
        status_completed_value="Done",
        status_not_started_value="Not started",
    )


@pytest.fixture
def store(tmp_path) -> JsonSyncStateStore:
    return JsonSyncStateStore(str(tmp_path / "state" / "sync_state.json"))


@pytest.fixture
def reminders(clock) -> FakeReminders:
    return FakeReminders(clock)


@pytest.fixture
def notion(clock, mapping) -> FakeNotion:
    return FakeNotion(clock, mapping)
