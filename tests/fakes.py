"""
In-memory fakes for both sides of a mapping.

FakeReminders mimics RemindersTaskManager and FakeNotion mimics NotionClient
closely enough that the real planner, executor and engine run against them.
Both share a Clock so modification dates advance deterministically.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
import itertools

from notion_sync.core.exceptions import ReminderNotFoundError, SourceNotFoundError
from notion_sync.core.models import ReminderItem, SyncMapping
from notion_sync.notion.models import NotionPage
from notion_sync.notion.properties import PropertyValue
from notion_sync.sync.fields import item_to_properties


class Clock:
    """Monotonic fake clock; every call moves one second forward."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now


class FakeReminders:
    def __init__(self, clock: Clock, list_ids=("list-1",)):
        self.clock = clock
        self.list_ids = set(list_ids)
        self.items: Dict[str, ReminderItem] = {}
        self.calls: List[str] = []
        self._ids = itertools.count(1)

    def add(self, title: str, **fields) -> ReminderItem:
        apple_id = fields.pop("apple_id", None) or f"rem-{next(self._ids)}"
        fields.setdefault("modification_date", self.clock())
        item = ReminderItem(title=title, apple_id=apple_id, **fields)
        self.items[apple_id] = item
        return item

    def edit(self, apple_id: str, **fields) -> ReminderItem:
        fields.setdefault("modification_date", self.clock())
        self.items[apple_id] = replace(self.items[apple_id], **fields)
        return self.items[apple_id]

    def list_items(self, list_id: str) -> List[ReminderItem]:
        if list_id not in self.list_ids:
            raise SourceNotFoundError("Apple Reminders list", list_id)
        return list(self.items.values())

    def create_item(self, item: ReminderItem, list_id: str) -> ReminderItem:
        self.calls.append("create")
        created = replace(
            item, apple_id=f"rem-{next(self._ids)}", remote_id=None, modification_date=self.clock()
        )
        self.items[created.apple_id] = created
        return created

    def update_item(self, apple_id: str, item: ReminderItem) -> None:
        self.calls.append("update")
        if apple_id not in self.items:
            raise ReminderNotFoundError(f"Reminder {apple_id} not found")
        current = self.items[apple_id]
        self.items[apple_id] = replace(
            item, apple_id=apple_id, remote_id=None, notes=current.notes,
            modification_date=self.clock(),
        )

    def delete_item(self, apple_id: str) -> None:
        self.calls.append("delete")
        if self.items.pop(apple_id, None) is None:
            raise ReminderNotFoundError(f"Reminder {apple_id} not found")

    def append_backreference(self, apple_id: str, token: str) -> bool:
        item = self.items.get(apple_id)
        if item is None:
            raise ReminderNotFoundError(f"Reminder {apple_id} not found")
        notes = item.notes or ""
        if token in notes:
            return False
        # Notes are not part of the synced content, so the date stays put
        self.items[apple_id] = replace(item, notes=f"{notes}\n\n{token}" if notes else token)
        return True


class FakeNotion:
    """Stores pages keyed by property name, accepts writes keyed by property id."""

    def __init__(self, clock: Clock, mapping: SyncMapping):
        self.clock = clock
        self.database_id = mapping.remote_database_id
        self.names = {
            mapping.title_property_id: mapping.title_property_name,
            mapping.due_date_property_id: mapping.due_date_property_name,
            mapping.priority_property_id: mapping.priority_property_name,
            mapping.status_property_id: mapping.status_property_name,
            mapping.completed_property_id: mapping.completed_property_name,
        }
        self.mapping = mapping
        self.pages: Dict[str, NotionPage] = {}
        self.calls: List[str] = []
        self._ids = itertools.count(1)

    def add(self, item: ReminderItem, page_id: Optional[str] = None) -> NotionPage:
        """Seed a page as if a user had created it in Notion."""
        page = NotionPage(
            id=page_id or f"page-{next(self._ids)}",
            database_id=self.database_id,
            properties=self._by_name(item_to_properties(item, self.mapping)),
            last_edited_time=self.clock(),
        )
        self.pages[page.id] = page
        return page

    def edit(self, page_id: str, item: ReminderItem) -> NotionPage:
        page = self.pages[page_id]
        page.properties.update(self._by_name(item_to_properties(item, self.mapping, for_update=True)))
        page.last_edited_time = self.clock()
        return page

    def _by_name(self, properties: Dict[str, PropertyValue]) -> Dict[str, PropertyValue]:
        return {self.names.get(key, key): value for key, value in properties.items()}

    def list_records(self, database_id: str) -> List[NotionPage]:
        if database_id != self.database_id:
            raise SourceNotFoundError("Notion database", database_id)
        return [page for page in self.pages.values() if not page.archived]

    def create_record(self, database_id: str, properties: Dict[str, PropertyValue]) -> NotionPage:
        self.calls.append("create")
        page = NotionPage(
            id=f"page-{next(self._ids)}",
            database_id=database_id,
            properties=self._by_name(properties),
            last_edited_time=self.clock(),
        )
        self.pages[page.id] = page
        return page

    def update_record(self, page_id: str, properties: Dict[str, PropertyValue]) -> NotionPage:
        self.calls.append("update")
        if page_id not in self.pages:
            raise SourceNotFoundError("Notion page", page_id)
        page = self.pages[page_id]
        page.properties.update(self._by_name(properties))
        page.last_edited_time = self.clock()
        return page

    def archive_record(self, page_id: str) -> NotionPage:
        self.calls.append("archive")
        page = self.pages[page_id]
        page.archived = True
        page.last_edited_time = self.clock()
        return page

    def close(self) -> None:
        pass
