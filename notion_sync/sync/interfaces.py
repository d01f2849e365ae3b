"""Collaborator interfaces the sync engine is written against."""

from typing import Dict, List, Optional, Protocol

from ..core.models import ReminderItem, SyncHistoryEntry, SyncMapping, SyncRecord
from ..notion.models import NotionPage
from ..notion.properties import PropertyValue


class LocalTaskProvider(Protocol):
    """Apple Reminders side of a mapping."""

    def list_items(self, list_id: str) -> List[ReminderItem]: ...

    def create_item(self, item: ReminderItem, list_id: str) -> ReminderItem: ...

    def update_item(self, apple_id: str, item: ReminderItem) -> None: ...

    def delete_item(self, apple_id: str) -> None: ...

    def append_backreference(self, apple_id: str, token: str) -> bool: ...


class RemoteDatabaseClient(Protocol):
    """Notion side of a mapping."""

    def list_records(self, database_id: str) -> List[NotionPage]: ...

    def create_record(self, database_id: str, properties: Dict[str, PropertyValue]) -> NotionPage: ...

    def update_record(self, page_id: str, properties: Dict[str, PropertyValue]) -> NotionPage: ...

    def archive_record(self, page_id: str) -> NotionPage: ...


class SyncStateStore(Protocol):
    """Persistence for mappings, item links and pass history."""

    def get_mappings(self) -> List[SyncMapping]: ...

    def get_mapping(self, mapping_id: str) -> Optional[SyncMapping]: ...

    def save_mapping(self, mapping: SyncMapping) -> None: ...

    def delete_mapping(self, mapping_id: str) -> None: ...

    def get_records(self, mapping_id: str) -> List[SyncRecord]: ...

    def get_record(self, record_id: str) -> Optional[SyncRecord]: ...

    def get_record_by_apple_id(self, apple_id: str, mapping_id: str) -> Optional[SyncRecord]: ...

    def get_record_by_remote_id(self, remote_id: str, mapping_id: str) -> Optional[SyncRecord]: ...

    def save_record(self, record: SyncRecord) -> None: ...

    def delete_record(self, record_id: str) -> None: ...

    def delete_records(self, mapping_id: str) -> None: ...

    def save_history_entry(self, entry: SyncHistoryEntry) -> None: ...

    def get_history(self, mapping_id: str, limit: int = 50) -> List[SyncHistoryEntry]: ...
