"""
Domain models for notion-sync.

This module contains the core data structures shared by the sync engine,
the Notion client and the Reminders adapter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4
import hashlib
import json
import os

from ..utils.date import format_date, format_datetime, parse_datetime, utcnow
from .paths import get_path_manager


def _normalize_path(path: str) -> str:
    """Expand user and convert to absolute path."""
    return os.path.abspath(os.path.expanduser(path))


def _new_id() -> str:
    return str(uuid4())


class Priority(Enum):
    """Task priority shared by both sides."""
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def apple_value(self) -> int:
        """EventKit priority number (1 is highest, 0 means unset)."""
        return _APPLE_PRIORITY[self]

    @property
    def notion_value(self) -> str:
        """Select option label used in Notion."""
        return self.value.capitalize()

    @classmethod
    def from_apple(cls, value: Optional[int]) -> Priority:
        if value is None:
            return cls.NONE
        if 1 <= value <= 3:
            return cls.HIGH
        if 4 <= value <= 6:
            return cls.MEDIUM
        if 7 <= value <= 9:
            return cls.LOW
        return cls.NONE

    @classmethod
    def from_notion(cls, label: Optional[str]) -> Priority:
        if not label:
            return cls.NONE
        try:
            return cls(label.strip().lower())
        except ValueError:
            return cls.NONE


_APPLE_PRIORITY = {
    Priority.NONE: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 5,
    Priority.LOW: 9,
}


class SyncStatus(Enum):
    """State of a single item link."""
    SYNCED = "synced"
    PENDING_TO_REMOTE = "pendingToRemote"
    PENDING_TO_APPLE = "pendingToApple"
    CONFLICT = "conflict"
    DELETED = "deleted"
    ERROR = "error"


class SyncOperation(Enum):
    """Kind of pass recorded in the history."""
    FULL_SYNC = "fullSync"
    INCREMENTAL_SYNC = "incrementalSync"
    MANUAL_SYNC = "manualSync"


@dataclass
class ReminderItem:
    """Side-neutral view of a task, built from either a reminder or a Notion page."""

    title: str
    due_date: Optional[datetime] = None
    has_due_time: bool = False
    priority: Priority = Priority.NONE
    is_completed: bool = False
    modification_date: datetime = field(default_factory=utcnow)
    apple_id: Optional[str] = None
    remote_id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def content_hash(self) -> str:
        """Fingerprint over the user-visible fields that are synced.

        Date-only due dates hash by calendar day so the value is stable
        regardless of the time zone either side stored it in.
        """
        if self.due_date is None:
            due = None
        elif self.has_due_time:
            due = format_datetime(self.due_date.replace(microsecond=0))
        else:
            due = format_date(self.due_date.date())

        payload = json.dumps(
            [self.title, due, self.has_due_time, self.priority.value, self.is_completed],
            ensure_ascii=False,
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]

    def id_for(self, side: str) -> Optional[str]:
        """Return the item's id on ``side`` ("apple" or "remote")."""
        return self.apple_id if side == "apple" else self.remote_id


@dataclass
class SyncMapping:
    """Binding of one Reminders list to one Notion database.

    Property ids are used when writing to Notion; property names are used when
    reading, because query results key page properties by name.
    """

    apple_list_id: str
    remote_database_id: str
    title_property_id: str
    title_property_name: str = "Name"
    apple_list_name: str = ""
    remote_database_name: str = ""
    id: str = field(default_factory=_new_id)
    is_enabled: bool = True
    due_date_property_id: Optional[str] = None
    due_date_property_name: Optional[str] = None
    priority_property_id: Optional[str] = None
    priority_property_name: Optional[str] = None
    status_property_id: Optional[str] = None
    status_property_name: Optional[str] = None
    status_completed_value: Optional[str] = None
    status_completed_values: Optional[List[str]] = None
    status_not_started_value: Optional[str] = None
    completed_property_id: Optional[str] = None
    completed_property_name: Optional[str] = None
    last_sync_date: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def uses_status(self) -> bool:
        return bool(self.status_property_id or self.status_property_name)

    @property
    def completed_labels(self) -> List[str]:
        """Status labels that count as done."""
        if self.status_completed_values:
            return list(self.status_completed_values)
        if self.status_completed_value:
            return [self.status_completed_value]
        return ["Done"]

    @property
    def display_name(self) -> str:
        apple = self.apple_list_name or self.apple_list_id
        remote = self.remote_database_name or self.remote_database_id
        return f"{apple} <-> {remote}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "apple_list_id": self.apple_list_id,
            "apple_list_name": self.apple_list_name,
            "remote_database_id": self.remote_database_id,
            "remote_database_name": self.remote_database_name,
            "is_enabled": self.is_enabled,
            "title_property_id": self.title_property_id,
            "title_property_name": self.title_property_name,
            "due_date_property_id": self.due_date_property_id,
            "due_date_property_name": self.due_date_property_name,
            "priority_property_id": self.priority_property_id,
            "priority_property_name": self.priority_property_name,
            "status_property_id": self.status_property_id,
            "status_property_name": self.status_property_name,
            "status_completed_value": self.status_completed_value,
            "status_completed_values": self.status_completed_values,
            "status_not_started_value": self.status_not_started_value,
            "completed_property_id": self.completed_property_id,
            "completed_property_name": self.completed_property_name,
            "last_sync_date": format_datetime(self.last_sync_date),
            "created_at": format_datetime(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SyncMapping:
        return cls(
            id=data.get("id") or _new_id(),
            apple_list_id=data["apple_list_id"],
            apple_list_name=data.get("apple_list_name", ""),
            remote_database_id=data["remote_database_id"],
            remote_database_name=data.get("remote_database_name", ""),
            is_enabled=data.get("is_enabled", True),
            title_property_id=data["title_property_id"],
            title_property_name=data.get("title_property_name", "Name"),
            due_date_property_id=data.get("due_date_property_id"),
            due_date_property_name=data.get("due_date_property_name"),
            priority_property_id=data.get("priority_property_id"),
            priority_property_name=data.get("priority_property_name"),
            status_property_id=data.get("status_property_id"),
            status_property_name=data.get("status_property_name"),
            status_completed_value=data.get("status_completed_value"),
            status_completed_values=data.get("status_completed_values"),
            status_not_started_value=data.get("status_not_started_value"),
            completed_property_id=data.get("completed_property_id"),
            completed_property_name=data.get("completed_property_name"),
            last_sync_date=parse_datetime(data.get("last_sync_date")),
            created_at=parse_datetime(data.get("created_at")) or utcnow(),
        )


@dataclass
class SyncRecord:
    """Durable link between one reminder and one Notion page within a mapping."""

    mapping_id: str
    apple_id: str
    remote_id: str
    last_synced_hash: str
    last_apple_modification: datetime
    last_remote_modification: datetime
    id: str = field(default_factory=_new_id)
    last_sync_date: datetime = field(default_factory=utcnow)
    status: SyncStatus = SyncStatus.SYNCED

    @property
    def short_id(self) -> str:
        """First eight hex characters of the record id, used in back-references."""
        return self.id.replace("-", "").lower()[:8]

    def id_for(self, side: str) -> Optional[str]:
        return self.apple_id if side == "apple" else self.remote_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "mapping_id": self.mapping_id,
            "apple_id": self.apple_id,
            "remote_id": self.remote_id,
            "last_synced_hash": self.last_synced_hash,
            "last_apple_modification": format_datetime(self.last_apple_modification),
            "last_remote_modification": format_datetime(self.last_remote_modification),
            "last_sync_date": format_datetime(self.last_sync_date),
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SyncRecord:
        try:
            status = SyncStatus(data.get("status", SyncStatus.SYNCED.value))
        except ValueError:
            status = SyncStatus.ERROR

        epoch = datetime.fromtimestamp(0, tz=timezone.utc)
        return cls(
            id=data["id"],
            mapping_id=data["mapping_id"],
            apple_id=data["apple_id"],
            remote_id=data["remote_id"],
            last_synced_hash=data.get("last_synced_hash", ""),
            last_apple_modification=parse_datetime(data.get("last_apple_modification")) or epoch,
            last_remote_modification=parse_datetime(data.get("last_remote_modification")) or epoch,
            last_sync_date=parse_datetime(data.get("last_sync_date")) or epoch,
            status=status,
        )


@dataclass
class SyncHistoryEntry:
    """Audit entry written once per mapping per pass."""

    mapping_id: str
    operation: SyncOperation = SyncOperation.INCREMENTAL_SYNC
    items_created: int = 0
    items_updated: int = 0
    items_deleted: int = 0
    conflicts: int = 0
    errors: List[str] = field(default_factory=list)
    id: str = field(default_factory=_new_id)
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": format_datetime(self.timestamp),
            "mapping_id": self.mapping_id,
            "operation": self.operation.value,
            "items_created": self.items_created,
            "items_updated": self.items_updated,
            "items_deleted": self.items_deleted,
            "conflicts": self.conflicts,
            "errors": list(self.errors),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SyncHistoryEntry:
        try:
            operation = SyncOperation(data.get("operation", SyncOperation.INCREMENTAL_SYNC.value))
        except ValueError:
            operation = SyncOperation.INCREMENTAL_SYNC

        return cls(
            id=data.get("id") or _new_id(),
            timestamp=parse_datetime(data.get("timestamp")) or utcnow(),
            mapping_id=data["mapping_id"],
            operation=operation,
            items_created=int(data.get("items_created", 0)),
            items_updated=int(data.get("items_updated", 0)),
            items_deleted=int(data.get("items_deleted", 0)),
            conflicts=int(data.get("conflicts", 0)),
            errors=list(data.get("errors", [])),
        )


@dataclass
class SyncStats:
    """Counters accumulated while applying actions."""

    created: int = 0
    updated: int = 0
    deleted: int = 0
    conflicts: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def total_changes(self) -> int:
        return self.created + self.updated + self.deleted

    def merge(self, other: SyncStats) -> SyncStats:
        self.created += other.created
        self.updated += other.updated
        self.deleted += other.deleted
        self.conflicts += other.conflicts
        self.skipped += other.skipped
        self.errors.extend(other.errors)
        return self

    def summary(self) -> str:
        text = (
            f"{self.created} created, {self.updated} updated, "
            f"{self.deleted} deleted, {self.conflicts} conflicts"
        )
        if self.errors:
            text += f", {len(self.errors)} errors"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "created": self.created,
            "updated": self.updated,
            "deleted": self.deleted,
            "conflicts": self.conflicts,
            "skipped": self.skipped,
            "errors": list(self.errors),
        }


@dataclass
class SyncConfig:
    """Configuration for sync operations."""

    state_path: Optional[str] = None
    sync_interval_minutes: int = 5
    notion_base_url: str = "https://api.notion.com/v1"
    notion_api_version: str = "2022-06-28"
    notion_timeout: float = 30.0
    notion_token_env: str = "NOTION_API_KEY"
    history_limit: int = 100

    def __post_init__(self) -> None:
        if self.state_path is None:
            self.state_path = str(get_path_manager().state_path)
        else:
            self.state_path = _normalize_path(self.state_path)

        if self.sync_interval_minutes < 1:
            self.sync_interval_minutes = 1

    @classmethod
    def load_from_file(cls, config_path: str) -> SyncConfig:
        config_path = _normalize_path(config_path)
        if not os.path.exists(config_path):
            return cls()

        try:
            with open(config_path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except json.JSONDecodeError:
            return cls()

        notion = data.get("notion", {})
        sync_settings = data.get("sync", {})
        paths = data.get("paths", {})

        return cls(
            state_path=paths.get("state"),
            sync_interval_minutes=sync_settings.get("interval_minutes", 5),
            history_limit=sync_settings.get("history_limit", 100),
            notion_base_url=notion.get("base_url", "https://api.notion.com/v1"),
            notion_api_version=notion.get("api_version", "2022-06-28"),
            notion_timeout=float(notion.get("timeout", 30.0)),
            notion_token_env=notion.get("token_env", "NOTION_API_KEY"),
        )

    def save_to_file(self, config_path: str) -> None:
        config_path = _normalize_path(config_path)
        os.makedirs(os.path.dirname(config_path), exist_ok=True)

        data = {
            "notion": {
                "base_url": self.notion_base_url,
                "api_version": self.notion_api_version,
                "timeout": self.notion_timeout,
                "token_env": self.notion_token_env,
            },
            "sync": {
                "interval_minutes": self.sync_interval_minutes,
                "history_limit": self.history_limit,
            },
            "paths": {
                "state": self.state_path,
            },
        }

        with open(config_path, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
