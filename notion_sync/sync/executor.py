"""Applies planned actions to Reminders, Notion and the state store."""

from datetime import datetime
from typing import Callable, Optional
import logging

from ..core.exceptions import MissingLinkageIdError
from ..core.models import ReminderItem, SyncMapping, SyncRecord, SyncStats, SyncStatus
from ..utils.date import utcnow
from .fields import item_to_properties
from .interfaces import LocalTaskProvider, RemoteDatabaseClient, SyncStateStore
from .planner import ActionKind, PlannedAction


APPLE = "apple"
REMOTE = "remote"
BACKREFERENCE_SCHEME = "n://"


def effective_id(item: Optional[ReminderItem], record: Optional[SyncRecord], side: str) -> str:
    """Resolve the id of ``side`` from the item, falling back to the record.

    Raises:
        MissingLinkageIdError: neither carries an id for that side
    """
    if item is not None:
        value = item.id_for(side)
        if value:
            return value
    if record is not None:
        value = record.id_for(side)
        if value:
            return value
    raise MissingLinkageIdError(side, item.title if item is not None else None)


def backreference_token(record: SyncRecord) -> str:
    return f"{BACKREFERENCE_SCHEME}{record.short_id}"


class ActionExecutor:
    """Executes one PlannedAction at a time and returns its stats delta.

    Errors propagate to the caller, which records them without stopping the
    pass.
    """

    def __init__(
        self,
        local: LocalTaskProvider,
        remote: RemoteDatabaseClient,
        store: SyncStateStore,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.local = local
        self.remote = remote
        self.store = store
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock

    def execute(self, action: PlannedAction, mapping: SyncMapping) -> SyncStats:
        handler = {
            ActionKind.CREATE_IN_REMOTE: self._create_in_remote,
            ActionKind.CREATE_IN_APPLE: self._create_in_apple,
            ActionKind.UPDATE_REMOTE: self._update_remote,
            ActionKind.UPDATE_APPLE: self._update_apple,
            ActionKind.DELETE_FROM_REMOTE: self._delete_from_remote,
            ActionKind.DELETE_FROM_APPLE: self._delete_from_apple,
            ActionKind.CLEANUP_RECORD: self._cleanup_record,
            ActionKind.SKIP: self._skip,
        }[action.kind]

        self.logger.debug(f"Executing {action.describe()}")
        return handler(action, mapping)

    # -- creates --------------------------------------------------------------

    def _create_in_remote(self, action: PlannedAction, mapping: SyncMapping) -> SyncStats:
        item = action.item
        apple_id = effective_id(item, action.record, APPLE)

        page = self.remote.create_record(
            mapping.remote_database_id, item_to_properties(item, mapping)
        )
        record = self._save_record(
            mapping, action.record, item,
            apple_id=apple_id,
            remote_id=page.id,
            remote_modified=page.last_edited_time,
        )
        self._append_backreference(apple_id, record)
        self.logger.info(f"Created Notion page for '{item.title}'")
        return SyncStats(created=1)

    def _create_in_apple(self, action: PlannedAction, mapping: SyncMapping) -> SyncStats:
        item = action.item
        remote_id = effective_id(item, action.record, REMOTE)

        created = self.local.create_item(item, mapping.apple_list_id)
        apple_id = effective_id(created, None, APPLE)
        record = self._save_record(
            mapping, action.record, item,
            apple_id=apple_id,
            remote_id=remote_id,
            apple_modified=created.modification_date,
        )
        self._append_backreference(apple_id, record)
        self.logger.info(f"Created reminder for '{item.title}'")
        return SyncStats(created=1)

    # -- updates --------------------------------------------------------------

    def _update_remote(self, action: PlannedAction, mapping: SyncMapping) -> SyncStats:
        item = action.item
        page_id = effective_id(item, action.record, REMOTE)
        apple_id = effective_id(item, action.record, APPLE)

        page = self.remote.update_record(page_id, item_to_properties(item, mapping, for_update=True))
        self._save_record(
            mapping, action.record, item,
            apple_id=apple_id,
            remote_id=page_id,
            remote_modified=page.last_edited_time,
        )
        self.logger.info(f"Updated Notion page for '{item.title}'")
        return SyncStats(updated=1, conflicts=1 if action.conflict else 0)

    def _update_apple(self, action: PlannedAction, mapping: SyncMapping) -> SyncStats:
        item = action.item
        apple_id = effective_id(item, action.record, APPLE)
        page_id = effective_id(item, action.record, REMOTE)

        self.local.update_item(apple_id, item)
        self._save_record(
            mapping, action.record, item,
            apple_id=apple_id,
            remote_id=page_id,
            apple_modified=self.clock(),
        )
        self.logger.info(f"Updated reminder for '{item.title}'")
        return SyncStats(updated=1, conflicts=1 if action.conflict else 0)

    # -- deletes --------------------------------------------------------------

    def _delete_from_remote(self, action: PlannedAction, mapping: SyncMapping) -> SyncStats:
        page_id = effective_id(action.item, action.record, REMOTE)
        self.remote.archive_record(page_id)
        if action.record is not None:
            self.store.delete_record(action.record.id)
        self.logger.info(f"Archived Notion page {page_id} (reminder deleted)")
        return SyncStats(deleted=1)

    def _delete_from_apple(self, action: PlannedAction, mapping: SyncMapping) -> SyncStats:
        apple_id = effective_id(action.item, action.record, APPLE)
        self.local.delete_item(apple_id)
        if action.record is not None:
            self.store.delete_record(action.record.id)
        self.logger.info(f"Deleted reminder {apple_id} (page archived)")
        return SyncStats(deleted=1)

    def _cleanup_record(self, action: PlannedAction, mapping: SyncMapping) -> SyncStats:
        if action.record is not None:
            self.store.delete_record(action.record.id)
            self.logger.debug(f"Removed orphaned sync record {action.record.id}")
        return SyncStats()

    def _skip(self, action: PlannedAction, mapping: SyncMapping) -> SyncStats:
        return SyncStats(skipped=1)

    # -- helpers --------------------------------------------------------------

    def _save_record(
        self,
        mapping: SyncMapping,
        existing: Optional[SyncRecord],
        item: ReminderItem,
        apple_id: str,
        remote_id: str,
        apple_modified: Optional[datetime] = None,
        remote_modified: Optional[datetime] = None,
    ) -> SyncRecord:
        record = SyncRecord(
            mapping_id=mapping.id,
            apple_id=apple_id,
            remote_id=remote_id,
            last_synced_hash=item.content_hash,
            last_apple_modification=apple_modified or item.modification_date,
            last_remote_modification=remote_modified or item.modification_date,
            last_sync_date=self.clock(),
            status=SyncStatus.SYNCED,
        )
        if existing is not None:
            record.id = existing.id
        self.store.save_record(record)
        return record

    def _append_backreference(self, apple_id: str, record: SyncRecord) -> None:
        token = backreference_token(record)
        try:
            if self.local.append_backreference(apple_id, token):
                self.logger.debug(f"Added back-reference {token} to reminder {apple_id}")
        except Exception as e:
            self.logger.warning(f"Could not add back-reference to reminder {apple_id}: {e}")
