"""Main sync engine orchestrating passes over all mappings."""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging
import threading

from ..core.exceptions import AlreadySyncingError
from ..core.models import (
    ReminderItem,
    SyncHistoryEntry,
    SyncMapping,
    SyncOperation,
    SyncStats,
)
from ..utils.date import format_datetime, utcnow
from .executor import ActionExecutor
from .fields import page_to_item
from .interfaces import LocalTaskProvider, RemoteDatabaseClient, SyncStateStore
from .planner import ReconciliationPlanner
from .resolver import ConflictResolver


class SyncEngine:
    """Runs sync passes between Apple Reminders and Notion.

    Only one pass runs at a time. A second request while a pass is in
    progress fails fast with AlreadySyncingError instead of waiting.
    """

    def __init__(
        self,
        local: LocalTaskProvider,
        remote: RemoteDatabaseClient,
        store: SyncStateStore,
        resolver: Optional[ConflictResolver] = None,
        planner: Optional[ReconciliationPlanner] = None,
        executor: Optional[ActionExecutor] = None,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.local = local
        self.remote = remote
        self.store = store
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock

        self.resolver = resolver or ConflictResolver(logger=self.logger)
        self.planner = planner or ReconciliationPlanner(self.resolver, logger=self.logger)
        self.executor = executor or ActionExecutor(
            local, remote, store, logger=self.logger, clock=clock
        )

        self._lock = threading.Lock()
        self.last_sync_date: Optional[datetime] = None
        self.last_error: Optional[Exception] = None

    @property
    def is_syncing(self) -> bool:
        return self._lock.locked()

    def status(self) -> Dict[str, Any]:
        return {
            "is_syncing": self.is_syncing,
            "last_sync_date": format_datetime(self.last_sync_date),
            "last_error": str(self.last_error) if self.last_error else None,
        }

    def sync_all(self, operation: SyncOperation = SyncOperation.INCREMENTAL_SYNC) -> Dict[str, SyncStats]:
        """Sync every enabled mapping once, in order.

        A failing mapping is logged, recorded in its history and stored as
        ``last_error``; the remaining mappings still run.

        Returns:
            Stats per mapping id for the mappings that completed
        """
        self._acquire()
        results: Dict[str, SyncStats] = {}
        try:
            self.last_error = None
            mappings = self.store.get_mappings()
            enabled = [m for m in mappings if m.is_enabled]
            self.logger.info(f"Found {len(mappings)} mappings, {len(enabled)} enabled")

            for mapping in enabled:
                try:
                    results[mapping.id] = self._sync_mapping(mapping, operation)
                except Exception as e:
                    self.logger.error(f"Failed to sync mapping {mapping.display_name}: {e}")
                    self.last_error = e
                    self._record_failure(mapping, operation, e)

            self.last_sync_date = self.clock()
            return results
        finally:
            self._lock.release()

    def sync(self, mapping: SyncMapping, operation: SyncOperation = SyncOperation.MANUAL_SYNC) -> SyncStats:
        """Run a single guarded pass for one mapping.

        Mapping-level errors propagate to the caller after being recorded.
        """
        self._acquire()
        try:
            stats = self._sync_mapping(mapping, operation)
            self.last_error = None
            self.last_sync_date = self.clock()
            return stats
        except Exception as e:
            self.last_error = e
            self._record_failure(mapping, operation, e)
            raise
        finally:
            self._lock.release()

    def _acquire(self) -> None:
        if not self._lock.acquire(blocking=False):
            raise AlreadySyncingError()

    def _sync_mapping(self, mapping: SyncMapping, operation: SyncOperation) -> SyncStats:
        self.logger.info(f"Starting sync for mapping: {mapping.display_name}")

        apple_items = self.local.list_items(mapping.apple_list_id)
        pages = self.remote.list_records(mapping.remote_database_id)
        remote_items: List[ReminderItem] = [page_to_item(page, mapping) for page in pages]
        records = self.store.get_records(mapping.id)

        self.logger.info(
            f"Found {len(apple_items)} reminders, {len(remote_items)} Notion pages, "
            f"{len(records)} sync records"
        )

        actions = self.planner.plan(apple_items, remote_items, records)

        stats = SyncStats()
        for action in actions:
            try:
                stats.merge(self.executor.execute(action, mapping))
            except Exception as e:
                self.logger.error(f"Action {action.describe()} failed: {e}")
                stats.errors.append(str(e))

        mapping.last_sync_date = self.clock()
        if self.store.get_mapping(mapping.id) is None:
            self.logger.warning(f"Mapping {mapping.display_name} was removed during the pass")
        else:
            self.store.save_mapping(mapping)
            self.store.save_history_entry(SyncHistoryEntry(
                mapping_id=mapping.id,
                operation=operation,
                items_created=stats.created,
                items_updated=stats.updated,
                items_deleted=stats.deleted,
                conflicts=stats.conflicts,
                errors=list(stats.errors),
                timestamp=self.clock(),
            ))

        self.logger.info(f"Sync completed for {mapping.display_name}: {stats.summary()}")
        return stats

    def _record_failure(self, mapping: SyncMapping, operation: SyncOperation, error: Exception) -> None:
        try:
            self.store.save_history_entry(SyncHistoryEntry(
                mapping_id=mapping.id,
                operation=operation,
                errors=[str(error)],
                timestamp=self.clock(),
            ))
        except Exception as e:
            self.logger.error(f"Could not record failure for mapping {mapping.id}: {e}")
