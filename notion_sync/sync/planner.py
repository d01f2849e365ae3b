"""Reconciliation planning for a single mapping."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Set
import logging

from ..core.models import ReminderItem, SyncRecord
from .resolver import ConflictResolver, ResolutionKind


class ActionKind(Enum):
    CREATE_IN_REMOTE = "create_in_remote"
    CREATE_IN_APPLE = "create_in_apple"
    UPDATE_REMOTE = "update_remote"
    UPDATE_APPLE = "update_apple"
    DELETE_FROM_REMOTE = "delete_from_remote"
    DELETE_FROM_APPLE = "delete_from_apple"
    CLEANUP_RECORD = "cleanup_record"
    SKIP = "skip"


@dataclass
class PlannedAction:
    kind: ActionKind
    item: Optional[ReminderItem] = None
    record: Optional[SyncRecord] = None
    conflict: bool = False

    def describe(self) -> str:
        title = f" '{self.item.title}'" if self.item is not None else ""
        return f"{self.kind.value}{title}"


class ReconciliationPlanner:
    """Joins both item sets with the stored records into a list of actions.

    Every input item is covered by exactly one action. Record-backed actions
    come first, then items only known to Apple, then items only known to
    Notion.
    """

    def __init__(self, resolver: Optional[ConflictResolver] = None,
                 logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.resolver = resolver or ConflictResolver(logger=self.logger)

    def plan(self, apple_items: List[ReminderItem], remote_items: List[ReminderItem],
             records: List[SyncRecord]) -> List[PlannedAction]:
        apple_by_id: Dict[str, ReminderItem] = {
            item.apple_id: item for item in apple_items if item.apple_id
        }
        remote_by_id: Dict[str, ReminderItem] = {
            item.remote_id: item for item in remote_items if item.remote_id
        }

        actions: List[PlannedAction] = []
        processed_apple: Set[str] = set()
        processed_remote: Set[str] = set()

        # Known pairs
        for record in records:
            apple_item = apple_by_id.get(record.apple_id)
            remote_item = remote_by_id.get(record.remote_id)
            actions.append(self._plan_linked(apple_item, remote_item, record))
            processed_apple.add(record.apple_id)
            processed_remote.add(record.remote_id)

        # Apple-only items, possibly matching an unlinked page by title
        for apple_id, apple_item in apple_by_id.items():
            if apple_id in processed_apple:
                continue
            processed_apple.add(apple_id)

            match = self._find_title_match(apple_item, remote_items, processed_remote)
            if match is None:
                actions.append(PlannedAction(ActionKind.CREATE_IN_REMOTE, apple_item))
                continue

            processed_remote.add(match.remote_id)
            if apple_item.modification_date >= match.modification_date:
                merged = replace(apple_item, remote_id=match.remote_id)
                actions.append(PlannedAction(ActionKind.UPDATE_REMOTE, merged))
            else:
                merged = replace(match, apple_id=apple_id, notes=apple_item.notes)
                actions.append(PlannedAction(ActionKind.UPDATE_APPLE, merged))
            self.logger.debug(f"Linked '{apple_item.title}' by title on first sync")

        # Notion-only items
        for remote_id, remote_item in remote_by_id.items():
            if remote_id not in processed_remote:
                actions.append(PlannedAction(ActionKind.CREATE_IN_APPLE, remote_item))

        self.logger.debug(
            f"Planned {len(actions)} actions from {len(apple_items)} reminders, "
            f"{len(remote_items)} pages, {len(records)} records"
        )
        return actions

    def _plan_linked(self, apple_item: Optional[ReminderItem], remote_item: Optional[ReminderItem],
                     record: SyncRecord) -> PlannedAction:
        if apple_item is not None and remote_item is not None:
            resolution = self.resolver.resolve(apple_item, remote_item, record)
            if resolution.kind is ResolutionKind.USE_APPLE:
                return PlannedAction(ActionKind.UPDATE_REMOTE, resolution.item, record, resolution.conflict)
            if resolution.kind is ResolutionKind.USE_REMOTE:
                return PlannedAction(ActionKind.UPDATE_APPLE, resolution.item, record, resolution.conflict)
            return PlannedAction(ActionKind.SKIP, apple_item, record)

        # Deleted in Notion
        if apple_item is not None:
            return PlannedAction(ActionKind.DELETE_FROM_APPLE, apple_item, record)

        # Deleted in Reminders
        if remote_item is not None:
            return PlannedAction(ActionKind.DELETE_FROM_REMOTE, remote_item, record)

        return PlannedAction(ActionKind.CLEANUP_RECORD, None, record)

    @staticmethod
    def _find_title_match(apple_item: ReminderItem, remote_items: List[ReminderItem],
                          processed_remote: Set[str]) -> Optional[ReminderItem]:
        # First unpaired page with an identical title wins
        for candidate in remote_items:
            if (candidate.remote_id
                    and candidate.remote_id not in processed_remote
                    and candidate.title == apple_item.title):
                return candidate
        return None
