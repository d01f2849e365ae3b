"""Conflict resolution for bidirectional sync."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

from ..core.models import ReminderItem, SyncRecord


class ResolutionKind(Enum):
    USE_APPLE = "use_apple"
    USE_REMOTE = "use_remote"
    NO_CHANGE = "no_change"


@dataclass
class Resolution:
    kind: ResolutionKind
    item: Optional[ReminderItem] = None
    conflict: bool = False


class ConflictResolver:
    """Decides which side of an already-linked pair wins."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self, apple_item: ReminderItem, remote_item: ReminderItem,
                record: SyncRecord) -> Resolution:
        """
        Resolve a linked pair against its last synced state.

        Identical content never produces a change. When only one side moved
        since the last sync, that side wins without looking at clocks. When
        both moved, the later modification wins and ties go to Apple. When
        neither moved the difference comes from fields the mapping does not
        carry, so nothing is written.
        """
        if apple_item.content_hash == remote_item.content_hash:
            return Resolution(ResolutionKind.NO_CHANGE)

        apple_changed = apple_item.content_hash != record.last_synced_hash
        remote_changed = remote_item.modification_date > record.last_remote_modification

        if apple_changed and not remote_changed:
            self.logger.debug(f"Apple changed '{apple_item.title}' -> apple wins")
            return Resolution(ResolutionKind.USE_APPLE, apple_item)

        if remote_changed and not apple_changed:
            self.logger.debug(f"Notion changed '{remote_item.title}' -> notion wins")
            return Resolution(ResolutionKind.USE_REMOTE, remote_item)

        if not apple_changed and not remote_changed:
            self.logger.debug(f"Neither side changed '{apple_item.title}' since last sync")
            return Resolution(ResolutionKind.NO_CHANGE)

        if apple_item.modification_date >= remote_item.modification_date:
            winner = Resolution(ResolutionKind.USE_APPLE, apple_item, conflict=True)
        else:
            winner = Resolution(ResolutionKind.USE_REMOTE, remote_item, conflict=True)

        self.logger.debug(
            f"Conflict on '{apple_item.title}': apple={apple_item.modification_date.isoformat()} "
            f"notion={remote_item.modification_date.isoformat()} -> {winner.kind.value}"
        )
        return winner
