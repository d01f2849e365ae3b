"""Reminders task manager implementing the local side of a mapping."""

from dataclasses import replace
from typing import List, Optional
import logging

from ..core.exceptions import ReminderNotFoundError, RemindersError, SourceNotFoundError
from ..core.models import Priority, ReminderItem
from ..utils.date import parse_datetime, parse_due, utcnow
from .gateway import ReminderData, RemindersGateway


BACKREFERENCE_SEPARATOR = "\n\n"


class RemindersTaskManager:
    """Manages CRUD operations for reminders in terms of ReminderItem."""

    def __init__(
        self,
        gateway: Optional[RemindersGateway] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.gateway = gateway or RemindersGateway(logger=logger)
        self.logger = logger or logging.getLogger(__name__)

    def list_items(self, list_id: str) -> List[ReminderItem]:
        """Return every reminder in the list, completed ones included.

        Raises:
            SourceNotFoundError: the list no longer exists
        """
        known = {lst.get('id') for lst in self.gateway.get_lists()}
        if list_id not in known:
            raise SourceNotFoundError("Apple Reminders list", list_id)

        items = [self._to_item(rem) for rem in self.gateway.get_reminders([list_id])]
        self.logger.debug(f"Loaded {len(items)} reminders from list {list_id}")
        return items

    def create_item(self, item: ReminderItem, list_id: str) -> ReminderItem:
        uuid = self.gateway.create_reminder(
            item.title,
            list_id,
            due_date=item.due_date,
            has_due_time=item.has_due_time,
            priority=item.priority.apple_value,
            completed=item.is_completed,
            notes=item.notes,
        )
        if not uuid:
            raise RemindersError(f"Failed to create reminder '{item.title}' in list {list_id}")

        created = self.gateway.get_reminder(uuid)
        if created is not None:
            return self._to_item(created)
        return replace(item, apple_id=uuid, remote_id=None, modification_date=utcnow())

    def update_item(self, apple_id: str, item: ReminderItem) -> None:
        updated = self.gateway.update_reminder(
            apple_id,
            title=item.title,
            completed=item.is_completed,
            due_date=item.due_date,
            has_due_time=item.has_due_time,
            priority=item.priority.apple_value,
        )
        if not updated:
            raise RemindersError(f"Failed to update reminder {apple_id}")

    def delete_item(self, apple_id: str) -> None:
        if not self.gateway.delete_reminder(apple_id):
            raise RemindersError(f"Failed to delete reminder {apple_id}")

    def append_backreference(self, apple_id: str, token: str) -> bool:
        """Append ``token`` to the reminder's notes unless already present.

        Returns:
            True if the notes were changed
        """
        reminder = self.gateway.get_reminder(apple_id)
        if reminder is None:
            raise ReminderNotFoundError(f"Reminder {apple_id} not found")

        notes = reminder.notes or ""
        if token in notes:
            return False

        new_notes = f"{notes}{BACKREFERENCE_SEPARATOR}{token}" if notes else token
        if not self.gateway.update_reminder(apple_id, notes=new_notes):
            raise RemindersError(f"Failed to update notes of reminder {apple_id}")
        return True

    def _to_item(self, rem: ReminderData) -> ReminderItem:
        due_date, has_due_time = parse_due(rem.due_date)
        return ReminderItem(
            title=rem.title,
            due_date=due_date,
            has_due_time=has_due_time,
            priority=Priority.from_apple(rem.priority),
            is_completed=rem.completed,
            modification_date=parse_datetime(rem.modified_at) or utcnow(),
            apple_id=rem.uuid,
            notes=rem.notes,
        )
