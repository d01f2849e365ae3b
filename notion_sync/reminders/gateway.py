"""Apple Reminders gateway using EventKit."""

import threading
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any
from dataclasses import dataclass
import logging

from ..core.exceptions import (
    RemindersError,
    AuthorizationError,
    EventKitImportError
)


FETCH_TIMEOUT_SECONDS = 30
AUTH_TIMEOUT_SECONDS = 30

# NSDateComponentUndefined (NSIntegerMax)
_UNDEFINED_COMPONENT = 0x7FFFFFFFFFFFFFFF


@dataclass
class ReminderData:
    """Plain snapshot of an EKReminder."""
    uuid: str
    title: str
    completed: bool
    due_date: Optional[str] = None
    has_due_time: bool = False
    priority: int = 0
    notes: Optional[str] = None
    list_id: Optional[str] = None
    list_name: Optional[str] = None
    created_at: Optional[str] = None
    modified_at: Optional[str] = None


def _component(components, name: str) -> Optional[int]:
    value = getattr(components, name)()
    if value is None or value == _UNDEFINED_COMPONENT:
        return None
    return int(value)


def _nsdate_to_iso(nsdate) -> Optional[str]:
    if not nsdate:
        return None
    return datetime.fromtimestamp(nsdate.timeIntervalSince1970(), tz=timezone.utc).isoformat()


class RemindersGateway:
    """Gateway for Apple Reminders via EventKit."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._store = None
        self._authorized = False

    def _ensure_eventkit(self):
        """Bind the EventKit and Foundation classes on first use."""
        try:
            from EventKit import (
                EKEventStore, EKEntityTypeReminder, EKReminder,
                EKAuthorizationStatusAuthorized
            )
            from Foundation import NSRunLoop, NSDate, NSDateComponents

            self._EKEventStore = EKEventStore
            self._EKEntityTypeReminder = EKEntityTypeReminder
            self._EKReminder = EKReminder
            self._EKAuthorizationStatusAuthorized = EKAuthorizationStatusAuthorized
            self._NSRunLoop = NSRunLoop
            self._NSDate = NSDate
            self._NSDateComponents = NSDateComponents

        except ImportError as e:
            self.logger.error(f"PyObjC EventKit bindings unavailable: {e}")
            raise EventKitImportError(
                "Apple Reminders support needs the PyObjC EventKit bindings:\n"
                "  pip install 'notion-sync[macos]'\n"
                f"({e})"
            )

    def _run_loop_until(self, done: threading.Event, timeout: float) -> bool:
        """Spin the run loop until ``done`` is set. Returns False on timeout."""
        deadline = time.time() + timeout
        while not done.is_set():
            if time.time() > deadline:
                return False
            self._NSRunLoop.currentRunLoop().runUntilDate_(
                self._NSDate.dateWithTimeIntervalSinceNow_(0.1)
            )
        return True

    def _get_store(self):
        """Get or create the EventKit store, requesting access if needed."""
        if self._store:
            return self._store

        self._ensure_eventkit()

        try:
            self._store = self._EKEventStore.alloc().init()
        except Exception as e:
            raise RemindersError(f"Could not open the EventKit store: {e}")

        status = int(self._EKEventStore.authorizationStatusForEntityType_(self._EKEntityTypeReminder))
        if status == int(self._EKAuthorizationStatusAuthorized):
            self._authorized = True
            return self._store

        if status == 1:  # Restricted
            raise AuthorizationError(
                "Reminders access is restricted on this Mac (Screen Time or an MDM profile)."
            )
        if status == 2:  # Denied
            raise AuthorizationError(
                "notion-sync was denied access to Reminders. "
                "Enable it in System Settings > Privacy & Security > Reminders "
                "and restart notion-sync."
            )

        self.logger.info("Asking macOS for Reminders access")
        done = threading.Event()
        outcome: Dict[str, Any] = {}

        def on_access(granted, error):
            outcome.update(granted=bool(granted), error=error)
            done.set()

        self._store.requestAccessToEntityType_completion_(self._EKEntityTypeReminder, on_access)

        if not self._run_loop_until(done, AUTH_TIMEOUT_SECONDS):
            raise AuthorizationError(
                f"No answer to the Reminders access prompt within {AUTH_TIMEOUT_SECONDS}s"
            )

        if not outcome.get("granted"):
            detail = f": {outcome['error']}" if outcome.get("error") else ""
            raise AuthorizationError(f"User denied access to Reminders{detail}")

        self._authorized = True
        self.logger.info("EventKit authorization granted")
        return self._store

    def _calendars(self, store) -> List[Any]:
        return list(store.calendarsForEntityType_(self._EKEntityTypeReminder) or [])

    def _find_calendar(self, store, list_id: str):
        for cal in self._calendars(store):
            if str(cal.calendarIdentifier()) == list_id:
                return cal
        return None

    def _find_reminder(self, store, uuid: str):
        item = store.calendarItemWithIdentifier_(uuid)
        if item is None or not item.isKindOfClass_(self._EKReminder):
            return None
        return item

    def get_lists(self) -> List[Dict[str, str]]:
        """Every reminder list as ``{"id", "name"}``."""
        store = self._get_store()
        try:
            return [
                {'id': str(cal.calendarIdentifier()), 'name': str(cal.title() or 'Untitled')}
                for cal in self._calendars(store)
            ]
        except Exception as e:
            raise RemindersError(f"Could not list reminder calendars: {e}")

    def get_reminders(self, list_ids: Optional[List[str]] = None) -> List[ReminderData]:
        """Get reminders from the given lists (all lists when omitted)."""
        store = self._get_store()

        calendars = self._calendars(store)
        if list_ids:
            calendars = [c for c in calendars if str(c.calendarIdentifier()) in list_ids]
        if not calendars:
            self.logger.warning(f"None of the requested lists exist: {list_ids}")
            return []

        reminders = []
        done = threading.Event()

        def on_fetched(batch):
            reminders.extend(batch or [])
            done.set()

        try:
            predicate = store.predicateForRemindersInCalendars_(calendars)
            store.fetchRemindersMatchingPredicate_completion_(predicate, on_fetched)
        except Exception as e:
            raise RemindersError(f"Reminder query failed: {e}")

        if not self._run_loop_until(done, FETCH_TIMEOUT_SECONDS):
            raise RemindersError(f"Reminder fetch timed out after {FETCH_TIMEOUT_SECONDS} seconds")

        result = []
        for rem in reminders:
            try:
                result.append(self._to_data(rem))
            except Exception as e:
                self.logger.warning(f"Skipping unreadable reminder: {e}")
        return result

    def get_reminder(self, uuid: str) -> Optional[ReminderData]:
        store = self._get_store()
        rem = self._find_reminder(store, uuid)
        return self._to_data(rem) if rem is not None else None

    def _to_data(self, rem) -> ReminderData:
        due_date = None
        has_due_time = False
        components = rem.dueDateComponents()
        if components:
            year = _component(components, 'year')
            month = _component(components, 'month')
            day = _component(components, 'day')
            hour = _component(components, 'hour')
            minute = _component(components, 'minute') or 0
            if year and month and day:
                if hour is not None:
                    local = datetime(year, month, day, hour, minute).astimezone()
                    due_date = local.astimezone(timezone.utc).isoformat()
                    has_due_time = True
                else:
                    due_date = f"{year:04d}-{month:02d}-{day:02d}"

        cal = rem.calendar()
        return ReminderData(
            uuid=str(rem.calendarItemIdentifier()),
            title=str(rem.title() or ''),
            completed=bool(rem.isCompleted()),
            due_date=due_date,
            has_due_time=has_due_time,
            priority=int(rem.priority() or 0),
            notes=str(rem.notes()) if rem.notes() else None,
            list_id=str(cal.calendarIdentifier()) if cal else None,
            list_name=str(cal.title() or 'Untitled') if cal else None,
            created_at=_nsdate_to_iso(rem.creationDate()),
            modified_at=_nsdate_to_iso(rem.lastModifiedDate()),
        )

    def _apply_due(self, reminder, due_date: Optional[datetime], has_due_time: bool) -> None:
        if due_date is None:
            reminder.setDueDateComponents_(None)
            return

        components = self._NSDateComponents.alloc().init()
        if has_due_time:
            local = due_date.astimezone()
            components.setYear_(local.year)
            components.setMonth_(local.month)
            components.setDay_(local.day)
            components.setHour_(local.hour)
            components.setMinute_(local.minute)
        else:
            components.setYear_(due_date.year)
            components.setMonth_(due_date.month)
            components.setDay_(due_date.day)
        reminder.setDueDateComponents_(components)

    def create_reminder(self, title: str, list_id: str, **properties) -> Optional[str]:
        """Create a reminder in ``list_id``. Returns its identifier, or None on failure."""
        try:
            store = self._get_store()
            calendar = self._find_calendar(store, list_id)
            if calendar is None:
                self.logger.error(f"Calendar with ID '{list_id}' not found")
                return None

            reminder = self._EKReminder.reminderWithEventStore_(store)
            reminder.setTitle_(title)
            reminder.setCalendar_(calendar)
            self._apply_due(reminder, properties.get('due_date'), properties.get('has_due_time', False))
            reminder.setPriority_(int(properties.get('priority', 0)))
            reminder.setCompleted_(bool(properties.get('completed', False)))
            if properties.get('notes'):
                reminder.setNotes_(properties['notes'])

            success, error = store.saveReminder_commit_error_(reminder, True, None)
            if success:
                return str(reminder.calendarItemIdentifier())
            self.logger.error(f"EventKit refused new reminder {title!r}: {error}")

        except RemindersError:
            raise
        except Exception as e:
            self.logger.error(f"Could not create reminder {title!r}: {e}")

        return None

    def update_reminder(self, uuid: str, **updates) -> bool:
        """Update fields of an existing reminder. Returns False if it was not saved."""
        try:
            store = self._get_store()
            reminder = self._find_reminder(store, uuid)
            if reminder is None:
                self.logger.warning(f"Reminder {uuid} not found")
                return False

            if 'title' in updates:
                reminder.setTitle_(updates['title'])
            if 'completed' in updates:
                reminder.setCompleted_(bool(updates['completed']))
            if 'due_date' in updates:
                self._apply_due(reminder, updates['due_date'], updates.get('has_due_time', False))
            if 'priority' in updates:
                reminder.setPriority_(int(updates['priority']))
            if 'notes' in updates:
                reminder.setNotes_(updates['notes'] or None)

            success, error = store.saveReminder_commit_error_(reminder, True, None)
            if not success:
                self.logger.error(f"Failed to save reminder {uuid}: error={error}")
            return bool(success)

        except RemindersError:
            raise
        except Exception as e:
            self.logger.error(f"Could not update reminder {uuid}: {e}")
            return False

    def delete_reminder(self, uuid: str) -> bool:
        """Delete a reminder. Returns False if it was not removed."""
        try:
            store = self._get_store()
            reminder = self._find_reminder(store, uuid)
            if reminder is None:
                return False
            success, error = store.removeReminder_commit_error_(reminder, True, None)
            if not success:
                self.logger.error(f"EventKit refused to delete {uuid}: {error}")
            return bool(success)

        except RemindersError:
            raise
        except Exception as e:
            self.logger.error(f"Could not delete reminder {uuid}: {e}")
            return False
