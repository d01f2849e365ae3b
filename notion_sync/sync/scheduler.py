"""Periodic trigger for sync passes."""

from datetime import datetime, timedelta
from typing import Dict, Optional
import logging
import threading

from ..core.exceptions import AlreadySyncingError
from ..core.models import SyncOperation, SyncStats
from ..utils.date import utcnow
from .engine import SyncEngine


DEFAULT_INTERVAL_MINUTES = 5


class SyncScheduler:
    """Runs ``SyncEngine.sync_all`` on a fixed interval using a timer thread."""

    def __init__(self, engine: SyncEngine, interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
                 logger: Optional[logging.Logger] = None):
        self.engine = engine
        self.interval_minutes = max(1, int(interval_minutes))
        self.logger = logger or logging.getLogger(__name__)
        self.next_sync_date: Optional[datetime] = None
        self._timer: Optional[threading.Timer] = None
        self._stopped = threading.Event()
        self._stopped.set()
        self._state_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return not self._stopped.is_set()

    def start(self) -> None:
        with self._state_lock:
            if self.is_running:
                return
            self._stopped.clear()
            self._schedule_next()
        self.logger.info(f"Scheduler started, syncing every {self.interval_minutes} minutes")

    def stop(self) -> None:
        with self._state_lock:
            self._stopped.set()
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self.next_sync_date = None
        self.logger.info("Scheduler stopped")

    def restart(self, interval_minutes: Optional[int] = None) -> None:
        self.stop()
        if interval_minutes is not None:
            self.interval_minutes = max(1, int(interval_minutes))
        self.start()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the scheduler is stopped. Returns True if it stopped."""
        return self._stopped.wait(timeout)

    def sync_now(self, operation: SyncOperation = SyncOperation.INCREMENTAL_SYNC) -> Optional[Dict[str, SyncStats]]:
        """Trigger a pass immediately. Returns None if one was already running."""
        try:
            return self.engine.sync_all(operation)
        except AlreadySyncingError:
            self.logger.info("Sync already in progress, skipping this trigger")
            return None

    def _schedule_next(self) -> None:
        interval = self.interval_minutes * 60
        self._timer = threading.Timer(interval, self._tick)
        self._timer.daemon = True
        self._timer.start()
        self.next_sync_date = utcnow() + timedelta(seconds=interval)

    def _tick(self) -> None:
        try:
            self.sync_now()
        except Exception as e:
            self.logger.error(f"Scheduled sync failed: {e}")
        finally:
            with self._state_lock:
                if self.is_running:
                    self._schedule_next()
