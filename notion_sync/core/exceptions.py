"""
Exception classes for notion-sync.
"""

from typing import Optional


class NotionSyncError(Exception):
    """Base exception for all notion-sync errors."""
    pass


class ConfigurationError(NotionSyncError):
    """Raised when configuration is invalid or missing."""
    pass


class AlreadySyncingError(NotionSyncError):
    """Raised when a sync pass is requested while another one is running."""

    def __init__(self, message: str = "A sync is already in progress"):
        super().__init__(message)


class SourceNotFoundError(NotionSyncError):
    """Raised when a mapped Reminders list or Notion database no longer resolves."""

    def __init__(self, source: str, identifier: str):
        self.source = source
        self.identifier = identifier
        super().__init__(f"{source} not found: {identifier}")


class MissingLinkageIdError(NotionSyncError):
    """Raised when an action cannot resolve the id it needs on one side."""

    def __init__(self, side: str, title: Optional[str] = None):
        self.side = side
        self.title = title
        label = "Apple Reminder ID" if side == "apple" else "Notion page ID"
        message = f"Missing {label}"
        if title:
            message = f"{message} for '{title}'"
        super().__init__(message)


class RemoteError(NotionSyncError):
    """Base exception for Notion API errors."""
    pass


class RemoteUnavailableError(RemoteError):
    """Raised on transport failures and 5xx responses from Notion."""
    pass


class RateLimitedError(RemoteUnavailableError):
    """Raised when Notion answers 429 Too Many Requests."""

    def __init__(self, retry_after: Optional[float] = None):
        self.retry_after = retry_after
        message = "Rate limited by Notion"
        if retry_after is not None:
            message = f"{message}, retry after {retry_after:g}s"
        super().__init__(message)


class NotionAPIError(RemoteError):
    """Raised when Notion returns a structured error response."""

    def __init__(self, status_code: int, code: Optional[str], message: str):
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"Notion API error {status_code} ({code or 'unknown'}): {message}")


class PropertyDecodeError(RemoteError):
    """Raised when a Notion property payload has an unsupported shape."""
    pass


class RemindersError(NotionSyncError):
    """Base exception for Reminders-related errors."""
    pass


class AuthorizationError(RemindersError):
    """Raised when EventKit authorization fails."""
    pass


class EventKitImportError(RemindersError):
    """Raised when EventKit/PyObjC dependencies are not available."""
    pass


class ReminderNotFoundError(RemindersError):
    """Raised when a reminder cannot be found by its identifier."""
    pass


class StateStoreError(NotionSyncError):
    """Raised when the sync state file cannot be written."""
    pass
