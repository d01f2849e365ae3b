"""
Core module for notion-sync - contains domain models, configuration, and exceptions.
"""

from .models import (
    ReminderItem,
    SyncMapping,
    SyncRecord,
    SyncHistoryEntry,
    SyncStats,
    SyncStatus,
    SyncOperation,
    Priority,
    SyncConfig
)

from .exceptions import (
    NotionSyncError,
    ConfigurationError,
    AlreadySyncingError,
    SourceNotFoundError,
    MissingLinkageIdError,
    RemoteUnavailableError,
    RateLimitedError,
    RemindersError,
)

__all__ = [
    # Models
    'ReminderItem',
    'SyncMapping',
    'SyncRecord',
    'SyncHistoryEntry',
    'SyncStats',
    'SyncStatus',
    'SyncOperation',
    'Priority',
    'SyncConfig',
    # Exceptions
    'NotionSyncError',
    'ConfigurationError',
    'AlreadySyncingError',
    'SourceNotFoundError',
    'MissingLinkageIdError',
    'RemoteUnavailableError',
    'RateLimitedError',
    'RemindersError',
]
