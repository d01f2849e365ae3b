"""
Command implementations for notion-sync.
"""

from .sync import SyncCommand
from .status import StatusCommand, HistoryCommand
from .mapping import AddMappingCommand, RemoveMappingCommand
from .watch import WatchCommand

__all__ = [
    'SyncCommand',
    'StatusCommand',
    'HistoryCommand',
    'AddMappingCommand',
    'RemoveMappingCommand',
    'WatchCommand',
]
