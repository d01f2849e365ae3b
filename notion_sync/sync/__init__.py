"""Sync module for bidirectional Reminders and Notion synchronization."""

from .engine import SyncEngine
from .executor import ActionExecutor, effective_id
from .planner import ActionKind, PlannedAction, ReconciliationPlanner
from .resolver import ConflictResolver, Resolution, ResolutionKind
from .scheduler import SyncScheduler

__all__ = [
    'SyncEngine',
    'ActionExecutor',
    'effective_id',
    'ActionKind',
    'PlannedAction',
    'ReconciliationPlanner',
    'ConflictResolver',
    'Resolution',
    'ResolutionKind',
    'SyncScheduler',
]
