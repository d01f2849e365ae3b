"""Persistence for sync state."""

from .store import JsonSyncStateStore

__all__ = ['JsonSyncStateStore']
