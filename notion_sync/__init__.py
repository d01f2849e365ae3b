"""
notion-sync - Bidirectional Apple Reminders ↔ Notion synchronization.
"""

__version__ = "0.1.0"
