"""Utility modules for notion-sync."""
