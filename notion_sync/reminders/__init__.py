"""Reminders module for Apple Reminders integration."""

from .gateway import RemindersGateway
from .tasks import RemindersTaskManager

__all__ = ['RemindersGateway', 'RemindersTaskManager']
