"""Notification log and outbound balance-change notifications."""

from .models import NotificationLogEntry
from .service import NotificationLogService
from .telegram import TelegramNotifier, should_notify

__all__ = [
    "NotificationLogEntry",
    "NotificationLogService",
    "TelegramNotifier",
    "should_notify",
]
