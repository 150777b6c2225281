"""
Notifications Module

Persisted in-app notifications with best-effort email delivery.
"""

from .models import Notification, NotificationType

__all__ = ["Notification", "NotificationType"]
