"""Notifications domain - post-booking fan-out and the notification log"""

from .orchestrator import NotificationOrchestrator
from .repository import NotificationLog
from .router import router

__all__ = ["router", "NotificationOrchestrator", "NotificationLog"]
