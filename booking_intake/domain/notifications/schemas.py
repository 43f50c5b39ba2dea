"""Notification log schemas"""

from enum import Enum


class NotificationKind(str, Enum):
    DELIVERY = "delivery"  # Tracks one outbound message
    AUDIT = "audit"  # Append-only booking summary


class NotificationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    # Audit rows start unread for staff review
    UNREAD = "unread"


class NotificationType(str, Enum):
    BOOKING_CREATED = "booking_created"
    BOOKING_CONFIRMATION = "booking_confirmation"
    NEW_MAIN_BOOKING = "new_main_booking"
    ADMIN_ALERT = "admin_alert"
