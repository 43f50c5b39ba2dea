"""Notification log - Database operations for delivery tracking and audit rows"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Notification
from .schemas import NotificationKind, NotificationStatus

logger = logging.getLogger(__name__)


class NotificationLog:
    """
    One table for both delivery-tracked and audit notifications.

    Delivery rows move pending -> sent | failed exactly once. Audit rows
    are never updated.
    """

    @staticmethod
    def log_delivery(
        db: Session,
        booking_number: Optional[str],
        notification_type: str,
        title: str,
        message: str,
        delivery_method: str,
        booking_id: Optional[int] = None,
        recipient_email: Optional[str] = None,
        status: NotificationStatus = NotificationStatus.PENDING,
        error_message: Optional[str] = None,
    ) -> Notification:
        entry = Notification(
            kind=NotificationKind.DELIVERY.value,
            booking_id=booking_id,
            booking_number=booking_number,
            notification_type=notification_type,
            title=title,
            message=message,
            delivery_method=delivery_method,
            recipient_email=recipient_email,
            status=status.value,
            error_message=error_message,
            retry_count=0,
            max_retries=3,
        )
        db.add(entry)
        db.commit()
        db.refresh(entry)
        logger.info(
            f"📝 Notification {entry.id} logged: {notification_type} for {booking_number} ({status.value})"
        )
        return entry

    @staticmethod
    def log_audit(
        db: Session,
        booking_number: str,
        notification_type: str,
        title: str,
        message: str,
        metadata: dict,
        booking_id: Optional[int] = None,
    ) -> Notification:
        entry = Notification(
            kind=NotificationKind.AUDIT.value,
            booking_id=booking_id,
            booking_number=booking_number,
            notification_type=notification_type,
            title=title,
            message=message,
            delivery_method="internal",
            status=NotificationStatus.UNREAD.value,
            metadata_snapshot=metadata,
        )
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def mark_sent(
        db: Session,
        entry: Notification,
        external_id: Optional[str] = None,
        external_status: Optional[str] = None,
    ) -> Notification:
        entry.status = NotificationStatus.SENT.value
        entry.external_id = external_id
        entry.external_status = external_status
        entry.sent_at = datetime.utcnow()
        db.commit()
        db.refresh(entry)
        logger.info(f"✅ Notification {entry.id} marked sent")
        return entry

    @staticmethod
    def mark_failed(db: Session, entry: Notification, error_message: str) -> Notification:
        entry.status = NotificationStatus.FAILED.value
        entry.error_message = error_message
        entry.retry_count = (entry.retry_count or 0) + 1
        db.commit()
        db.refresh(entry)
        logger.warning(f"⚠️ Notification {entry.id} marked failed: {error_message}")
        return entry

    @staticmethod
    def get_for_booking(db: Session, booking_number: str) -> list[Notification]:
        return (
            db.query(Notification)
            .filter(Notification.booking_number == booking_number)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

    @staticmethod
    def get_by_status(db: Session, status: str, limit: int = 100) -> list[Notification]:
        return (
            db.query(Notification)
            .filter(Notification.status == status)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )


def serialize_notification(entry: Notification) -> dict:
    return {
        "id": entry.id,
        "kind": entry.kind,
        "bookingId": entry.booking_id,
        "bookingNumber": entry.booking_number,
        "notificationType": entry.notification_type,
        "title": entry.title,
        "message": entry.message,
        "deliveryMethod": entry.delivery_method,
        "recipientEmail": entry.recipient_email,
        "status": entry.status,
        "externalId": entry.external_id,
        "externalStatus": entry.external_status,
        "errorMessage": entry.error_message,
        "retryCount": entry.retry_count,
        "metadata": entry.metadata_snapshot,
        "sentAt": entry.sent_at.isoformat() if entry.sent_at else None,
        "createdAt": entry.created_at.isoformat() if entry.created_at else None,
    }
