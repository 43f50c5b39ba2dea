"""Notification router - staff review of the notification log"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...database import get_db
from .repository import NotificationLog, serialize_notification
from .schemas import NotificationStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("")
async def get_notifications_by_status(
    status: NotificationStatus = Query(NotificationStatus.FAILED),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Notifications in a given status, newest first (defaults to failed deliveries)"""
    try:
        notifications = NotificationLog.get_by_status(db, status.value, limit)
    except SQLAlchemyError as e:
        logger.error(f"❌ Get notifications by status {status.value} failed: {e}")
        return JSONResponse(
            status_code=500, content={"success": False, "message": "Failed to retrieve notifications"}
        )

    return {
        "success": True,
        "status": status.value,
        "notifications": [serialize_notification(n) for n in notifications],
    }
