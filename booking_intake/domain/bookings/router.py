"""Booking router - FastAPI endpoints for booking intake"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...database import get_db
from ..notifications.orchestrator import NotificationOrchestrator
from ..notifications.repository import NotificationLog, serialize_notification
from .exceptions import BookingValidationError, PersistenceError
from .schemas import (
    BookingListResponse,
    BookingStatsResponse,
    BookingStatus,
    BookingStatusUpdate,
    BookingSubmission,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


def get_notification_orchestrator(request: Request) -> NotificationOrchestrator:
    """The orchestrator built once at startup"""
    return request.app.state.notification_orchestrator


def booking_error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "bookingNumber": "",
            "status": BookingStatus.ERROR.value,
            "message": message,
            **extra,
        },
    )


def not_found_response() -> JSONResponse:
    return JSONResponse(status_code=404, content={"success": False, "message": "Booking not found"})


# ============================================================================
# BOOKING INTAKE
# ============================================================================


@router.post("")
async def create_booking(
    data: BookingSubmission,
    background_tasks: BackgroundTasks,
    service: BookingService = Depends(get_booking_service),
    notifier: NotificationOrchestrator = Depends(get_notification_orchestrator),
):
    """Create a booking, respond, then send notifications in the background"""
    try:
        result = service.create_booking(data)
    except BookingValidationError as e:
        logger.warning(f"⚠️ Booking rejected ({e.field}): {e.message}")
        return booking_error_response(400, e.message, field=e.field)
    except PersistenceError as e:
        logger.error(f"❌ Booking creation error: {e}")
        return booking_error_response(500, UNEXPECTED_ERROR_MESSAGE)

    # Runs only after the response has been sent
    background_tasks.add_task(notifier.notify, result["data"])
    return result


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    status: Optional[str] = Query(None, description="Filter by booking status"),
    search: Optional[str] = Query(None, description="Customer email or booking number, partial match"),
    schedule_date: Optional[str] = Query(None, description="Exact schedule date (YYYY-MM-DD)"),
    service: BookingService = Depends(get_booking_service),
):
    """Bookings for the admin portal, newest first"""
    try:
        return service.list_bookings(
            limit=limit, offset=offset, status=status, search=search, schedule_date=schedule_date
        )
    except PersistenceError as e:
        logger.error(f"❌ List bookings error: {e}")
        return JSONResponse(
            status_code=500, content={"success": False, "message": "Failed to retrieve bookings"}
        )


@router.get("/today")
async def get_todays_bookings(service: BookingService = Depends(get_booking_service)):
    """Bookings scheduled for today"""
    try:
        return service.get_todays_bookings()
    except PersistenceError as e:
        logger.error(f"❌ Today's bookings error: {e}")
        return JSONResponse(
            status_code=500, content={"success": False, "message": "Failed to retrieve bookings"}
        )


@router.get("/stats/summary", response_model=BookingStatsResponse)
async def get_booking_stats(
    start_date: Optional[str] = Query(None, description="Schedule date from (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, description="Schedule date to (YYYY-MM-DD)"),
    service: BookingService = Depends(get_booking_service),
):
    """Counts per status and total revenue"""
    try:
        return service.get_booking_stats(start_date, end_date)
    except PersistenceError as e:
        logger.error(f"❌ Booking statistics error: {e}")
        return JSONResponse(
            status_code=500, content={"success": False, "message": "Failed to compute statistics"}
        )


@router.get("/{booking_number}")
async def get_booking(
    booking_number: str,
    service: BookingService = Depends(get_booking_service),
):
    """Get a complete booking by its booking number"""
    try:
        booking = service.get_booking_by_number(booking_number)
    except PersistenceError as e:
        logger.error(f"❌ Get booking error: {e}")
        return JSONResponse(
            status_code=500, content={"success": False, "message": "Failed to retrieve booking"}
        )

    if booking is None:
        return not_found_response()

    return {"success": True, **booking}


@router.patch("/{booking_number}/status")
async def update_booking_status(
    booking_number: str,
    data: BookingStatusUpdate,
    service: BookingService = Depends(get_booking_service),
):
    """Move a booking to pending, confirmed, completed or cancelled"""
    try:
        booking = service.update_booking_status(booking_number, data.status)
    except BookingValidationError as e:
        return JSONResponse(
            status_code=400, content={"success": False, "message": e.message, "field": e.field}
        )
    except PersistenceError as e:
        logger.error(f"❌ Update booking status error: {e}")
        return JSONResponse(
            status_code=500, content={"success": False, "message": "Failed to update booking"}
        )

    if booking is None:
        return not_found_response()

    return {"success": True, **booking}


@router.get("/{booking_number}/notifications")
async def get_booking_notifications(booking_number: str, db: Session = Depends(get_db)):
    """Delivery and audit rows recorded for a booking"""
    try:
        notifications = NotificationLog.get_for_booking(db, booking_number)
    except SQLAlchemyError as e:
        logger.error(f"❌ Get notifications for {booking_number} failed: {e}")
        return JSONResponse(
            status_code=500, content={"success": False, "message": "Failed to retrieve notifications"}
        )

    return {
        "success": True,
        "bookingNumber": booking_number,
        "notifications": [serialize_notification(n) for n in notifications],
    }


__all__ = [
    "router",
    "create_booking",
    "list_bookings",
    "get_todays_bookings",
    "get_booking_stats",
    "get_booking",
    "update_booking_status",
    "get_booking_notifications",
]
