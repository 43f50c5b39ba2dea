"""Booking service - Business logic for creating and reading bookings"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Booking
from .details import details_to_payload, load_details, map_details, parse_service_type, validate_details
from .exceptions import BookingValidationError, PersistenceError
from .numbering import generate_booking_number
from .repository import BookingRepository
from .schemas import (
    PERSISTED_STATUSES,
    BookingStatus,
    BookingStep,
    BookingSubmission,
    CustomerDetails,
    ServiceType,
)

logger = logging.getLogger(__name__)

BOOKING_CREATED_MESSAGE = (
    "Booking submitted successfully! You will receive a confirmation email shortly."
)

# Checked in order; the first missing one is reported
REQUIRED_CUSTOMER_FIELDS = [
    ("firstName", "Customer first name is required"),
    ("lastName", "Customer last name is required"),
    ("email", "Customer email is required"),
    ("phone", "Customer phone number is required"),
    ("address", "Service address is required"),
    ("scheduleDate", "Schedule date is required"),
]


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _isoformat(value) -> Optional[str]:
    return value.isoformat() if value else None


def _sub_record_view(row, **columns) -> Optional[dict]:
    """camelCase view of a customer sub-record; None when absent or every field is empty"""
    if row is None:
        return None
    view = {key: getattr(row, column) for key, column in columns.items()}
    if all(_is_blank(value) for value in view.values()):
        return None
    return view


def _summarize_booking(booking: Booking) -> dict:
    customer = booking.customer
    pricing = booking.pricing or {}
    return {
        "id": booking.id,
        "bookingNumber": booking.booking_number,
        "status": booking.status,
        "selectedService": booking.selected_service,
        "customerName": f"{customer.first_name} {customer.last_name}",
        "email": customer.email,
        "phone": customer.phone,
        "scheduleDate": customer.schedule_date,
        "totalPrice": pricing.get("totalPrice"),
        "createdAt": _isoformat(booking.created_at),
    }


class BookingService:
    """Service layer for the booking aggregate"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()

    # ========================================================================
    # CREATE
    # ========================================================================

    def validate_submission(self, submission: BookingSubmission) -> ServiceType:
        """Check every precondition before anything is written"""
        if _is_blank(submission.selectedService):
            raise BookingValidationError("selectedService", "Service selection is required")

        customer = submission.customerDetails or CustomerDetails()
        for field, message in REQUIRED_CUSTOMER_FIELDS:
            if _is_blank(getattr(customer, field)):
                raise BookingValidationError(field, message)

        service_type = parse_service_type(submission.selectedService)
        validate_details(service_type, submission.serviceDetails)
        return service_type

    def create_booking(self, submission: BookingSubmission) -> dict:
        """
        Create the booking aggregate.

        Order: booking number, customer, service detail row, customer
        sub-records, booking row. Everything after the booking number is one
        transaction, so a failure at any step leaves no customer or detail
        rows behind.
        """
        service_type = self.validate_submission(submission)
        customer = submission.customerDetails

        logger.info(f"📝 Booking started for {service_type.value}")
        booking_number = generate_booking_number(self.db)
        logger.info(f"📝 Generated booking number: {booking_number}")

        try:
            customer_row = self.repo.add_customer(
                self.db,
                first_name=customer.firstName,
                last_name=customer.lastName,
                email=customer.email,
                phone=customer.phone,
                address=customer.address,
                postcode=customer.postcode or None,
                suburb=customer.suburb or None,
                schedule_date=customer.scheduleDate,
                notes=customer.notes or None,
            )
            logger.info(f"👤 Created customer record: {customer_row.id}")

            detail_row = self.repo.add_detail_record(
                self.db, map_details(service_type, submission.serviceDetails)
            )
            logger.info(f"🔧 Created {detail_row.__tablename__} record: {detail_row.id}")

            self._add_customer_sub_records(customer_row.id, customer)

            booking = self.repo.add_booking(
                self.db,
                booking_number=booking_number,
                status=BookingStatus.PENDING.value,
                current_step=submission.currentStep or BookingStep.CONFIRMATION.value,
                selected_service=service_type.value,
                pricing=submission.pricing or {},
                customer_id=customer_row.id,
                service_details_id=detail_row.id,
            )
            self.db.commit()
            logger.info(f"📦 Created main booking record: {booking.id}")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Create booking {booking_number} failed, transaction rolled back: {e}")
            raise PersistenceError(f"Failed to create booking {booking_number}: {e}") from e

        complete_booking = self.get_booking_by_number(booking_number)
        if complete_booking is None:
            raise PersistenceError(f"Booking {booking_number} was not readable after commit")

        logger.info(f"✅ Booking created successfully: {booking_number}")
        return {
            "success": True,
            "bookingNumber": booking_number,
            "status": BookingStatus.PENDING.value,
            "message": BOOKING_CREATED_MESSAGE,
            "data": complete_booking,
        }

    def _add_customer_sub_records(self, customer_id: int, customer: CustomerDetails) -> None:
        """NDIS / Commercial / End of Lease sub-records, each only when supplied"""
        if customer.ndisDetails:
            self.repo.add_ndis_details(
                self.db,
                customer_id,
                ndis_number=customer.ndisDetails.ndisNumber or None,
                plan_manager=customer.ndisDetails.planManager or None,
            )
            logger.info(f"📋 Created NDIS details for customer {customer_id}")

        if customer.commercialDetails:
            self.repo.add_commercial_details(
                self.db,
                customer_id,
                business_name=customer.commercialDetails.businessName or None,
                business_type=customer.commercialDetails.businessType or None,
                abn=customer.commercialDetails.abn or None,
                contact_person=customer.commercialDetails.contactPerson or None,
            )
            logger.info(f"📋 Created commercial details for customer {customer_id}")

        if customer.endOfLeaseDetails:
            self.repo.add_end_of_lease_details(
                self.db,
                customer_id,
                role=customer.endOfLeaseDetails.role or None,
            )
            logger.info(f"📋 Created end of lease details for customer {customer_id}")

    # ========================================================================
    # READ
    # ========================================================================

    def get_booking_by_number(self, booking_number: str) -> Optional[dict]:
        """Complete booking view, or None when no booking has this number"""
        try:
            booking = self.repo.get_booking_by_number(self.db, booking_number)
            if booking is None:
                return None
            return self._serialize_booking(booking)
        except SQLAlchemyError as e:
            logger.error(f"❌ Get booking {booking_number} failed: {e}")
            raise PersistenceError(f"Failed to read booking {booking_number}: {e}") from e

    def _serialize_booking(self, booking: Booking) -> dict:
        service_type = parse_service_type(booking.selected_service)
        detail = load_details(self.db, service_type, booking.service_details_id)
        if detail is None:
            raise PersistenceError(
                f"Booking {booking.booking_number} references missing "
                f"{service_type.value} details {booking.service_details_id}"
            )

        customer = booking.customer
        ndis = customer.ndis_details
        commercial = customer.commercial_details
        end_of_lease = customer.end_of_lease_details

        return {
            "id": booking.id,
            "bookingNumber": booking.booking_number,
            "status": booking.status,
            "selectedService": booking.selected_service,
            "currentStep": booking.current_step,
            "customerDetails": {
                "firstName": customer.first_name,
                "lastName": customer.last_name,
                "email": customer.email,
                "phone": customer.phone,
                "address": customer.address,
                "postcode": customer.postcode,
                "suburb": customer.suburb,
                "scheduleDate": customer.schedule_date,
                "notes": customer.notes,
                "ndisDetails": _sub_record_view(
                    ndis, ndisNumber="ndis_number", planManager="plan_manager"
                ),
                "commercialDetails": _sub_record_view(
                    commercial,
                    businessName="business_name",
                    businessType="business_type",
                    abn="abn",
                    contactPerson="contact_person",
                ),
                "endOfLeaseDetails": _sub_record_view(end_of_lease, role="role"),
            },
            "serviceDetails": details_to_payload(service_type, detail),
            "pricing": booking.pricing,
            "createdAt": _isoformat(booking.created_at),
            "updatedAt": _isoformat(booking.updated_at),
        }

    # ========================================================================
    # ADMIN
    # ========================================================================

    def list_bookings(
        self,
        limit: int = 50,
        offset: int = 0,
        status: Optional[str] = None,
        search: Optional[str] = None,
        schedule_date: Optional[str] = None,
    ) -> dict:
        """Booking summaries for the admin portal"""
        search = search.strip() if search else None
        try:
            bookings, total = self.repo.list_bookings(
                self.db, limit, offset, status, search=search, schedule_date=schedule_date
            )
        except SQLAlchemyError as e:
            logger.error(f"❌ List bookings failed: {e}")
            raise PersistenceError(f"Failed to list bookings: {e}") from e

        return {
            "success": True,
            "bookings": [_summarize_booking(booking) for booking in bookings],
            "total": total,
            "limit": limit,
            "offset": offset,
        }

    def get_todays_bookings(self, today: Optional[date] = None) -> dict:
        """Bookings whose schedule date is today (UTC), oldest first"""
        schedule_date = (today or datetime.utcnow().date()).isoformat()
        try:
            bookings = self.repo.get_bookings_for_date(self.db, schedule_date)
        except SQLAlchemyError as e:
            logger.error(f"❌ Today's bookings for {schedule_date} failed: {e}")
            raise PersistenceError(f"Failed to read bookings for {schedule_date}: {e}") from e

        return {
            "success": True,
            "date": schedule_date,
            "bookings": [_summarize_booking(booking) for booking in bookings],
            "total": len(bookings),
        }

    def get_booking_stats(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> dict:
        """Counts per status and revenue from pricing.totalPrice"""
        try:
            bookings = self.repo.get_bookings_for_stats(self.db, start_date, end_date)
        except SQLAlchemyError as e:
            logger.error(f"❌ Booking statistics failed: {e}")
            raise PersistenceError(f"Failed to compute booking statistics: {e}") from e

        stats = {"total": len(bookings), "totalRevenue": 0.0}
        for status in PERSISTED_STATUSES:
            stats[status] = sum(1 for b in bookings if b.status == status)

        for booking in bookings:
            try:
                stats["totalRevenue"] += float((booking.pricing or {}).get("totalPrice") or 0)
            except (TypeError, ValueError):
                logger.warning(f"⚠️ Unparseable totalPrice on booking {booking.booking_number}")

        return stats

    def update_booking_status(self, booking_number: str, status: str) -> Optional[dict]:
        """Move a booking to a new persisted status; None when the booking does not exist"""
        if status not in PERSISTED_STATUSES:
            raise BookingValidationError(
                "status", f"Status must be one of: {', '.join(PERSISTED_STATUSES)}"
            )

        try:
            booking = self.repo.get_booking_by_number(self.db, booking_number)
            if booking is None:
                return None
            previous = booking.status
            self.repo.update_status(self.db, booking, status)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Status update for {booking_number} failed: {e}")
            raise PersistenceError(f"Failed to update booking {booking_number}: {e}") from e

        logger.info(f"🔄 Booking {booking_number} status {previous} -> {status}")
        return self.get_booking_by_number(booking_number)
