"""Booking repository - Database operations for the booking aggregate"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, contains_eager, joinedload

from ...models import (
    Booking,
    Customer,
    CustomerCommercialDetails,
    CustomerEndOfLeaseDetails,
    CustomerNdisDetails,
)


class BookingRepository:
    """
    Repository for booking database operations.

    The add_* methods only flush: the caller owns the transaction and
    commits once the whole aggregate is in place.
    """

    @staticmethod
    def add_customer(db: Session, **customer_data) -> Customer:
        customer = Customer(**customer_data)
        db.add(customer)
        db.flush()
        return customer

    @staticmethod
    def add_detail_record(db: Session, record):
        db.add(record)
        db.flush()
        return record

    @staticmethod
    def add_ndis_details(db: Session, customer_id: int, **fields) -> CustomerNdisDetails:
        row = CustomerNdisDetails(customer_id=customer_id, **fields)
        db.add(row)
        db.flush()
        return row

    @staticmethod
    def add_commercial_details(db: Session, customer_id: int, **fields) -> CustomerCommercialDetails:
        row = CustomerCommercialDetails(customer_id=customer_id, **fields)
        db.add(row)
        db.flush()
        return row

    @staticmethod
    def add_end_of_lease_details(db: Session, customer_id: int, **fields) -> CustomerEndOfLeaseDetails:
        row = CustomerEndOfLeaseDetails(customer_id=customer_id, **fields)
        db.add(row)
        db.flush()
        return row

    @staticmethod
    def add_booking(db: Session, **booking_data) -> Booking:
        booking = Booking(**booking_data)
        db.add(booking)
        db.flush()
        return booking

    @staticmethod
    def get_booking_by_number(db: Session, booking_number: str) -> Optional[Booking]:
        """Get a booking with its customer and customer sub-records"""
        return (
            db.query(Booking)
            .options(
                joinedload(Booking.customer).joinedload(Customer.ndis_details),
                joinedload(Booking.customer).joinedload(Customer.commercial_details),
                joinedload(Booking.customer).joinedload(Customer.end_of_lease_details),
            )
            .filter(Booking.booking_number == booking_number)
            .first()
        )

    @staticmethod
    def list_bookings(
        db: Session,
        limit: int = 50,
        offset: int = 0,
        status: Optional[str] = None,
        search: Optional[str] = None,
        schedule_date: Optional[str] = None,
    ) -> tuple[list[Booking], int]:
        """Newest first, with the unpaginated total"""
        query = db.query(Booking).join(Booking.customer)
        if status:
            query = query.filter(Booking.status == status)
        if search:
            # Case-insensitive partial match on customer email or booking number
            pattern = f"%{search}%"
            query = query.filter(
                or_(Customer.email.ilike(pattern), Booking.booking_number.ilike(pattern))
            )
        if schedule_date:
            query = query.filter(Customer.schedule_date == schedule_date)

        total = query.count()
        bookings = (
            query.options(contains_eager(Booking.customer))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return bookings, total

    @staticmethod
    def get_bookings_for_date(db: Session, schedule_date: str) -> list[Booking]:
        """Bookings scheduled on one day, in the order they came in"""
        return (
            db.query(Booking)
            .join(Booking.customer)
            .options(contains_eager(Booking.customer))
            .filter(Customer.schedule_date == schedule_date)
            .order_by(Booking.created_at.asc(), Booking.id.asc())
            .all()
        )

    @staticmethod
    def get_bookings_for_stats(
        db: Session,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[Booking]:
        """Bookings whose customer schedule date falls in the (inclusive) range"""
        query = db.query(Booking).join(Booking.customer)
        if start_date:
            query = query.filter(Customer.schedule_date >= start_date)
        if end_date:
            query = query.filter(Customer.schedule_date <= end_date)
        return query.all()

    @staticmethod
    def update_status(db: Session, booking: Booking, status: str) -> Booking:
        booking.status = status
        booking.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(booking)
        return booking
