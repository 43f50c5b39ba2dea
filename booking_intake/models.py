from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Customer(Base):
    """Contact and address snapshot captured when a booking is made"""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    address = Column(String(500), nullable=False)
    postcode = Column(String(20), nullable=True)
    suburb = Column(String(100), nullable=True)
    schedule_date = Column(String(30), nullable=False)  # As submitted, e.g. 2025-06-01
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    ndis_details = relationship(
        "CustomerNdisDetails", back_populates="customer", uselist=False, cascade="all, delete-orphan"
    )
    commercial_details = relationship(
        "CustomerCommercialDetails",
        back_populates="customer",
        uselist=False,
        cascade="all, delete-orphan",
    )
    end_of_lease_details = relationship(
        "CustomerEndOfLeaseDetails",
        back_populates="customer",
        uselist=False,
        cascade="all, delete-orphan",
    )
    bookings = relationship("Booking", back_populates="customer")


class CustomerNdisDetails(Base):
    __tablename__ = "customer_ndis_details"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, unique=True)
    ndis_number = Column(String(50), nullable=True)
    plan_manager = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    customer = relationship("Customer", back_populates="ndis_details")


class CustomerCommercialDetails(Base):
    __tablename__ = "customer_commercial_details"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, unique=True)
    business_name = Column(String(255), nullable=True)
    business_type = Column(String(100), nullable=True)
    abn = Column(String(20), nullable=True)  # Australian Business Number
    contact_person = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    customer = relationship("Customer", back_populates="commercial_details")


class CustomerEndOfLeaseDetails(Base):
    __tablename__ = "customer_end_of_lease_details"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, unique=True)
    role = Column(String(50), nullable=True)  # tenant, landlord, agent
    created_at = Column(DateTime, server_default=func.now())

    customer = relationship("Customer", back_populates="end_of_lease_details")


# ============================================================================
# SERVICE DETAIL TABLES - one per service type
# ============================================================================


class RegularCleaningDetails(Base):
    __tablename__ = "regular_cleaning_details"

    id = Column(Integer, primary_key=True, index=True)
    frequency = Column(String(50), nullable=True)  # weekly, fortnightly, monthly
    duration = Column(Float, nullable=True)  # Hours per visit
    special_requests = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class OnceOffCleaningDetails(Base):
    __tablename__ = "once_off_cleaning_details"

    id = Column(Integer, primary_key=True, index=True)
    duration = Column(Float, nullable=True)
    two_cleaners = Column(Boolean, default=False, nullable=False)
    special_requests = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class NdisCleaningDetails(Base):
    __tablename__ = "ndis_cleaning_details"

    id = Column(Integer, primary_key=True, index=True)
    frequency = Column(String(50), nullable=True)
    duration = Column(Float, nullable=True)
    special_requests = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class EndOfLeaseCleaningDetails(Base):
    __tablename__ = "end_of_lease_cleaning_details"

    id = Column(Integer, primary_key=True, index=True)
    home_size = Column(String(50), nullable=True)  # e.g. "3-bedroom"
    base_bathrooms = Column(Integer, default=0, nullable=False)
    base_toilets = Column(Integer, default=0, nullable=False)
    extra_bathrooms = Column(Integer, default=0, nullable=False)
    extra_toilets = Column(Integer, default=0, nullable=False)
    furnished = Column(Boolean, default=False, nullable=False)
    study_room = Column(Boolean, default=False, nullable=False)
    pets = Column(Boolean, default=False, nullable=False)
    # Steam cleaning add-ons
    steam_carpet = Column(Boolean, default=False, nullable=False)
    steam_bedrooms = Column(Integer, default=0, nullable=False)
    steam_living_rooms = Column(Integer, default=0, nullable=False)
    steam_hallway = Column(Boolean, default=False, nullable=False)
    steam_stairs = Column(Boolean, default=False, nullable=False)
    # Extras
    balcony = Column(Boolean, default=False, nullable=False)
    garage = Column(Boolean, default=False, nullable=False)
    special_requests = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class AirbnbCleaningDetails(Base):
    __tablename__ = "airbnb_cleaning_details"

    id = Column(Integer, primary_key=True, index=True)
    service_type = Column(String(100), nullable=True)  # turnover, deep clean
    frequency = Column(String(50), nullable=True)
    duration = Column(Float, nullable=True)
    linen_change = Column(Boolean, default=False, nullable=False)
    restock_amenities = Column(Boolean, default=False, nullable=False)
    special_requests = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class CommercialCleaningDetails(Base):
    __tablename__ = "commercial_cleaning_details"

    id = Column(Integer, primary_key=True, index=True)
    service_type = Column(String(100), nullable=True)  # office, retail, warehouse
    frequency = Column(String(50), nullable=True)
    hours_per_visit = Column(Float, nullable=True)
    staff_count = Column(Integer, nullable=True)
    preferred_time = Column(String(50), nullable=True)  # e.g. "after hours"
    special_requests = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


# ============================================================================
# BOOKINGS
# ============================================================================


class BookingNumberSequence(Base):
    """
    Store-side counter for booking numbers.

    Every allocation inserts a row; the database-assigned id is the next
    number, so concurrent requests (and multiple server instances) never
    receive the same value.
    """

    __tablename__ = "booking_number_sequence"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, server_default=func.now())


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    booking_number = Column(String(32), unique=True, index=True, nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, confirmed, completed, cancelled
    current_step = Column(Integer, default=4, nullable=False)
    selected_service = Column(String(50), nullable=False)
    pricing = Column(JSON, nullable=False)  # {basePrice, lineItems, totalPrice, ...}
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    # Row id in the detail table matching selected_service
    service_details_id = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="bookings")


class Notification(Base):
    """
    Notification log.

    kind="delivery" rows track one outbound message (pending -> sent | failed).
    kind="audit" rows are append-only summaries for staff review.
    """

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(String(20), nullable=False, index=True)  # delivery, audit
    booking_id = Column(Integer, nullable=True)
    booking_number = Column(String(32), nullable=True, index=True)
    notification_type = Column(String(50), nullable=False)  # booking_created, new_main_booking, admin_alert
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=True)
    delivery_method = Column(String(20), nullable=True)  # email, internal
    recipient_email = Column(String(255), nullable=True)
    status = Column(String(20), default="pending", nullable=False, index=True)
    external_id = Column(String(255), nullable=True)
    external_status = Column(String(255), nullable=True)
    error_message = Column(Text, nullable=True)
    retry_count = Column(Integer, default=0, nullable=False)  # Informational only, nothing re-drives
    max_retries = Column(Integer, default=3, nullable=False)
    metadata_snapshot = Column("metadata", JSON, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
