"""Booking domain schemas - Pydantic models for validation"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ServiceType(str, Enum):
    REGULAR_CLEANING = "Regular Cleaning"
    ONCE_OFF_CLEANING = "Once-Off Cleaning"
    NDIS_CLEANING = "NDIS Cleaning"
    END_OF_LEASE_CLEANING = "End of Lease Cleaning"
    AIRBNB_CLEANING = "Airbnb Cleaning"
    COMMERCIAL_CLEANING = "Commercial Cleaning"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    # Only ever sent in error responses, never stored
    ERROR = "error"


PERSISTED_STATUSES = [status.value for status in BookingStatus if status is not BookingStatus.ERROR]


class BookingStep(int, Enum):
    SERVICE_SELECTION = 1
    SERVICE_DETAILS = 2
    CUSTOMER_DETAILS = 3
    CONFIRMATION = 4


# ============================================================================
# SUBMISSION
# ============================================================================


class NdisDetails(BaseModel):
    ndisNumber: Optional[str] = None
    planManager: Optional[str] = None

    model_config = ConfigDict(coerce_numbers_to_str=True)


class CommercialDetails(BaseModel):
    businessName: Optional[str] = None
    businessType: Optional[str] = None
    abn: Optional[str] = None
    contactPerson: Optional[str] = None

    model_config = ConfigDict(coerce_numbers_to_str=True)


class EndOfLeaseDetails(BaseModel):
    role: Optional[str] = None


class CustomerDetails(BaseModel):
    """
    Customer section of a booking submission.

    Required fields are optional here so the service can report the first
    missing one with a 400 instead of FastAPI's 422 list.
    """

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    scheduleDate: Optional[str] = None
    postcode: Optional[str] = None
    suburb: Optional[str] = None
    notes: Optional[str] = None
    ndisDetails: Optional[NdisDetails] = None
    commercialDetails: Optional[CommercialDetails] = None
    endOfLeaseDetails: Optional[EndOfLeaseDetails] = None

    model_config = ConfigDict(coerce_numbers_to_str=True)


class BookingSubmission(BaseModel):
    """Schema for POST /bookings"""

    selectedService: Optional[str] = None
    customerDetails: Optional[CustomerDetails] = None
    # Validated per service type by the detail mappers
    serviceDetails: Optional[Any] = None
    pricing: Optional[dict] = None
    currentStep: Optional[int] = None


class BookingStatusUpdate(BaseModel):
    status: str


class BookingListResponse(BaseModel):
    success: bool = True
    bookings: list[dict]
    total: int
    limit: int
    offset: int


class BookingStatsResponse(BaseModel):
    total: int
    pending: int
    confirmed: int
    completed: int
    cancelled: int
    totalRevenue: float


# ============================================================================
# SERVICE DETAIL VARIANTS
# ============================================================================


class DetailSchema(BaseModel):
    """Base for per-service detail payloads; unknown keys are ignored"""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class RegularCleaningSchema(DetailSchema):
    frequency: Optional[str] = None
    duration: Optional[float] = None
    specialRequests: Optional[str] = None


class OnceOffCleaningSchema(DetailSchema):
    duration: Optional[float] = None
    twoCleaners: Optional[bool] = None
    specialRequests: Optional[str] = None


class NdisCleaningSchema(DetailSchema):
    frequency: Optional[str] = None
    duration: Optional[float] = None
    specialRequests: Optional[str] = None


class SteamCounts(DetailSchema):
    bedrooms: Optional[int] = None
    livingRooms: Optional[int] = None
    hallway: Optional[bool] = None
    stairs: Optional[bool] = None


class EndOfLeaseExtras(DetailSchema):
    balcony: Optional[bool] = None
    garage: Optional[bool] = None


class EndOfLeaseCleaningSchema(DetailSchema):
    homeSize: Optional[str] = None
    baseBathrooms: Optional[int] = None
    baseToilets: Optional[int] = None
    extraBathrooms: Optional[int] = None
    extraToilets: Optional[int] = None
    furnished: Optional[bool] = None
    studyRoom: Optional[bool] = None
    pets: Optional[bool] = None
    steamCarpet: Optional[bool] = None
    steamCounts: Optional[SteamCounts] = None
    extras: Optional[EndOfLeaseExtras] = None
    specialRequests: Optional[str] = None


class AirbnbExtras(DetailSchema):
    linenChange: Optional[bool] = None
    restockAmenities: Optional[bool] = None


class AirbnbCleaningSchema(DetailSchema):
    serviceType: Optional[str] = None
    frequency: Optional[str] = None
    duration: Optional[float] = None
    extras: Optional[AirbnbExtras] = None
    specialRequests: Optional[str] = None


class CommercialCleaningSchema(DetailSchema):
    serviceType: Optional[str] = None
    frequency: Optional[str] = None
    hoursPerVisit: Optional[float] = None
    staffCount: Optional[int] = None
    preferredTime: Optional[str] = None
    specialRequests: Optional[str] = None
