"""Booking domain errors"""

from typing import Optional


class BookingValidationError(Exception):
    """A required submission field is missing or unusable. Nothing has been written."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        self.message = message or f"{field} is required"
        super().__init__(self.message)


class UnknownServiceType(BookingValidationError):
    def __init__(self, service_type):
        self.service_type = service_type
        super().__init__("selectedService", f"Unknown service type: {service_type}")


class DetailValidationError(BookingValidationError):
    def __init__(self, message: str):
        super().__init__("serviceDetails", message)


class PersistenceError(Exception):
    """A store read or write failed. The message is logged, never shown to the caller."""
