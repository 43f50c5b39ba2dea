"""Bookings domain - booking intake, numbering and detail mapping"""

from .router import router
from .service import BookingService

__all__ = ["router", "BookingService"]
