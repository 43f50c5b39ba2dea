"""Booking number allocation"""

import logging
import secrets
import string
import time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import BOOKING_NUMBER_PREFIX
from ...models import BookingNumberSequence

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def format_sequential_number(sequence_value: int, prefix: str = BOOKING_NUMBER_PREFIX) -> str:
    return f"{prefix}-{sequence_value:04d}"


def fallback_booking_number(prefix: str = BOOKING_NUMBER_PREFIX) -> str:
    """
    Timestamp + random suffix, used only when the sequence table is unreachable.

    Collisions are very unlikely but possible; the unique constraint on
    bookings.booking_number rejects a duplicate.
    """
    timestamp = to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(3))
    return f"{prefix}-{timestamp}-{suffix}"


def allocate_sequence_value(db: Session) -> int:
    """Insert a sequence row in its own transaction and return the id the database assigned"""
    allocation = BookingNumberSequence()
    db.add(allocation)
    db.commit()
    return allocation.id


def generate_booking_number(db: Session, prefix: str = BOOKING_NUMBER_PREFIX) -> str:
    """Allocate the next booking number, falling back to a timestamp scheme on store errors"""
    try:
        return format_sequential_number(allocate_sequence_value(db), prefix)
    except SQLAlchemyError as e:
        db.rollback()
        booking_number = fallback_booking_number(prefix)
        logger.warning(f"⚠️ Booking number sequence unavailable, using fallback {booking_number}: {e}")
        return booking_number
