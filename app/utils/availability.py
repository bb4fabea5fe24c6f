from datetime import date
from enum import Enum

from app.core.exceptions import InvalidRangeError


class Availability(str, Enum):
    AVAILABLE = "available"
    BLOCKED = "blocked"


def validate_range(check_in: date, check_out: date):
    if check_in is None or check_out is None:
        raise InvalidRangeError("Check-in and check-out dates are required")
    if check_out <= check_in:
        raise InvalidRangeError("Check-out date must be after check-in date")


def check_availability(room, check_in: date, check_out: date) -> Availability:
    validate_range(check_in, check_out)

    # Offline rooms are blocked whatever the dates
    if not room.available:
        return Availability.BLOCKED

    if room.interval_store().overlaps(check_in, check_out):
        return Availability.BLOCKED

    return Availability.AVAILABLE


def check_capacity(room, guests) -> bool:
    """Only adults count toward ``room.capacity``; children and infants do not."""
    adults = guests["adults"] if isinstance(guests, dict) else guests.adults
    return adults <= room.capacity
