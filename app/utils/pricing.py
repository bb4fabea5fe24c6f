import math
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
SECONDS_PER_DAY = 24 * 60 * 60


def calculate_nights(check_in, check_out) -> int:
    """Whole nights between two dates; partial days round up."""
    if isinstance(check_in, datetime) or isinstance(check_out, datetime):
        start = check_in if isinstance(check_in, datetime) else datetime.combine(check_in, datetime.min.time())
        end = check_out if isinstance(check_out, datetime) else datetime.combine(check_out, datetime.min.time())
        return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)

    return (check_out - check_in).days


def calculate_booking_price(room, check_in: date, check_out: date):
    """Return ``(nights, total_amount)`` for a stay in ``room``.

    Quotes and persisted bookings both go through here, so a client's
    pre-quote always equals the amount stored on the booking.
    """
    nights = calculate_nights(check_in, check_out)
    total = (Decimal(nights) * Decimal(room.price_per_night)).quantize(CENT, rounding=ROUND_HALF_UP)
    return nights, total


# -------- PAYMENT PROCESSOR UNITS --------
def to_minor_units(amount) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int) -> Decimal:
    return (Decimal(amount) / 100).quantize(CENT)
