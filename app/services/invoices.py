from decimal import Decimal, ROUND_HALF_UP

from app.core.config import settings
from app.utils.pricing import CENT


# ---------------------------------------------------------------------
# SNAPSHOTS (captured once, at booking creation)
# ---------------------------------------------------------------------
def capture_room_snapshot(room) -> dict:
    return {
        "name": room.name,
        "type": getattr(room.type, "value", room.type),
        "pricePerNight": float(room.price_per_night),
        "images": list(room.images or []),
    }


def capture_user_snapshot(user) -> dict:
    return {
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
    }


# ---------------------------------------------------------------------
# READ-ONLY PROJECTIONS
# ---------------------------------------------------------------------
def _iso(value):
    return value.isoformat() if value is not None else None


def _money(value: Decimal) -> float:
    return float(Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def invoice_number(booking_id: str, prefix: str | None = None) -> str:
    prefix = settings.INVOICE_PREFIX if prefix is None else prefix
    return f"{prefix}{str(booking_id)[-8:].upper()}"


def booking_summary(booking) -> dict:
    return {
        "id": booking.id,
        "checkIn": _iso(booking.check_in),
        "checkOut": _iso(booking.check_out),
        "nights": booking.nights,
        "totalAmount": _money(booking.total_amount),
        "status": booking.status.value,
        "paymentStatus": booking.payment_status.value,
        "room": dict(booking.room_snapshot or {}),
        "createdAt": _iso(booking.created_at),
    }


def generate_invoice(booking, tax_rate: Decimal | None = None, prefix: str | None = None) -> dict:
    rate = Decimal(str(settings.TAX_RATE if tax_rate is None else tax_rate))
    subtotal = Decimal(booking.total_amount)
    tax = (subtotal * rate).quantize(CENT, rounding=ROUND_HALF_UP)
    total = (subtotal * (1 + rate)).quantize(CENT, rounding=ROUND_HALF_UP)

    return {
        "bookingId": booking.id,
        "invoiceNumber": invoice_number(booking.id, prefix),
        "date": _iso(booking.created_at),
        "guest": dict(booking.user_snapshot) if booking.user_snapshot else None,
        "room": dict(booking.room_snapshot or {}),
        "checkIn": _iso(booking.check_in),
        "checkOut": _iso(booking.check_out),
        "nights": booking.nights,
        "subtotal": _money(subtotal),
        "tax": float(tax),
        "total": float(total),
        "paymentMethod": booking.payment_method.value,
        "paymentStatus": booking.payment_status.value,
    }
