"""Payment intent creation and server-side reconciliation.

The processor, not the client, is the source of truth for what was captured:
``confirm_intent`` re-checks the settled amount even though ``create_intent``
already compared the requested amount with the booking total.
"""
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    AmountMismatchError,
    ConflictError,
    PaymentGatewayError,
    PaymentNotSucceededError,
    ValidationError,
)
from app.core.logging_config import get_logger
from app.models.enums import BookingStatus, PaymentStatus
from app.services import reservations
from app.services.invoices import booking_summary
from app.utils.pricing import from_minor_units, to_minor_units

logger = get_logger().bind(log_type="payment")

SUCCEEDED = "succeeded"
# Processor states after which this intent can no longer capture money
FAILED_INTENT_STATUSES = {"canceled", "requires_payment_method"}


def _as_decimal(amount) -> Decimal:
    try:
        return Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError("Amount must be a number")


def create_intent(db: Session, gateway, booking_id: str, amount, user) -> dict:
    booking = reservations.get_booking_for(db, booking_id, user, "pay for")

    if booking.status == BookingStatus.CANCELLED:
        raise ConflictError("Booking has been cancelled")
    if booking.payment_status == PaymentStatus.COMPLETED:
        raise ConflictError("Booking is already paid")

    if _as_decimal(amount) != Decimal(booking.total_amount):
        logger.warning(f"Intent amount mismatch | Booking={booking.id} | Sent={amount} | Expected={booking.total_amount}")
        raise AmountMismatchError("Amount does not match booking total")

    intent = gateway.create_payment_intent(
        to_minor_units(booking.total_amount),
        settings.PAYMENT_CURRENCY,
        {"bookingId": str(booking.id), "userId": str(user.id)},
    )

    logger.info(f"Intent Created | Booking={booking.id} | Intent={intent.id} | Amount={booking.total_amount}")

    return {
        "clientSecret": intent.client_secret,
        "paymentIntentId": intent.id,
    }


def confirm_intent(db: Session, gateway, intent_id: str, booking_id: str, user) -> dict:
    booking = reservations.get_booking_for(db, booking_id, user, "pay for")

    # Duplicate confirmation of the same intent
    if booking.payment_status == PaymentStatus.COMPLETED and booking.payment_id == intent_id:
        return {"booking": booking_summary(booking)}

    if booking.status == BookingStatus.CANCELLED:
        raise ConflictError("Booking has been cancelled")

    try:
        intent = gateway.retrieve_intent(intent_id)
    except PaymentGatewayError:
        logger.error(f"Payment verification failed | Booking={booking.id} | Intent={intent_id}")
        raise PaymentNotSucceededError("Payment could not be verified with the payment processor")

    intent_booking = intent.metadata.get("bookingId")
    if intent_booking is not None and intent_booking != str(booking.id):
        raise ValidationError("Payment intent does not belong to this booking")

    if intent.status != SUCCEEDED:
        if intent.status in FAILED_INTENT_STATUSES:
            reservations.mark_payment_failed(db, booking)
        logger.warning(f"Payment not successful | Booking={booking.id} | Intent={intent_id} | Status={intent.status}")
        raise PaymentNotSucceededError("Payment not successful")

    settled = from_minor_units(intent.amount_received)
    if settled != Decimal(booking.total_amount):
        logger.error(
            f"Payment amount mismatch | Booking={booking.id} | Intent={intent_id} "
            f"| Settled={settled} | Expected={booking.total_amount}"
        )
        raise AmountMismatchError("Payment amount mismatch")

    booking = reservations.confirm_payment(db, booking, intent_id)

    logger.info(f"Payment Reconciled | Booking={booking.id} | Intent={intent_id} | Amount={settled}")
    return {"booking": booking_summary(booking)}
