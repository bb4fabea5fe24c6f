"""Booking status / payment-status state machine.

All status changes go through :func:`apply_status` and
:func:`apply_payment_status`; the transition tables below are the only
source of truth for what is legal. Side effects on the room's reserved
intervals live in ``app.services.reservations``.
"""
from datetime import datetime, time, timezone

from app.core.config import settings
from app.core.exceptions import (
    CancellationWindowViolation,
    ForbiddenError,
    InvalidTransitionError,
)
from app.models.enums import BookingStatus, PaymentStatus

STATUS_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CHECKED_IN, BookingStatus.CANCELLED},
    BookingStatus.CHECKED_IN: {BookingStatus.CHECKED_OUT},
    BookingStatus.CHECKED_OUT: set(),
    BookingStatus.CANCELLED: set(),
}

PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.PENDING, PaymentStatus.COMPLETED},
    PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),
}

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return current == target or target in STATUS_TRANSITIONS[current]


def ensure_transition(current: BookingStatus, target: BookingStatus):
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Cannot change booking status from '{current.value}' to '{target.value}'"
        )


def ensure_payment_transition(current: PaymentStatus, target: PaymentStatus):
    if current != target and target not in PAYMENT_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Cannot change payment status from '{current.value}' to '{target.value}'"
        )


def apply_status(booking, target: BookingStatus, now: datetime | None = None) -> bool:
    """Move ``booking`` to ``target``; returns False when it already was there.

    Check-in/out timestamps are written once and never overwritten, so a
    repeated admin request leaves the first value in place.
    """
    current = BookingStatus(booking.status)
    ensure_transition(current, target)
    now = now or utcnow()

    if target == BookingStatus.CHECKED_IN and booking.checked_in_at is None:
        booking.checked_in_at = now
    if target == BookingStatus.CHECKED_OUT and booking.checked_out_at is None:
        booking.checked_out_at = now

    if current == target:
        return False

    booking.status = target
    return True


def apply_payment_status(booking, target: PaymentStatus) -> bool:
    current = PaymentStatus(booking.payment_status)
    ensure_payment_transition(current, target)

    if current == target:
        return False

    booking.payment_status = target
    return True


def hours_until_check_in(booking, now: datetime | None = None) -> float:
    now = now or utcnow()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    check_in_at = datetime.combine(booking.check_in, time.min, tzinfo=timezone.utc)
    return (check_in_at - now).total_seconds() / 3600


def ensure_cancellation_window(booking, now: datetime | None = None):
    """Confirmed bookings close for cancellation inside the window; pending ones never do."""
    if BookingStatus(booking.status) != BookingStatus.CONFIRMED:
        return

    window = settings.CANCELLATION_WINDOW_HOURS
    if hours_until_check_in(booking, now) < window:
        raise CancellationWindowViolation(
            f"Cannot cancel booking less than {window} hours before check-in"
        )


def ensure_can_access(booking, user, action: str = "view"):
    if user.is_admin or booking.user_id == user.id:
        return
    raise ForbiddenError(f"Not authorized to {action} this booking")
