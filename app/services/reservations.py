"""Create / cancel / transition bookings while keeping each room's reserved
intervals in step with its bookings.

Every write that touches ``rooms.booked_dates`` runs through
:func:`with_room_lock`: the room row is locked (``SELECT ... FOR UPDATE``)
and the UPDATE is conditional on the version that was read. Losing a race
rolls back the booking insert together with the interval change.
"""
from datetime import date

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.config import settings
from app.core.exceptions import ApiError, ConflictError, NotFoundError, ValidationError
from app.core.logging_config import get_logger
from app.models.booking import Booking, new_booking_id
from app.models.enums import BookingStatus, PaymentStatus
from app.models.room import Room
from app.services import booking_lifecycle as lifecycle
from app.services.invoices import capture_room_snapshot, capture_user_snapshot
from app.utils.availability import Availability, check_availability, check_capacity, validate_range
from app.utils.intervals import ReservedInterval
from app.utils.pricing import calculate_booking_price

logger = get_logger().bind(log_type="booking")

LOCK_NOT_AVAILABLE = "55P03"


def _is_lock_timeout(exc: OperationalError) -> bool:
    return getattr(exc.orig, "pgcode", None) == LOCK_NOT_AVAILABLE


# ---------------------------------------------------------------------
# PER-ROOM UNIT OF WORK
# ---------------------------------------------------------------------
def with_room_lock(db: Session, room_id: int, work, attempts: int | None = None):
    """Run ``work(room)`` and commit it as one atomic step for that room.

    ``work`` may raise an :class:`ApiError`; the transaction is then rolled
    back and the error propagates. A version conflict at commit time is
    retried from a fresh read.
    """
    attempts = attempts or settings.ROOM_WRITE_ATTEMPTS

    for attempt in range(1, attempts + 1):
        try:
            room = (
                db.query(Room)
                .filter(Room.id == room_id)
                .populate_existing()
                .with_for_update()
                .first()
            )
            if not room:
                raise NotFoundError("Room not found")

            result = work(room)
            db.commit()
            return result

        except ApiError:
            db.rollback()
            raise

        except StaleDataError:
            db.rollback()
            logger.warning(f"Room {room_id} changed concurrently (attempt {attempt}/{attempts}), retrying")

        except OperationalError as e:
            db.rollback()
            if not _is_lock_timeout(e):
                raise
            logger.warning(f"Room {room_id} lock wait timed out (attempt {attempt}/{attempts})")

    raise ConflictError("Room is being updated by another request, please retry")


def with_booking_room(db: Session, booking: Booking, work):
    """:func:`with_room_lock` on the booking's room.

    A booking whose room was deleted holds no interval, so its work runs
    with ``room=None`` in a plain transaction.
    """
    if booking.room_id is not None:
        return with_room_lock(db, booking.room_id, work)

    try:
        result = work(None)
        db.commit()
        return result
    except ApiError:
        db.rollback()
        raise


# ---------------------------------------------------------------------
# LOOKUPS
# ---------------------------------------------------------------------
def get_booking(db: Session, booking_id: str) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def get_booking_for(db: Session, booking_id: str, user, action: str = "view") -> Booking:
    booking = get_booking(db, booking_id)
    lifecycle.ensure_can_access(booking, user, action)
    return booking


# ---------------------------------------------------------------------
# CREATE
# ---------------------------------------------------------------------
def create_booking(db: Session, user, data, now=None) -> Booking:
    now = now or lifecycle.utcnow()

    validate_range(data.check_in, data.check_out)
    if data.check_in < now.date():
        raise ValidationError("Check-in date cannot be in the past")

    guests = data.guests

    def reserve(room: Room) -> Booking:
        if check_availability(room, data.check_in, data.check_out) is Availability.BLOCKED:
            raise ConflictError("Room is not available for the selected dates")

        if not check_capacity(room, guests):
            raise ConflictError(f"Room capacity is {room.capacity} guests")

        nights, total_amount = calculate_booking_price(room, data.check_in, data.check_out)

        booking = Booking(
            id=new_booking_id(),
            user_id=user.id,
            room_id=room.id,
            check_in=data.check_in,
            check_out=data.check_out,
            adults=guests.adults,
            children=guests.children,
            infants=guests.infants,
            nights=nights,
            total_amount=total_amount,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            payment_method=data.payment_method,
            special_requests=data.special_requests,
            room_snapshot=capture_room_snapshot(room),
            user_snapshot=capture_user_snapshot(user),
        )
        db.add(booking)

        store = room.interval_store()
        store.add(ReservedInterval(data.check_in, data.check_out, booking.id))
        room.replace_intervals(store)

        return booking

    booking = with_room_lock(db, data.room_id, reserve)
    db.refresh(booking)

    logger.info(
        f"Booking Created | Booking={booking.id} | User={user.email} | Room={booking.room_id} "
        f"| {booking.check_in}..{booking.check_out} | Amount={booking.total_amount}"
    )
    return booking


# ---------------------------------------------------------------------
# TRANSITIONS (always applied with the room row locked)
# ---------------------------------------------------------------------
def _release(room: Room, booking: Booking, reason: str, now) -> bool:
    if booking.status == BookingStatus.CANCELLED:
        return False

    lifecycle.ensure_transition(BookingStatus(booking.status), BookingStatus.CANCELLED)
    lifecycle.ensure_cancellation_window(booking, now)

    if room is not None:
        store = room.interval_store()
        store.remove(booking.id)
        room.replace_intervals(store)

    lifecycle.apply_status(booking, BookingStatus.CANCELLED, now)
    booking.cancellation_reason = reason
    return True


def _confirm(room: Room, booking: Booking, now) -> bool:
    if booking.status == BookingStatus.CONFIRMED:
        return False

    lifecycle.ensure_transition(BookingStatus(booking.status), BookingStatus.CONFIRMED)

    if room is None:
        raise ConflictError("Room no longer exists")

    store = room.interval_store()
    if not store.contains(booking.id):
        if store.overlaps(booking.check_in, booking.check_out):
            raise ConflictError("Room is no longer available for this booking's dates")
        store.add(ReservedInterval(booking.check_in, booking.check_out, booking.id))
        room.replace_intervals(store)
        logger.warning(f"Re-registered missing interval for booking {booking.id} on room {room.id}")

    return lifecycle.apply_status(booking, BookingStatus.CONFIRMED, now)


def cancel_booking(db: Session, booking: Booking, user, reason: str | None = None, now=None) -> Booking:
    lifecycle.ensure_can_access(booking, user, "cancel")
    reason = reason or ("Cancelled by admin" if user.is_admin else "Cancelled by user")

    def release(room: Room) -> bool:
        db.refresh(booking)
        return _release(room, booking, reason, now)

    changed = with_booking_room(db, booking, release)
    db.refresh(booking)

    if changed:
        logger.info(f"Booking Cancelled | Booking={booking.id} | By={user.email} | Reason={booking.cancellation_reason}")
    return booking


def confirm_payment(db: Session, booking: Booking, payment_id: str, now=None) -> Booking:
    """Record a reconciled payment and move the booking to confirmed."""

    def settle(room: Room):
        db.refresh(booking)
        if booking.status == BookingStatus.CANCELLED:
            raise ConflictError("Booking has been cancelled")

        if booking.payment_status == PaymentStatus.COMPLETED and booking.payment_id != payment_id:
            raise ConflictError("Booking is already paid")

        lifecycle.apply_payment_status(booking, PaymentStatus.COMPLETED)
        booking.payment_id = payment_id
        if booking.status == BookingStatus.PENDING:
            _confirm(room, booking, now)

    with_booking_room(db, booking, settle)
    db.refresh(booking)

    logger.info(f"Booking Confirmed | Booking={booking.id} | Payment={payment_id}")
    return booking


def update_booking(db: Session, booking: Booking, admin, status=None, payment_status=None, now=None) -> Booking:
    """Admin status / payment-status change, validated against the transition tables."""
    if status is None and payment_status is None:
        raise ValidationError("Nothing to update: provide status and/or paymentStatus")

    now = now or lifecycle.utcnow()

    def apply(room: Room):
        db.refresh(booking)

        # Validate both before touching anything
        if status is not None:
            lifecycle.ensure_transition(BookingStatus(booking.status), status)
        if payment_status is not None:
            lifecycle.ensure_payment_transition(PaymentStatus(booking.payment_status), payment_status)

        if status == BookingStatus.CANCELLED:
            _release(room, booking, "Cancelled by admin", now)
        elif status == BookingStatus.CONFIRMED:
            _confirm(room, booking, now)
        elif status is not None:
            lifecycle.apply_status(booking, status, now)

        if payment_status is not None:
            lifecycle.apply_payment_status(booking, payment_status)

    with_booking_room(db, booking, apply)
    db.refresh(booking)

    logger.bind(log_type="admin").info(
        f"Booking Updated | Booking={booking.id} | By={admin.email} "
        f"| status={booking.status.value} | paymentStatus={booking.payment_status.value}"
    )
    return booking


# ---------------------------------------------------------------------
# QUOTE
# ---------------------------------------------------------------------
def quote(room: Room, check_in: date, check_out: date) -> dict:
    availability = check_availability(room, check_in, check_out)
    nights, total_amount = calculate_booking_price(room, check_in, check_out)

    return {
        "available": availability is Availability.AVAILABLE,
        "checkIn": check_in.isoformat(),
        "checkOut": check_out.isoformat(),
        "nights": nights,
        "totalAmount": float(total_amount),
    }


def mark_payment_failed(db: Session, booking: Booking) -> Booking:
    def fail(room: Room):
        db.refresh(booking)
        if booking.payment_status == PaymentStatus.PENDING:
            lifecycle.apply_payment_status(booking, PaymentStatus.FAILED)

    with_booking_room(db, booking, fail)
    db.refresh(booking)
    return booking
