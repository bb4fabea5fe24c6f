from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest

from app.core.config import settings
from app.core.exceptions import CancellationWindowViolation, ForbiddenError, InvalidTransitionError
from app.models.enums import BookingStatus, PaymentStatus
from app.services import booking_lifecycle as lifecycle


def make_booking(status=BookingStatus.PENDING, payment_status=PaymentStatus.PENDING, check_in=date(2030, 1, 10)):
    return SimpleNamespace(
        status=status,
        payment_status=payment_status,
        check_in=check_in,
        checked_in_at=None,
        checked_out_at=None,
        user_id=1,
    )


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestStatusTransitions:

    @pytest.mark.unit
    @pytest.mark.domain
    @pytest.mark.parametrize("current, target", [
        (BookingStatus.PENDING, BookingStatus.CONFIRMED),
        (BookingStatus.PENDING, BookingStatus.CANCELLED),
        (BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN),
        (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
        (BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT),
        (BookingStatus.CHECKED_IN, BookingStatus.CHECKED_IN),
    ])
    def test_legal(self, current, target):
        assert lifecycle.can_transition(current, target)

    @pytest.mark.unit
    @pytest.mark.domain
    @pytest.mark.parametrize("current, target", [
        (BookingStatus.PENDING, BookingStatus.CHECKED_IN),
        (BookingStatus.PENDING, BookingStatus.CHECKED_OUT),
        (BookingStatus.CHECKED_IN, BookingStatus.CANCELLED),
        (BookingStatus.CHECKED_OUT, BookingStatus.CHECKED_IN),
        (BookingStatus.CANCELLED, BookingStatus.CONFIRMED),
        (BookingStatus.CANCELLED, BookingStatus.PENDING),
    ])
    def test_illegal(self, current, target):
        assert not lifecycle.can_transition(current, target)
        with pytest.raises(InvalidTransitionError):
            lifecycle.ensure_transition(current, target)

    @pytest.mark.unit
    def test_check_in_timestamp_written_once(self):
        booking = make_booking(BookingStatus.CONFIRMED)
        first, second = utc(2030, 1, 10, 15), utc(2030, 1, 10, 18)

        assert lifecycle.apply_status(booking, BookingStatus.CHECKED_IN, first)
        assert not lifecycle.apply_status(booking, BookingStatus.CHECKED_IN, second)

        assert booking.status == BookingStatus.CHECKED_IN
        assert booking.checked_in_at == first

    @pytest.mark.unit
    def test_check_out_sets_its_own_timestamp(self):
        booking = make_booking(BookingStatus.CHECKED_IN)
        booking.checked_in_at = utc(2030, 1, 10, 15)

        lifecycle.apply_status(booking, BookingStatus.CHECKED_OUT, utc(2030, 1, 12, 11))

        assert booking.checked_out_at == utc(2030, 1, 12, 11)
        assert booking.checked_in_at == utc(2030, 1, 10, 15)

    @pytest.mark.unit
    def test_rejected_transition_leaves_booking_untouched(self):
        booking = make_booking(BookingStatus.PENDING)

        with pytest.raises(InvalidTransitionError):
            lifecycle.apply_status(booking, BookingStatus.CHECKED_OUT)

        assert booking.status == BookingStatus.PENDING
        assert booking.checked_out_at is None


class TestPaymentTransitions:

    @pytest.mark.unit
    def test_failed_payment_can_be_retried(self):
        booking = make_booking(payment_status=PaymentStatus.FAILED)

        assert lifecycle.apply_payment_status(booking, PaymentStatus.PENDING)
        assert lifecycle.apply_payment_status(booking, PaymentStatus.COMPLETED)
        assert booking.payment_status == PaymentStatus.COMPLETED

    @pytest.mark.unit
    @pytest.mark.parametrize("current, target", [
        (PaymentStatus.COMPLETED, PaymentStatus.PENDING),
        (PaymentStatus.COMPLETED, PaymentStatus.FAILED),
        (PaymentStatus.REFUNDED, PaymentStatus.COMPLETED),
        (PaymentStatus.PENDING, PaymentStatus.REFUNDED),
    ])
    def test_illegal(self, current, target):
        with pytest.raises(InvalidTransitionError):
            lifecycle.ensure_payment_transition(current, target)


class TestCancellationWindow:

    @pytest.mark.unit
    @pytest.mark.edge_case
    def test_confirmed_inside_window_rejected(self):
        booking = make_booking(BookingStatus.CONFIRMED, check_in=date(2030, 1, 10))

        with pytest.raises(CancellationWindowViolation):
            lifecycle.ensure_cancellation_window(booking, utc(2030, 1, 9, 1))

    @pytest.mark.unit
    def test_confirmed_outside_window_allowed(self):
        booking = make_booking(BookingStatus.CONFIRMED, check_in=date(2030, 1, 10))

        lifecycle.ensure_cancellation_window(booking, utc(2030, 1, 8, 23))

    @pytest.mark.unit
    @pytest.mark.edge_case
    def test_pending_never_blocked(self):
        booking = make_booking(BookingStatus.PENDING, check_in=date(2030, 1, 10))

        lifecycle.ensure_cancellation_window(booking, utc(2030, 1, 9, 23))

    @pytest.mark.unit
    @pytest.mark.edge_case
    def test_naive_now_is_utc(self):
        booking = make_booking(BookingStatus.CONFIRMED, check_in=date(2030, 1, 10))

        assert lifecycle.hours_until_check_in(booking, datetime(2030, 1, 9, 12)) == 12
        with pytest.raises(CancellationWindowViolation):
            lifecycle.ensure_cancellation_window(booking, datetime(2030, 1, 9, 12))

    @pytest.mark.unit
    def test_window_is_configurable(self, monkeypatch):
        monkeypatch.setattr(settings, "CANCELLATION_WINDOW_HOURS", 48)
        booking = make_booking(BookingStatus.CONFIRMED, check_in=date(2030, 1, 10))

        with pytest.raises(CancellationWindowViolation, match="48 hours"):
            lifecycle.ensure_cancellation_window(booking, utc(2030, 1, 8, 23))


class TestAccess:

    @pytest.mark.unit
    def test_owner_and_admin_allowed(self):
        booking = make_booking()

        lifecycle.ensure_can_access(booking, SimpleNamespace(id=1, is_admin=False))
        lifecycle.ensure_can_access(booking, SimpleNamespace(id=99, is_admin=True))

    @pytest.mark.unit
    def test_other_customer_forbidden(self):
        booking = make_booking()

        with pytest.raises(ForbiddenError, match="Not authorized to cancel this booking"):
            lifecycle.ensure_can_access(booking, SimpleNamespace(id=2, is_admin=False), "cancel")
