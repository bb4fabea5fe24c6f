from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.models.enums import BookingStatus, PaymentMethod, PaymentStatus, RoomType
from app.services.invoices import (
    booking_summary,
    capture_room_snapshot,
    capture_user_snapshot,
    generate_invoice,
    invoice_number,
)

BOOKING_ID = "0f3c9a7e5b1d4c2a8e6f0b9d7c5a3e1f"


def make_booking(total="300.00"):
    return SimpleNamespace(
        id=BOOKING_ID,
        check_in=date(2030, 6, 1),
        check_out=date(2030, 6, 4),
        nights=3,
        total_amount=Decimal(total),
        status=BookingStatus.CONFIRMED,
        payment_status=PaymentStatus.COMPLETED,
        payment_method=PaymentMethod.STRIPE,
        room_snapshot={"name": "Deluxe", "type": "deluxe", "pricePerNight": 100.0, "images": []},
        user_snapshot={"name": "Alice", "email": "alice@example.com", "phone": None},
        created_at=datetime(2030, 5, 1, 9, 30, tzinfo=timezone.utc),
    )


class TestInvoice:

    @pytest.mark.unit
    def test_totals_with_default_tax(self):
        invoice = generate_invoice(make_booking())

        assert invoice["subtotal"] == 300.0
        assert invoice["tax"] == 30.0
        assert invoice["total"] == 330.0
        assert invoice["nights"] == 3
        assert invoice["paymentMethod"] == "stripe"
        assert invoice["paymentStatus"] == "completed"
        assert invoice["guest"]["email"] == "alice@example.com"
        assert invoice["room"]["name"] == "Deluxe"
        assert invoice["checkIn"] == "2030-06-01"

    @pytest.mark.unit
    @pytest.mark.edge_case
    def test_tax_rounds_half_up_to_cents(self):
        invoice = generate_invoice(make_booking("99.99"), tax_rate=Decimal("0.075"))

        assert invoice["tax"] == 7.5
        assert invoice["total"] == 107.49

    @pytest.mark.unit
    def test_invoice_number_from_booking_id(self):
        assert invoice_number(BOOKING_ID) == "INV-7C5A3E1F"
        assert invoice_number(BOOKING_ID, prefix="HB-") == "HB-" + BOOKING_ID[-8:].upper()
        assert generate_invoice(make_booking())["invoiceNumber"] == "INV-" + BOOKING_ID[-8:].upper()

    @pytest.mark.unit
    def test_summary(self):
        summary = booking_summary(make_booking())

        assert summary == {
            "id": BOOKING_ID,
            "checkIn": "2030-06-01",
            "checkOut": "2030-06-04",
            "nights": 3,
            "totalAmount": 300.0,
            "status": "confirmed",
            "paymentStatus": "completed",
            "room": {"name": "Deluxe", "type": "deluxe", "pricePerNight": 100.0, "images": []},
            "createdAt": "2030-05-01T09:30:00+00:00",
        }


class TestSnapshots:

    @pytest.mark.unit
    def test_room_snapshot_is_a_copy(self):
        images = ["https://img.example.com/a.jpg"]
        room = SimpleNamespace(name="Suite", type=RoomType.SUITE, price_per_night=Decimal("250.00"), images=images)

        snapshot = capture_room_snapshot(room)
        images.append("https://img.example.com/b.jpg")

        assert snapshot == {
            "name": "Suite",
            "type": "suite",
            "pricePerNight": 250.0,
            "images": ["https://img.example.com/a.jpg"],
        }

    @pytest.mark.unit
    def test_user_snapshot(self):
        user = SimpleNamespace(name="Alice", email="alice@example.com", phone="+1-555-0100")

        assert capture_user_snapshot(user) == {
            "name": "Alice",
            "email": "alice@example.com",
            "phone": "+1-555-0100",
        }
