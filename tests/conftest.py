import dataclasses
import os
import tempfile
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["REDIS_URL"] = ""
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="booking-logs-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.main import app
from app.core.dependencies import get_db, get_payment_gateway
from app.core.exceptions import PaymentGatewayError
from app.core.jwt import create_access_token
from app.core.security import hash_password
from app.db.session import Base
from app.models.enums import RoomType, UserRole
from app.models.room import Room
from app.models.user import User
from app.schemas.booking import BookingCreate
from app.services import reservations
from app.utils.stripe_client import PaymentIntent


PASSWORD_HASH = hash_password("secret123")


# ============================================================================
# FAKE PAYMENT PROCESSOR
# ============================================================================

class FakeGateway:
    """In-memory stand-in for StripeGateway with the same two calls."""

    def __init__(self):
        self.intents = {}
        self.unavailable = False

    def create_payment_intent(self, amount_minor, currency=None, metadata=None):
        if self.unavailable:
            raise PaymentGatewayError("Payment processor unavailable")

        intent_id = f"pi_test_{len(self.intents) + 1}"
        intent = PaymentIntent(
            id=intent_id,
            status="requires_payment_method",
            amount=amount_minor,
            currency=currency or "usd",
            client_secret=f"{intent_id}_secret",
            metadata=dict(metadata or {}),
        )
        self.intents[intent_id] = intent
        return intent

    def retrieve_intent(self, intent_id):
        if self.unavailable or intent_id not in self.intents:
            raise PaymentGatewayError("Payment processor unavailable")
        return self.intents[intent_id]

    def settle(self, intent_id, status="succeeded", amount_received=None):
        intent = self.intents[intent_id]
        received = intent.amount if amount_received is None else amount_received
        self.intents[intent_id] = dataclasses.replace(intent, status=status, amount_received=received)


# ============================================================================
# DATABASE
# ============================================================================

@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so separate sessions really are separate connections."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'booking.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


# ============================================================================
# APP
# ============================================================================

@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(session_factory, gateway):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ============================================================================
# USERS + TOKENS
# ============================================================================

def _user(db, name, email, role=UserRole.CUSTOMER):
    user = User(
        name=name,
        email=email,
        phone="+1-555-0100",
        password_hash=PASSWORD_HASH,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    token = create_access_token({"sub": user.email, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer(db):
    return _user(db, "Alice Guest", "alice@example.com")


@pytest.fixture
def other_customer(db):
    return _user(db, "Bob Guest", "bob@example.com")


@pytest.fixture
def admin(db):
    return _user(db, "Front Desk", "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def other_headers(other_customer):
    return auth_headers(other_customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


# ============================================================================
# ROOMS + DATES
# ============================================================================

@pytest.fixture
def room(db):
    room = Room(
        name="Deluxe Ocean View",
        description="Sea-facing room with a private balcony",
        type=RoomType.DELUXE,
        price_per_night=Decimal("100.00"),
        capacity=2,
        available=True,
        featured=False,
        images=["https://img.example.com/rooms/1.jpg"],
        amenities=["wifi", "minibar"],
        booked_dates=[],
    )
    db.add(room)
    db.commit()
    db.refresh(room)
    return room


@pytest.fixture
def today():
    return datetime.now(timezone.utc).date()


@pytest.fixture
def day(today):
    """day(n) -> the date n days from today (UTC)."""
    return lambda n: today + timedelta(days=n)


@pytest.fixture
def book(client):
    """POST /bookings and return the response."""

    def _book(headers, room_id, check_in, check_out, **extra):
        payload = {
            "roomId": room_id,
            "checkIn": check_in.isoformat(),
            "checkOut": check_out.isoformat(),
            **extra,
        }
        return client.post("/bookings", json=payload, headers=headers)

    return _book


@pytest.fixture
def make_booking(db):
    """Create a booking through the service layer, bypassing HTTP."""

    def _make(user, room, check_in, check_out, adults=1):
        data = BookingCreate(
            room_id=room.id,
            check_in=check_in,
            check_out=check_out,
            guests={"adults": adults},
        )
        return reservations.create_booking(db, user, data)

    return _make
