import uuid

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Numeric, JSON, ForeignKey, Enum, func
)
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.models.enums import BookingStatus, PaymentStatus, PaymentMethod, enum_values


def new_booking_id() -> str:
    return uuid.uuid4().hex


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(32), primary_key=True, default=new_booking_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # NULL once the room is deleted; room_snapshot still describes the stay
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True, index=True)

    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)

    adults = Column(Integer, nullable=False, default=1)
    children = Column(Integer, nullable=False, default=0)
    infants = Column(Integer, nullable=False, default=0)

    # Frozen at creation
    nights = Column(Integer, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)

    status = Column(
        Enum(BookingStatus, name="bookingstatus", values_callable=enum_values),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )

    # PAYMENT FIELDS
    payment_method = Column(
        Enum(PaymentMethod, name="paymentmethod", values_callable=enum_values),
        nullable=False,
        default=PaymentMethod.STRIPE,
    )
    payment_status = Column(
        Enum(PaymentStatus, name="paymentstatus", values_callable=enum_values),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )
    payment_id = Column(String, nullable=True)

    special_requests = Column(String(500), nullable=True)
    cancellation_reason = Column(String, nullable=True)

    checked_in_at = Column(DateTime(timezone=True), nullable=True)
    checked_out_at = Column(DateTime(timezone=True), nullable=True)

    room_snapshot = Column(JSON, nullable=False)
    user_snapshot = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="bookings")
    room = relationship("Room", back_populates="bookings")

    @property
    def guests(self) -> dict:
        return {"adults": self.adults, "children": self.children, "infants": self.infants}
