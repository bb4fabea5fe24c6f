from datetime import date, datetime
from typing import Optional

from pydantic import Field, model_validator

from app.models.enums import BookingStatus, PaymentMethod, PaymentStatus
from app.schemas.base import CamelModel


class Guests(CamelModel):
    adults: int = Field(default=1, ge=1)
    children: int = Field(default=0, ge=0)
    infants: int = Field(default=0, ge=0)


class BookingBase(CamelModel):
    room_id: int
    check_in: date
    check_out: date


class BookingCreate(BookingBase):
    guests: Guests = Field(default_factory=Guests)
    payment_method: PaymentMethod = PaymentMethod.STRIPE
    special_requests: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def check_out_after_check_in(self):
        if self.check_out <= self.check_in:
            raise ValueError("Check-out date must be after check-in date")
        return self


class BookingOut(BookingBase):
    id: str
    room_id: Optional[int] = None
    user_id: int
    guests: Guests
    nights: int
    total_amount: float
    status: BookingStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    payment_id: Optional[str] = None
    special_requests: Optional[str] = None
    cancellation_reason: Optional[str] = None
    checked_in_at: Optional[datetime] = None
    checked_out_at: Optional[datetime] = None
    room_snapshot: dict
    user_snapshot: Optional[dict] = None
    created_at: Optional[datetime] = None


class BookingUpdate(CamelModel):
    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None


class BookingCancel(CamelModel):
    reason: Optional[str] = Field(default=None, max_length=500)
