from decimal import Decimal

from pydantic import Field

from app.schemas.base import CamelModel


class PaymentIntentCreate(CamelModel):
    booking_id: str
    amount: Decimal = Field(gt=0)


class PaymentConfirm(CamelModel):
    payment_intent_id: str
    booking_id: str
