from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from app.models.enums import RoomType
from app.schemas.base import CamelModel


class RoomBase(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=10, max_length=2000)
    type: RoomType
    price_per_night: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    capacity: int = Field(ge=1, le=10)
    available: bool = True
    featured: bool = False
    images: List[str] = []
    amenities: List[str] = []


class RoomCreate(RoomBase):
    pass


class RoomUpdate(CamelModel):
    # Reserved dates are never writable here
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=10, max_length=2000)
    type: Optional[RoomType] = None
    price_per_night: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    capacity: Optional[int] = Field(default=None, ge=1, le=10)
    available: Optional[bool] = None
    featured: Optional[bool] = None
    images: Optional[List[str]] = None
    amenities: Optional[List[str]] = None

    # Omit a field to leave it unchanged; null is not a value for any column here
    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class RoomOut(RoomBase):
    id: int
    price_per_night: float
    created_at: Optional[datetime] = None
