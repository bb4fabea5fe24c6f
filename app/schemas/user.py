from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from app.models.enums import UserRole
from app.schemas.base import CamelModel


class UserBase(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr


class UserCreate(UserBase):
    password: str = Field(min_length=6)
    phone: Optional[str] = None


class UserLogin(CamelModel):
    email: EmailStr
    password: str


class UserOut(UserBase):
    id: int
    phone: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None
