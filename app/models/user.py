from sqlalchemy import Column, Integer, String, DateTime, Enum, func
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.models.enums import UserRole, enum_values


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)

    role = Column(
        Enum(UserRole, name="userrole", values_callable=enum_values),
        nullable=False,
        default=UserRole.CUSTOMER,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    bookings = relationship("Booking", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
