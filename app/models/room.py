from sqlalchemy import (
    Column, Integer, String, Boolean, Numeric, JSON, DateTime, Enum, func
)
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.models.enums import RoomType, enum_values
from app.utils.intervals import IntervalStore


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(100), nullable=False)
    description = Column(String(2000), nullable=False)
    type = Column(Enum(RoomType, name="roomtype", values_callable=enum_values), nullable=False)

    price_per_night = Column(Numeric(10, 2), nullable=False)
    capacity = Column(Integer, nullable=False)
    available = Column(Boolean, nullable=False, default=True)
    featured = Column(Boolean, nullable=False, default=False)

    images = Column(JSON, nullable=False, default=list)      # list of image URLs
    amenities = Column(JSON, nullable=False, default=list)

    # Reserved [from, to) intervals, see app.utils.intervals.
    # Only written through app.services.reservations.with_room_lock.
    booked_dates = Column(JSON, nullable=False, default=list)

    # Bumped on every UPDATE; a stale version aborts the write
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    bookings = relationship("Booking", back_populates="room")

    __mapper_args__ = {"version_id_col": version}

    def interval_store(self) -> IntervalStore:
        return IntervalStore.from_json(self.booked_dates or [])

    def replace_intervals(self, store: IntervalStore):
        # Assign a fresh list so the JSON column is flagged dirty
        self.booked_dates = store.to_json()
