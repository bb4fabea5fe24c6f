"""Per-room set of reserved date intervals.

Every interval is half-open: ``[from_date, to_date)``. A guest checking out on
the day another checks in does not conflict with them.

The store is a plain value kept on the ``Room`` row (``rooms.booked_dates``);
persistence and locking belong to ``app.services.reservations``.
"""
from bisect import insort
from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True, order=True)
class ReservedInterval:
    from_date: date
    to_date: date
    booking_id: str = field(compare=False)

    def overlaps(self, start: date, end: date) -> bool:
        return start < self.to_date and end > self.from_date

    def to_json(self) -> dict:
        return {
            "from": self.from_date.isoformat(),
            "to": self.to_date.isoformat(),
            "bookingId": self.booking_id,
        }

    @classmethod
    def from_json(cls, data: dict) -> "ReservedInterval":
        return cls(
            from_date=date.fromisoformat(data["from"]),
            to_date=date.fromisoformat(data["to"]),
            booking_id=str(data["bookingId"]),
        )


class IntervalStore:
    """Ordered collection of :class:`ReservedInterval`, sorted by start date."""

    def __init__(self, intervals=None):
        self._intervals: list[ReservedInterval] = sorted(intervals or [])

    @classmethod
    def from_json(cls, rows: list[dict]) -> "IntervalStore":
        return cls(ReservedInterval.from_json(row) for row in rows)

    def to_json(self) -> list[dict]:
        return [interval.to_json() for interval in self._intervals]

    def __iter__(self):
        return iter(self._intervals)

    def __len__(self):
        return len(self._intervals)

    def overlaps(self, start: date, end: date) -> bool:
        for interval in self._intervals:
            if interval.from_date >= end:
                break
            if interval.overlaps(start, end):
                return True
        return False

    def add(self, interval: ReservedInterval):
        """Insert ``interval`` in start order.

        The caller must already have checked :meth:`overlaps`; nothing is
        re-validated here.
        """
        insort(self._intervals, interval)

    def remove(self, booking_id: str):
        booking_id = str(booking_id)
        self._intervals = [i for i in self._intervals if i.booking_id != booking_id]

    def contains(self, booking_id: str) -> bool:
        booking_id = str(booking_id)
        return any(i.booking_id == booking_id for i in self._intervals)

    def is_disjoint(self) -> bool:
        for current, following in zip(self._intervals, self._intervals[1:]):
            if following.from_date < current.to_date:
                return False
        return True
