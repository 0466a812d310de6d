"""
Availability engine

Answers "is this slot / day free" from the booking and block rows of the
queried dates only. Read-only: nothing here writes to the session.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...models import Block, Booking
from .repository import BookingRepository
from .slots import SLOTS, SLOTS_PER_DAY, WHOLE_DAY, occupied_slots, window


@dataclass
class DayOccupancy:
    """Booked and blocked slots for one date"""

    day: date
    booked: set[str] = field(default_factory=set)
    blocked: set[str] = field(default_factory=set)
    whole_day: bool = False

    @classmethod
    def build(cls, day: date, bookings: Iterable[Booking], blocks: Iterable[Block]) -> "DayOccupancy":
        occupancy = cls(day=day)
        for booking in bookings:
            occupancy.booked.update(occupied_slots(booking.time, booking.duration))
        for block in blocks:
            if block.time == WHOLE_DAY:
                occupancy.whole_day = True
            else:
                occupancy.blocked.add(block.time)
        return occupancy

    def is_free(self, slot: str) -> bool:
        if self.whole_day:
            return False
        return slot not in self.booked and slot not in self.blocked

    def conflicts(self, slots: Iterable[str]) -> list[str]:
        return [slot for slot in slots if not self.is_free(slot)]

    def first_free_window(self, duration: int) -> Optional[int]:
        """Index of the earliest start whose whole window is free, or None"""
        if self.whole_day:
            return None
        for start_index in range(SLOTS_PER_DAY - duration + 1):
            slots = window(start_index, duration)
            if slots and not self.conflicts(slots):
                return start_index
        return None

    @property
    def available_count(self) -> int:
        return sum(1 for slot in SLOTS if self.is_free(slot))


def load_day(db: Session, day: date) -> DayOccupancy:
    """Fresh occupancy for one date"""
    repo = BookingRepository()
    return DayOccupancy.build(day, repo.bookings_on(db, day), repo.blocks_on(db, day))


def load_range(db: Session, start: date, end: date) -> dict[date, DayOccupancy]:
    """Occupancy for every date in [start, end], from two range queries"""
    repo = BookingRepository()
    bookings_by_day: dict[date, list[Booking]] = {}
    for booking in repo.bookings_between(db, start, end):
        bookings_by_day.setdefault(booking.date, []).append(booking)
    blocks_by_day: dict[date, list[Block]] = {}
    for block in repo.blocks_between(db, start, end):
        blocks_by_day.setdefault(block.date, []).append(block)

    result = {}
    day = start
    while day <= end:
        result[day] = DayOccupancy.build(
            day, bookings_by_day.get(day, []), blocks_by_day.get(day, [])
        )
        day += timedelta(days=1)
    return result


def day_slot_availability(db: Session, day: date) -> list[dict]:
    occupancy = load_day(db, day)
    return [{"time": slot, "available": occupancy.is_free(slot)} for slot in SLOTS]


def month_availability(db: Session, year: int, month: int) -> list[dict]:
    days_in_month = calendar.monthrange(year, month)[1]
    start = date(year, month, 1)
    end = date(year, month, days_in_month)
    occupancy = load_range(db, start, end)
    return [
        {"date": day.isoformat(), "availableSlots": occupancy[day].available_count}
        for day in sorted(occupancy)
    ]
