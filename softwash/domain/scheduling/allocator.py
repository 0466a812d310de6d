"""
Booking allocator

The only write path that creates bookings. Validates the request, places it
on one day or splits it across two (multi-day spillover), then commits the
customer, booking rows and work orders as one transaction. On PostgreSQL a
transaction-scoped advisory lock is held on every date involved.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Booking, Customer, WorkOrder
from ..customers.repository import CustomerRepository
from ..pricing.repository import PricingRepository
from .availability import load_day
from .repository import BookingRepository
from .slots import (
    FIRST_SLOT,
    SLOTS,
    SLOTS_PER_DAY,
    index_of,
    is_operating_day,
    is_valid_slot,
    next_operating_day,
    slot_units,
    window,
)

logger = logging.getLogger(__name__)

# Services that need an on-site estimate before they can be scheduled
NOT_BOOKABLE = frozenset({"heavy-equipment", "commercial"})

# Fallback durations (slots) when the catalog has no row for the service key
DEFAULT_DURATIONS = {
    "house-rancher": 2,
    "house-single": 3,
    "house-plus": 4,
    "deck": 2,
    "fence": 2,
    "rv": 1,
    "boat": 1,
}

MSG_NOT_BOOKABLE = "This service requires a custom estimate. Please call or text to book."
MSG_INVALID_SLOT = "Invalid time slot selected."
MSG_PAST_DATE = "That date has already passed. Please select another."
MSG_CLOSED_DAY = "We are closed that day. Please select another."
MSG_DAY_UNAVAILABLE = "Sorry, that day is not available. Please select another."
MSG_NOT_ENOUGH_TIME = "Not enough time remaining in the day for this service."
MSG_SLOT_TAKEN = "Sorry, that time slot is no longer available. Please select another."
MSG_NO_DAY2 = (
    "This job needs two days and the following day has no opening long enough. "
    "Please select another date or call to schedule."
)


class BookingRejected(Exception):
    """A request that cannot be booked; `message` is safe to show the customer"""

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.message = message
        self.reason = reason


@dataclass
class BookingRequest:
    day: date
    time: str
    service: str
    total_duration: Optional[float] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    price: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class Placement:
    day: date
    time: str
    duration: int


@dataclass
class AllocationResult:
    bookings: list[Booking]
    customer: Customer
    work_orders: list[WorkOrder]
    adjusted: bool = False
    placements: list[Placement] = field(default_factory=list)

    @property
    def multi_day(self) -> bool:
        return len(self.placements) > 1

    @property
    def day2_notice(self) -> Optional[str]:
        if not self.multi_day:
            return None
        first, second = self.placements
        hours = "hour" if second.duration == 1 else "hours"
        notice = (
            f"This job takes more than one day. Day 1 is {first.day:%A, %B %d} "
            f"(full day from {first.time}); Day 2 is {second.day:%A, %B %d} "
            f"starting at {second.time} for {second.duration} {hours}."
        )
        if self.adjusted:
            notice += f" Day 2 was moved to {second.time} because earlier times were already booked."
        return notice


class BookingAllocator:
    def __init__(self, db: Session, today: Optional[date] = None):
        self.db = db
        self.today = today or date.today()
        self.bookings = BookingRepository()
        self.customers = CustomerRepository()
        self.pricing = PricingRepository()

    def resolve_duration(self, service: str, override: Optional[float] = None) -> int:
        """Explicit finite positive override, else catalog duration, else static default"""
        if override is not None:
            try:
                value = float(override)
            except (TypeError, ValueError):
                value = 0.0
            if math.isfinite(value) and value > 0:
                return slot_units(value)
        row = self.pricing.get_service_by_key(self.db, service) if service else None
        if row is not None and row.duration:
            return slot_units(row.duration)
        return DEFAULT_DURATIONS.get(service, 1)

    def validate(self, request: BookingRequest, customer_facing: bool = True) -> None:
        """Checks that need no schedule reads"""
        if customer_facing and request.service in NOT_BOOKABLE:
            raise BookingRejected(MSG_NOT_BOOKABLE, "not_bookable")
        if not is_valid_slot(request.time):
            raise BookingRejected(MSG_INVALID_SLOT, "invalid_slot")
        if customer_facing:
            if request.day < self.today:
                raise BookingRejected(MSG_PAST_DATE, "past_date")
            if not is_operating_day(request.day):
                raise BookingRejected(MSG_CLOSED_DAY, "closed_day")

    def plan(self, request: BookingRequest, duration: int) -> tuple[list[Placement], bool]:
        """
        Decide where the booking goes from a fresh read of the schedule.
        Returns the placements and whether Day 2 had to move off the first slot.
        """
        if duration <= SLOTS_PER_DAY:
            return [self._plan_single_day(request.day, request.time, duration)], False
        return self._plan_multi_day(request.day, duration)

    def _plan_single_day(self, day: date, time: str, duration: int) -> Placement:
        slots = window(index_of(time), duration)
        occupancy = load_day(self.db, day)
        if occupancy.whole_day:
            raise BookingRejected(MSG_DAY_UNAVAILABLE, "day_unavailable")
        if slots is None:
            raise BookingRejected(MSG_NOT_ENOUGH_TIME, "overflow")
        if occupancy.conflicts(slots):
            raise BookingRejected(MSG_SLOT_TAKEN, "slot_taken")
        return Placement(day=day, time=time, duration=duration)

    def _plan_multi_day(self, day: date, duration: int) -> tuple[list[Placement], bool]:
        # Day 1 always takes the whole day, whatever start time was picked
        first = self._plan_single_day(day, FIRST_SLOT, SLOTS_PER_DAY)

        second_day = next_operating_day(day)
        remainder = duration - SLOTS_PER_DAY
        if remainder > SLOTS_PER_DAY:
            raise BookingRejected(MSG_NO_DAY2, "no_day2_window")
        start_index = load_day(self.db, second_day).first_free_window(remainder)
        if start_index is None:
            raise BookingRejected(MSG_NO_DAY2, "no_day2_window")

        second = Placement(day=second_day, time=SLOTS[start_index], duration=remainder)
        return [first, second], start_index != 0

    def allocate(self, request: BookingRequest, customer_facing: bool = True) -> AllocationResult:
        """
        Validate, place and commit a booking request.

        Raises BookingRejected for every customer-correctable outcome; nothing
        is written in that case.
        """
        self.validate(request, customer_facing=customer_facing)
        duration = self.resolve_duration(request.service, request.total_duration)

        days = [request.day]
        if duration > SLOTS_PER_DAY:
            days.append(next_operating_day(request.day))

        try:
            for day in sorted(days):
                self.bookings.lock_date(self.db, day)
            placements, adjusted = self.plan(request, duration)
            result = self._commit(request, placements, adjusted)
        except Exception:
            self.db.rollback()
            raise

        for booking in result.bookings:
            logger.info(
                f"📅 Booked {booking.service} on {booking.date} at {booking.time} "
                f"for {booking.duration} slot(s) (booking {booking.id})"
            )
        return result

    def _commit(
        self, request: BookingRequest, placements: list[Placement], adjusted: bool
    ) -> AllocationResult:
        customer = self.customers.resolve_or_create(
            self.db, request.name, request.email, request.phone, request.address
        )

        bookings: list[Booking] = []
        work_orders: list[WorkOrder] = []
        total_days = len(placements)
        for number, placement in enumerate(placements, start=1):
            if total_days == 1:
                notes = request.notes or None
                price = request.price or None
            elif number == 1:
                notes = "\n".join(filter(None, [f"Day 1 of {total_days}", request.notes]))
                price = request.price or None
            else:
                notes = f"Day {number} of {total_days} (continued from {placements[0].day.isoformat()})"
                price = None

            booking = Booking(
                date=placement.day,
                time=placement.time,
                duration=placement.duration,
                name=request.name or "",
                email=request.email or "",
                phone=request.phone or "",
                address=request.address or "",
                service=request.service or "",
                price=price,
                notes=notes,
                customer_id=customer.id,
            )
            self.db.add(booking)
            self.db.flush()

            work_order = WorkOrder(
                booking_id=booking.id,
                customer_id=customer.id,
                service=booking.service,
                price=price,
            )
            self.db.add(work_order)
            bookings.append(booking)
            work_orders.append(work_order)

        self.db.commit()
        for row in [customer, *bookings, *work_orders]:
            self.db.refresh(row)

        return AllocationResult(
            bookings=bookings,
            customer=customer,
            work_orders=work_orders,
            adjusted=adjusted,
            placements=placements,
        )
