"""Fixed daily slot grid and duration arithmetic"""

import math
from datetime import date, timedelta
from typing import Optional

from ...config import CLOSED_WEEKDAY

SLOTS: tuple[str, ...] = ("09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00")
SLOTS_PER_DAY = len(SLOTS)
FIRST_SLOT = SLOTS[0]

# Block.time sentinel covering every slot of a date
WHOLE_DAY = "all"


def index_of(time: str) -> Optional[int]:
    try:
        return SLOTS.index(time)
    except ValueError:
        return None


def is_valid_slot(time: Optional[str]) -> bool:
    return time in SLOTS


def occupied_slots(start: str, duration: int) -> list[str]:
    """
    Slots consumed by a booking starting at `start` for `duration` slots.

    Clipped at the end of the day. A start time that is not on the grid
    occupies only itself so legacy rows still block their own time.
    """
    start_index = index_of(start)
    if start_index is None:
        return [start]
    duration = max(int(duration or 1), 1)
    return list(SLOTS[start_index : start_index + duration])


def window(start_index: int, duration: int) -> Optional[list[str]]:
    """Exact slot window, or None when it would run past the last slot"""
    if start_index < 0 or duration < 1 or start_index + duration > SLOTS_PER_DAY:
        return None
    return list(SLOTS[start_index : start_index + duration])


def slot_units(hours) -> int:
    """
    Round a (possibly fractional) duration in hours up to whole slots, minimum 1.
    Anything that is not a finite positive number counts as one slot.
    """
    try:
        value = float(hours)
    except (TypeError, ValueError):
        return 1
    if not math.isfinite(value) or value <= 0:
        return 1
    return max(1, math.ceil(value))


def is_operating_day(day: date) -> bool:
    return day.weekday() != CLOSED_WEEKDAY


def next_operating_day(day: date) -> date:
    """The calendar day after `day`, skipping the closed weekday"""
    following = day + timedelta(days=1)
    if not is_operating_day(following):
        following += timedelta(days=1)
    return following
