"""
Work order milestone transitions

The four status flags are independent booleans advanced by the admin. This
module is the only place they are mutated, and it reports which customer
notification (if any) the change should trigger:

    flag            transition      effect
    invoiced        false -> true   "invoice" email
    invoice_paid    false -> true   "receipt" email
    paid            false -> true   stamp paid_at
    paid            true  -> false  clear paid_at

At most one notification per update. When invoiced and invoice_paid both
flip true in the same call only the invoice is sent.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from ...config import INVOICE_DUE_BUSINESS_DAYS
from ...models import WorkOrder

MILESTONES = ("job_complete", "invoiced", "invoice_paid", "paid")

# Checked in this order; the first rising flag wins
NOTIFYING_FLAGS = (("invoiced", "invoice"), ("invoice_paid", "receipt"))


@dataclass
class TransitionOutcome:
    notification: Optional[str] = None  # "invoice", "receipt" or None
    paid_stamped: bool = False
    paid_cleared: bool = False
    changed: list[str] = field(default_factory=list)


def has_progress(work_order: WorkOrder) -> bool:
    """True once any milestone has been reached"""
    return any(getattr(work_order, flag) for flag in MILESTONES)


def apply_status_update(work_order: WorkOrder, changes: dict, now: datetime) -> TransitionOutcome:
    """
    Apply milestone flag changes to `work_order` and return what happened.
    Keys in `changes` that are not milestones are ignored; values of None are skipped.
    """
    outcome = TransitionOutcome()
    rising = set()

    for flag in MILESTONES:
        if flag not in changes or changes[flag] is None:
            continue
        new_value = bool(changes[flag])
        old_value = bool(getattr(work_order, flag))
        if new_value == old_value:
            continue
        setattr(work_order, flag, new_value)
        outcome.changed.append(flag)
        if new_value:
            rising.add(flag)

    for flag, notification in NOTIFYING_FLAGS:
        if flag in rising:
            outcome.notification = notification
            break

    if "paid" in outcome.changed:
        if work_order.paid:
            work_order.paid_at = now
            outcome.paid_stamped = True
        else:
            work_order.paid_at = None
            outcome.paid_cleared = True

    return outcome


def business_days_after(start: date, days: int = INVOICE_DUE_BUSINESS_DAYS) -> date:
    """The date `days` weekdays (Mon-Fri) after `start`"""
    current = start
    remaining = days
    while remaining > 0:
        current += timedelta(days=1)
        if current.weekday() < 5:
            remaining -= 1
    return current


def invoice_number(work_order: WorkOrder, year: Optional[int] = None) -> str:
    if year is None:
        created = work_order.created_at or datetime.now()
        year = created.year
    return f"INV-{year}-{work_order.id:04d}"
