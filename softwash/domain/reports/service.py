"""
Reporting aggregator

Read-only summaries over paid work orders and expenses. Prices are stored
as display strings ("$575.00", "575", "about 400") and are parsed
defensively: anything unparsable counts as zero rather than failing the report.
"""

import logging
import re
from collections import defaultdict
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...config import MILEAGE_RATE
from ...models import WorkOrder
from .repository import ReportRepository

logger = logging.getLogger(__name__)

NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")


def parse_price(value) -> float:
    """First number in a price string, ignoring currency symbols and thousands separators"""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if value == value else 0.0
    try:
        text = str(value).replace(",", "")
    except Exception:
        return 0.0
    match = NUMBER_PATTERN.search(text)
    if not match:
        return 0.0
    try:
        return float(match.group())
    except ValueError:
        return 0.0


def work_order_amount(work_order: WorkOrder) -> float:
    price = work_order.price
    if not price and work_order.booking is not None:
        price = work_order.booking.price
    return parse_price(price)


def payment_date(work_order: WorkOrder) -> Optional[date]:
    """When the money came in: paid_at, else the booking date, else creation"""
    if work_order.paid_at:
        return work_order.paid_at.date() if isinstance(work_order.paid_at, datetime) else work_order.paid_at
    if work_order.booking is not None and work_order.booking.date:
        return work_order.booking.date
    if work_order.created_at:
        return work_order.created_at.date()
    return None


def customer_label(work_order: WorkOrder) -> str:
    if work_order.customer is not None and work_order.customer.name:
        return work_order.customer.name
    if work_order.booking is not None and work_order.booking.name:
        return work_order.booking.name
    return "Unknown"


def _in_period(day: Optional[date], year: int, month: Optional[int]) -> bool:
    if day is None or day.year != year:
        return False
    return month is None or day.month == month


def paid_work_orders_in(db: Session, year: int, month: Optional[int] = None) -> list[tuple[WorkOrder, date]]:
    rows = []
    for work_order in ReportRepository.paid_work_orders(db):
        day = payment_date(work_order)
        if _in_period(day, year, month):
            rows.append((work_order, day))
    return rows


def revenue_report(db: Session, year: int, month: Optional[int] = None) -> dict:
    months = {m: {"month": m, "revenue": 0.0, "expenses": 0.0, "net": 0.0} for m in range(1, 13)}
    by_service: dict[str, dict] = defaultdict(lambda: {"revenue": 0.0, "jobs": 0})
    by_customer: dict[object, dict] = {}
    total_mileage = 0.0

    for work_order, day in paid_work_orders_in(db, year, month):
        amount = work_order_amount(work_order)
        months[day.month]["revenue"] += amount

        service_name = work_order.service or "Other"
        by_service[service_name]["revenue"] += amount
        by_service[service_name]["jobs"] += 1

        customer_key = work_order.customer_id or customer_label(work_order)
        entry = by_customer.setdefault(
            customer_key,
            {"customer_id": work_order.customer_id, "name": customer_label(work_order), "revenue": 0.0, "jobs": 0},
        )
        entry["revenue"] += amount
        entry["jobs"] += 1

        total_mileage += work_order.mileage or 0.0

    expenses_by_category: dict[str, float] = defaultdict(float)
    for expense in ReportRepository.expenses_in(db, year, month):
        months[expense.date.month]["expenses"] += expense.amount or 0.0
        expenses_by_category[expense.category or "Other"] += expense.amount or 0.0

    for row in months.values():
        row["revenue"] = round(row["revenue"], 2)
        row["expenses"] = round(row["expenses"], 2)
        row["net"] = round(row["revenue"] - row["expenses"], 2)

    total_revenue = round(sum(row["revenue"] for row in months.values()), 2)
    total_expenses = round(sum(row["expenses"] for row in months.values()), 2)

    top_customers = sorted(by_customer.values(), key=lambda c: c["revenue"], reverse=True)[:10]
    for customer in top_customers:
        customer["revenue"] = round(customer["revenue"], 2)

    return {
        "year": year,
        "month": month,
        "months": [months[m] for m in range(1, 13)],
        "total_revenue": total_revenue,
        "total_expenses": total_expenses,
        "net": round(total_revenue - total_expenses, 2),
        "by_service": sorted(
            (
                {"service": name, "revenue": round(v["revenue"], 2), "jobs": v["jobs"]}
                for name, v in by_service.items()
            ),
            key=lambda s: s["revenue"],
            reverse=True,
        ),
        "top_customers": top_customers,
        "total_mileage": round(total_mileage, 1),
        "mileage_rate": MILEAGE_RATE,
        "mileage_deduction": round(total_mileage * MILEAGE_RATE, 2),
        "expenses_by_category": {k: round(v, 2) for k, v in sorted(expenses_by_category.items())},
    }


def payments_ledger(
    db: Session, year: int, month: Optional[int] = None, method: Optional[str] = None
) -> dict:
    """Paid work orders in the period, optionally for one payment method, newest first"""
    method = method.strip().lower() if method else None
    payments = []
    totals_by_method: dict[str, float] = defaultdict(float)

    for work_order, day in paid_work_orders_in(db, year, month):
        payment_method = (work_order.payment_method or "unspecified").lower()
        if method and payment_method != method:
            continue
        amount = work_order_amount(work_order)
        totals_by_method[payment_method] += amount
        payments.append(
            {
                "work_order_id": work_order.id,
                "date": day.isoformat(),
                "customer": customer_label(work_order),
                "service": work_order.service,
                "amount": round(amount, 2),
                "method": payment_method,
            }
        )

    payments.sort(key=lambda p: (p["date"], p["work_order_id"]), reverse=True)
    return {
        "year": year,
        "month": month,
        "method": method,
        "payments": payments,
        "total": round(sum(totals_by_method.values()), 2),
        "by_method": {k: round(v, 2) for k, v in sorted(totals_by_method.items())},
    }
