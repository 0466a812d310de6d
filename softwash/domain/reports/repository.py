"""Report repository - read-only queries for the reporting aggregator"""

import calendar
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Expense, WorkOrder


class ReportRepository:
    @staticmethod
    def paid_work_orders(db: Session) -> list[WorkOrder]:
        # Period filtering needs the paid_at / booking date fallback, so it happens in Python
        return (
            db.query(WorkOrder)
            .options(joinedload(WorkOrder.booking), joinedload(WorkOrder.customer))
            .filter(WorkOrder.paid.is_(True))
            .all()
        )

    @staticmethod
    def expenses_in(db: Session, year: int, month: Optional[int] = None) -> list[Expense]:
        if month:
            start = date(year, month, 1)
            end = date(year, month, calendar.monthrange(year, month)[1])
        else:
            start, end = date(year, 1, 1), date(year, 12, 31)
        return (
            db.query(Expense)
            .filter(Expense.date >= start, Expense.date <= end)
            .order_by(Expense.date.desc(), Expense.id.desc())
            .all()
        )
