"""Ledger repository - expenses and settings"""

import calendar
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Expense, Setting


class LedgerRepository:
    @staticmethod
    def list_expenses(db: Session, year: Optional[int] = None, month: Optional[int] = None) -> list[Expense]:
        query = db.query(Expense)
        if year:
            if month:
                start = date(year, month, 1)
                end = date(year, month, calendar.monthrange(year, month)[1])
            else:
                start, end = date(year, 1, 1), date(year, 12, 31)
            query = query.filter(Expense.date >= start, Expense.date <= end)
        return query.order_by(Expense.date.desc(), Expense.id.desc()).all()

    @staticmethod
    def get_expense(db: Session, expense_id: int) -> Optional[Expense]:
        return db.query(Expense).filter(Expense.id == expense_id).first()

    @staticmethod
    def create_expense(db: Session, **kwargs) -> Expense:
        expense = Expense(**kwargs)
        db.add(expense)
        db.commit()
        db.refresh(expense)
        return expense

    @staticmethod
    def get_settings(db: Session) -> dict[str, Optional[str]]:
        return {row.key: row.value for row in db.query(Setting).order_by(Setting.key.asc())}

    @staticmethod
    def upsert_settings(db: Session, values: dict[str, Optional[str]]) -> None:
        for key, value in values.items():
            row = db.query(Setting).filter(Setting.key == key).first()
            if row is None:
                db.add(Setting(key=key, value=value))
            else:
                row.value = value
        db.commit()
