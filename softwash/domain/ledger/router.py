"""Ledger router - expenses and business settings"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from .repository import LedgerRepository
from .schemas import ExpenseCreate, ExpenseResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin Ledger"], dependencies=[Depends(require_admin)])


@router.get("/settings")
async def get_settings(db: Session = Depends(get_db)):
    """All settings as a flat {key: value} object"""
    return LedgerRepository.get_settings(db)


@router.patch("/settings")
async def update_settings(
    values: dict[str, Union[str, int, float, bool, None]] = Body(...),
    db: Session = Depends(get_db),
):
    cleaned = {}
    for key, value in values.items():
        key = key.strip()
        if not key or len(key) > 100:
            raise HTTPException(status_code=400, detail=f"Invalid setting key: {key!r}")
        cleaned[key] = None if value is None else str(value)

    LedgerRepository.upsert_settings(db, cleaned)
    logger.info(f"⚙️ Updated settings: {', '.join(sorted(cleaned))}")
    return LedgerRepository.get_settings(db)


@router.get("/expenses", response_model=list[ExpenseResponse])
async def list_expenses(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
):
    if month and not year:
        raise HTTPException(status_code=400, detail="month requires year")
    return LedgerRepository.list_expenses(db, year, month)


@router.post("/expenses", response_model=ExpenseResponse)
async def create_expense(data: ExpenseCreate, db: Session = Depends(get_db)):
    expense = LedgerRepository.create_expense(
        db, date=data.date, category=data.category.strip(), amount=data.amount, notes=data.notes
    )
    logger.info(f"🧾 Recorded expense {expense.id}: {expense.category} ${expense.amount:.2f}")
    return expense


@router.delete("/expenses/{expense_id}")
async def delete_expense(expense_id: int, db: Session = Depends(get_db)):
    expense = LedgerRepository.get_expense(db, expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    db.delete(expense)
    db.commit()
    return {"success": True}
