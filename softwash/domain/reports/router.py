"""Reports router - revenue summary and payments ledger"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from .service import payments_ledger, revenue_report

router = APIRouter(
    prefix="/api/admin/reports", tags=["Admin Reports"], dependencies=[Depends(require_admin)]
)


@router.get("/revenue")
async def get_revenue_report(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
):
    """Monthly revenue, expenses and net for a year, with service and customer breakdowns"""
    return revenue_report(db, year or date.today().year, month)


@router.get("/payments")
async def get_payments_ledger(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    method: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return payments_ledger(db, year or date.today().year, month, method)
