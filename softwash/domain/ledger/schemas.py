"""Ledger schemas - expenses and key/value settings"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ExpenseCreate(BaseModel):
    date: datetime.date
    category: str = Field(min_length=1, max_length=100)
    amount: float = Field(ge=0)
    notes: Optional[str] = None


class ExpenseResponse(BaseModel):
    id: int
    date: datetime.date
    category: str
    amount: float
    notes: Optional[str] = None
    created_at: Optional[datetime.datetime] = None

    class Config:
        from_attributes = True
