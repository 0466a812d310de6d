"""Pricing domain schemas - Pydantic models for validation"""

import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class ServiceUpdate(BaseModel):
    """Immediate change to one or more fields of a catalog service"""

    price: Optional[int] = None
    duration: Optional[float] = None
    label: Optional[str] = None
    active: Optional[bool] = None
    sort_order: Optional[int] = None


class DiscountUpdate(BaseModel):
    percent: Optional[float] = None
    label: Optional[str] = None
    active: Optional[bool] = None


class ScheduleCreate(BaseModel):
    """A change to apply on `effective_date`; `new_value` is parsed per field"""

    target: Literal["service", "discount"]
    key: str
    field: str
    new_value: str
    effective_date: datetime.date


class ScheduleResponse(BaseModel):
    id: int
    target: str
    key: Optional[str] = None
    field: str
    new_value: str
    effective_date: datetime.date
    applied: bool
    applied_at: Optional[datetime.datetime] = None
    created_at: Optional[datetime.datetime] = None


class QuoteRequest(BaseModel):
    services: list[str] = Field(default_factory=list)
    discounts: list[str] = Field(default_factory=list)


class QuoteLine(BaseModel):
    key: str
    label: str
    price: int
    addon: bool


class QuoteResponse(BaseModel):
    items: list[QuoteLine]
    subtotal: float
    base_count: int
    auto_discount: Optional[str] = None
    auto_percent: float
    manual_percent: float
    total_percent: float
    savings: float
    total: float
    total_duration: int
