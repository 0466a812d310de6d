"""Work order domain schemas - Pydantic models for validation"""

import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

PAYMENT_METHODS = ("cash", "check", "card", "venmo", "zelle", "other")


class WorkOrderCreate(BaseModel):
    """Standalone work order: an existing customer id or inline contact details"""

    customer_id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    service: str
    price: Optional[str] = None
    admin_notes: Optional[str] = None


class WorkOrderUpdate(BaseModel):
    """Milestone flags and free-text fields; omitted fields are left alone"""

    job_complete: Optional[bool] = None
    invoiced: Optional[bool] = None
    invoice_paid: Optional[bool] = None
    paid: Optional[bool] = None
    payment_method: Optional[str] = None
    completion_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    mileage: Optional[float] = None
    price: Optional[str] = None

    @field_validator("payment_method")
    @classmethod
    def validate_payment_method(cls, v):
        if v:
            v = v.strip().lower()
            if v not in PAYMENT_METHODS:
                raise ValueError(f"payment_method must be one of {', '.join(PAYMENT_METHODS)}")
        return v or None

    @field_validator("mileage")
    @classmethod
    def validate_mileage(cls, v):
        if v is not None and v < 0:
            raise ValueError("mileage must be zero or more")
        return v


class WorkOrderResponse(BaseModel):
    id: int
    invoice_number: str
    booking_id: Optional[int] = None
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    address: Optional[str] = None
    service: Optional[str] = None
    price: Optional[str] = None
    booking_date: Optional[datetime.date] = None
    booking_time: Optional[str] = None
    job_complete: bool
    invoiced: bool
    invoice_paid: bool
    paid: bool
    paid_at: Optional[datetime.datetime] = None
    payment_method: Optional[str] = None
    completion_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    mileage: Optional[float] = None
    created_at: Optional[datetime.datetime] = None


class WorkOrderUpdateResponse(BaseModel):
    success: bool
    work_order: WorkOrderResponse
    email_sent: Optional[str] = None
    email_error: Optional[str] = None
