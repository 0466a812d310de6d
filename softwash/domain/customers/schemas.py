"""Customer domain schemas - Pydantic models for validation"""

import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email


class CustomerCreate(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        if v:
            return validate_email(v)
        return None


class CustomerNotesUpdate(BaseModel):
    notes: Optional[str] = None


class CustomerResponse(BaseModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime.datetime] = None

    class Config:
        from_attributes = True


class CustomerListItem(CustomerResponse):
    booking_count: int = 0
    last_service_date: Optional[datetime.date] = None


class CustomerBooking(BaseModel):
    id: int
    date: datetime.date
    time: str
    duration: int
    service: Optional[str] = None
    price: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class CustomerWorkOrder(BaseModel):
    id: int
    booking_id: Optional[int] = None
    service: Optional[str] = None
    price: Optional[str] = None
    job_complete: bool
    invoiced: bool
    invoice_paid: bool
    paid: bool
    paid_at: Optional[datetime.datetime] = None
    payment_method: Optional[str] = None

    class Config:
        from_attributes = True


class CustomerDetail(CustomerResponse):
    bookings: list[CustomerBooking] = []
    work_orders: list[CustomerWorkOrder] = []
