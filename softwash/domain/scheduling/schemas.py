"""Scheduling domain schemas - Pydantic models for validation"""

import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from .slots import SLOTS, WHOLE_DAY


class ContactSubmission(BaseModel):
    """
    Public contact form. With appointmentDate and appointmentTime it becomes a
    booking request; without them it is a plain message to the business.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    service: Optional[str] = None
    message: Optional[str] = None
    appointmentDate: Optional[str] = None
    appointmentTime: Optional[str] = None
    totalDuration: Optional[float] = None
    bookingPrice: Optional[str] = None
    bookingNotes: Optional[str] = None

    @property
    def wants_appointment(self) -> bool:
        return bool(self.appointmentDate and self.appointmentTime)


class ContactResponse(BaseModel):
    success: bool
    message: str
    day2Notice: Optional[str] = None


class ManualBookingCreate(BaseModel):
    """Admin calendar entry; same placement rules as online booking"""

    date: datetime.date
    time: str
    service: str
    duration: Optional[float] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    price: Optional[str] = None
    notes: Optional[str] = None


class BlockAction(BaseModel):
    action: Literal["block", "unblock", "cancel"]
    date: datetime.date
    time: str
    reason: Optional[str] = None

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        if v != WHOLE_DAY and v not in SLOTS:
            raise ValueError(f"time must be one of {', '.join(SLOTS)} or '{WHOLE_DAY}'")
        return v


class BookingResponse(BaseModel):
    id: int
    date: datetime.date
    time: str
    duration: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    service: Optional[str] = None
    price: Optional[str] = None
    notes: Optional[str] = None
    customer_id: Optional[int] = None
    work_order_id: Optional[int] = None
    created_at: Optional[datetime.datetime] = None

    class Config:
        from_attributes = True


class BlockResponse(BaseModel):
    id: int
    date: datetime.date
    time: str
    reason: Optional[str] = None

    class Config:
        from_attributes = True


class ScheduleResponse(BaseModel):
    bookings: list[BookingResponse]
    blocked: list[BlockResponse]


class ManualBookingResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    bookings: list[BookingResponse] = []
    day2Notice: Optional[str] = None
