from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(50), nullable=True, index=True)
    address = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    bookings = relationship("Booking", back_populates="customer")
    work_orders = relationship("WorkOrder", back_populates="customer")


class Booking(Base):
    """One visit occupying `duration` consecutive slots starting at `time` on `date`"""

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)  # HH:MM, one of the daily slots
    duration = Column(Integer, nullable=False, default=1)  # slot units
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    service = Column(String(255), nullable=True)
    price = Column(String(50), nullable=True)  # display string, e.g. "$575.00"
    notes = Column(Text, nullable=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    customer = relationship("Customer", back_populates="bookings")
    work_order = relationship("WorkOrder", back_populates="booking", uselist=False)

    @property
    def work_order_id(self):
        return self.work_order.id if self.work_order else None


class Block(Base):
    """Admin-imposed unavailability for one slot, or the whole day when time == "all" """

    __tablename__ = "blocks"
    __table_args__ = (UniqueConstraint("date", "time", name="uq_blocks_date_time"),)

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)
    reason = Column(String(255), nullable=True, default="Admin blocked")
    created_at = Column(DateTime, server_default=func.now())


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, nullable=False, index=True)
    label = Column(String(255), nullable=False)
    category = Column(String(50), nullable=False)  # house, deck, fence, rv, boat, house-addon, rv-addon
    parent_key = Column(String(100), nullable=True)  # add-ons point at their base variant
    price = Column(Integer, nullable=False, default=0)
    duration = Column(Float, nullable=False, default=1.0)  # hours, may be fractional
    sort_order = Column(Integer, nullable=False, default=0)
    bookable_group = Column(String(50), nullable=True)  # one selection per group in the calculator
    active = Column(Boolean, nullable=False, default=True)


class Discount(Base):
    __tablename__ = "discounts"
    __table_args__ = (
        CheckConstraint("percent >= 0 AND percent <= 100", name="ck_discounts_percent"),
    )

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, nullable=False, index=True)
    label = Column(String(255), nullable=False)
    percent = Column(Float, nullable=False, default=0)
    auto_apply = Column(Boolean, nullable=False, default=False)
    min_services = Column(Integer, nullable=True)  # threshold for auto-apply tiers
    sort_order = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)


class PricingSchedule(Base):
    """A pending change to one Service or Discount field, applied once its date arrives"""

    __tablename__ = "pricing_schedule"
    __table_args__ = (
        CheckConstraint(
            "(service_id IS NULL) <> (discount_id IS NULL)", name="ck_pricing_schedule_target"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=True)
    discount_id = Column(Integer, ForeignKey("discounts.id", ondelete="CASCADE"), nullable=True)
    field = Column(String(50), nullable=False)
    new_value = Column(String(255), nullable=False)
    effective_date = Column(Date, nullable=False, index=True)
    applied = Column(Boolean, nullable=False, default=False, index=True)
    applied_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    service = relationship("Service")
    discount = relationship("Discount")


class WorkOrder(Base):
    __tablename__ = "work_orders"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    service = Column(String(255), nullable=True)
    price = Column(String(50), nullable=True)

    # Fulfillment milestones, normally advanced in this order
    job_complete = Column(Boolean, nullable=False, default=False)
    invoiced = Column(Boolean, nullable=False, default=False)
    invoice_paid = Column(Boolean, nullable=False, default=False)
    paid = Column(Boolean, nullable=False, default=False)
    paid_at = Column(DateTime, nullable=True)

    payment_method = Column(String(50), nullable=True)  # cash, check, card, venmo, zelle
    completion_notes = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)
    mileage = Column(Float, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    booking = relationship("Booking", back_populates="work_order")
    customer = relationship("Customer", back_populates="work_orders")


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    category = Column(String(100), nullable=False)
    amount = Column(Float, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
