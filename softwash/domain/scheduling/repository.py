"""Booking and block repository - Database operations for the schedule"""

from datetime import date
from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from ...models import Block, Booking, WorkOrder


class BookingRepository:
    """Repository for booking and block database operations"""

    @staticmethod
    def bookings_on(db: Session, day: date) -> list[Booking]:
        return db.query(Booking).filter(Booking.date == day).all()

    @staticmethod
    def bookings_between(db: Session, start: date, end: date) -> list[Booking]:
        """Bookings with start <= date <= end"""
        return db.query(Booking).filter(Booking.date >= start, Booking.date <= end).all()

    @staticmethod
    def blocks_on(db: Session, day: date) -> list[Block]:
        return db.query(Block).filter(Block.date == day).all()

    @staticmethod
    def blocks_between(db: Session, start: date, end: date) -> list[Block]:
        return db.query(Block).filter(Block.date >= start, Block.date <= end).all()

    @staticmethod
    def list_bookings(db: Session) -> list[Booking]:
        return db.query(Booking).order_by(Booking.date.asc(), Booking.time.asc()).all()

    @staticmethod
    def list_blocks(db: Session) -> list[Block]:
        return db.query(Block).order_by(Block.date.asc(), Block.time.asc()).all()

    @staticmethod
    def get_booking(db: Session, booking_id: int) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def find_bookings_at(db: Session, day: date, time: str) -> list[Booking]:
        return db.query(Booking).filter(Booking.date == day, Booking.time == time).all()

    @staticmethod
    def get_block(db: Session, day: date, time: str) -> Optional[Block]:
        return db.query(Block).filter(Block.date == day, Block.time == time).first()

    @staticmethod
    def add_block(db: Session, day: date, time: str, reason: str = "Admin blocked") -> Block:
        block = Block(date=day, time=time, reason=reason)
        db.add(block)
        return block

    @staticmethod
    def work_order_for(db: Session, booking_id: int) -> Optional[WorkOrder]:
        return db.query(WorkOrder).filter(WorkOrder.booking_id == booking_id).first()

    @staticmethod
    def lock_date(db: Session, day: date) -> None:
        """
        Transaction-scoped advisory lock on one calendar day (PostgreSQL only).
        Concurrent writers for the same day queue here until the holder commits.
        """
        if db.get_bind().dialect.name != "postgresql":
            return
        db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": day.toordinal()})
