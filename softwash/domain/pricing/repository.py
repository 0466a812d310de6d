"""Pricing repository - Database operations for services, discounts and scheduled changes"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Discount, PricingSchedule, Service


class PricingRepository:
    """Repository for pricing catalog database operations"""

    @staticmethod
    def active_services(db: Session) -> list[Service]:
        return (
            db.query(Service)
            .filter(Service.active.is_(True))
            .order_by(Service.category.asc(), Service.sort_order.asc(), Service.id.asc())
            .all()
        )

    @staticmethod
    def active_discounts(db: Session) -> list[Discount]:
        return (
            db.query(Discount)
            .filter(Discount.active.is_(True))
            .order_by(Discount.sort_order.asc(), Discount.id.asc())
            .all()
        )

    @staticmethod
    def get_service_by_key(db: Session, key: str) -> Optional[Service]:
        return db.query(Service).filter(Service.key == key).first()

    @staticmethod
    def get_discount_by_key(db: Session, key: str) -> Optional[Discount]:
        return db.query(Discount).filter(Discount.key == key).first()

    @staticmethod
    def count_services(db: Session) -> int:
        return db.query(Service).count()

    @staticmethod
    def list_schedule(db: Session, include_applied: bool = False) -> list[PricingSchedule]:
        query = db.query(PricingSchedule)
        if not include_applied:
            query = query.filter(PricingSchedule.applied.is_(False))
        return query.order_by(PricingSchedule.effective_date.asc(), PricingSchedule.id.asc()).all()

    @staticmethod
    def get_schedule_entry(db: Session, entry_id: int) -> Optional[PricingSchedule]:
        return db.query(PricingSchedule).filter(PricingSchedule.id == entry_id).first()

    @staticmethod
    def due_schedule_entries(db: Session, today: date) -> list[PricingSchedule]:
        """Unapplied rows whose effective date has arrived, oldest first"""
        return (
            db.query(PricingSchedule)
            .filter(PricingSchedule.applied.is_(False), PricingSchedule.effective_date <= today)
            .order_by(PricingSchedule.effective_date.asc(), PricingSchedule.id.asc())
            .all()
        )

    @staticmethod
    def claim_schedule_entry(db: Session, entry_id: int, applied_at: datetime) -> bool:
        """
        Mark one row applied if nobody has yet. The conditional UPDATE takes the
        row lock, so a second sweep blocks until the first commits and then
        matches nothing. Returns False when the row was already claimed.
        """
        claimed = (
            db.query(PricingSchedule)
            .filter(PricingSchedule.id == entry_id, PricingSchedule.applied.is_(False))
            .update({"applied": True, "applied_at": applied_at}, synchronize_session=False)
        )
        return claimed == 1
