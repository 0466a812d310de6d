"""Work order repository - Database operations for work orders"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import WorkOrder


class WorkOrderRepository:
    """Repository for work order database operations"""

    @staticmethod
    def list_work_orders(db: Session) -> list[WorkOrder]:
        return (
            db.query(WorkOrder)
            .options(joinedload(WorkOrder.booking), joinedload(WorkOrder.customer))
            .order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc())
            .all()
        )

    @staticmethod
    def get_work_order(db: Session, work_order_id: int) -> Optional[WorkOrder]:
        return (
            db.query(WorkOrder)
            .options(joinedload(WorkOrder.booking), joinedload(WorkOrder.customer))
            .filter(WorkOrder.id == work_order_id)
            .first()
        )

    @staticmethod
    def create_work_order(db: Session, **kwargs) -> WorkOrder:
        work_order = WorkOrder(**kwargs)
        db.add(work_order)
        db.commit()
        db.refresh(work_order)
        return work_order
