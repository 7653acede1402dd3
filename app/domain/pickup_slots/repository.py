"""Pickup slot repository - Database operations for weekly pickup windows"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import StorePickupSlot


class PickupSlotRepository:
    """Repository for pickup slot database operations"""

    @staticmethod
    def find_by_id(db: Session, slot_id: str, store_id: str) -> Optional[StorePickupSlot]:
        return (
            db.query(StorePickupSlot)
            .filter(StorePickupSlot.id == slot_id, StorePickupSlot.store_id == store_id)
            .first()
        )

    @staticmethod
    def find_by_store(
        db: Session,
        store_id: str,
        day_of_week: Optional[int] = None,
        active_only: bool = False,
    ) -> list[StorePickupSlot]:
        """Get slots ordered by (day_of_week, start_time)"""
        query = db.query(StorePickupSlot).filter(StorePickupSlot.store_id == store_id)
        if day_of_week is not None:
            query = query.filter(StorePickupSlot.day_of_week == day_of_week)
        if active_only:
            query = query.filter(StorePickupSlot.is_active.is_(True))
        return query.order_by(
            StorePickupSlot.day_of_week.asc(), StorePickupSlot.start_time.asc()
        ).all()

    @staticmethod
    def create_slot(
        db: Session, store_id: str, day_of_week: int, start_time: str, end_time: str
    ) -> StorePickupSlot:
        slot = StorePickupSlot(
            store_id=store_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            is_active=True,
        )
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot

    @staticmethod
    def set_active(db: Session, slot: StorePickupSlot, is_active: bool) -> StorePickupSlot:
        slot.is_active = is_active
        db.commit()
        db.refresh(slot)
        return slot
