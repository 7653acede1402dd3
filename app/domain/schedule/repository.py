"""Schedule repository - Per-date open/closed overrides"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import StoreSchedule


class ScheduleRepository:
    """Repository for store schedule overrides. Dates are YYYY-MM-DD strings"""

    @staticmethod
    def find_by_date_range(db: Session, store_id: str, date_from: str, date_to: str) -> list[StoreSchedule]:
        return (
            db.query(StoreSchedule)
            .filter(
                StoreSchedule.store_id == store_id,
                StoreSchedule.date >= date_from,
                StoreSchedule.date <= date_to,
            )
            .order_by(StoreSchedule.date.asc())
            .all()
        )

    @staticmethod
    def find_by_date(db: Session, store_id: str, day: str) -> Optional[StoreSchedule]:
        return (
            db.query(StoreSchedule)
            .filter(StoreSchedule.store_id == store_id, StoreSchedule.date == day)
            .first()
        )

    @staticmethod
    def upsert(db: Session, store_id: str, day: str, is_open: bool) -> StoreSchedule:
        """Insert or replace the override for (store_id, day)"""
        override = ScheduleRepository.find_by_date(db, store_id, day)
        if override is None:
            try:
                with db.begin_nested():
                    override = StoreSchedule(store_id=store_id, date=day, is_open=is_open)
                    db.add(override)
            except IntegrityError:
                # Concurrent insert for the same date won
                override = ScheduleRepository.find_by_date(db, store_id, day)
                override.is_open = is_open
        else:
            override.is_open = is_open

        db.commit()
        db.refresh(override)
        return override
