"""Pickup slot service - Weekly pickup windows with overlap prevention

Among the ACTIVE slots of one store and weekday no two windows may overlap.
Windows are half-open, so 09:00-12:00 and 12:00-15:00 can coexist. Inactive
slots are kept for history and take no part in the check.

The check reads then writes without a database exclusion constraint, so two
concurrent requests for colliding windows can both pass it.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import StorePickupSlot
from ...shared.errors import BadRequestError, ConflictError, NotFoundError
from ...shared.intervals import Interval, find_overlap
from ...shared.validators import is_valid_time
from ..catalog.repository import CatalogRepository
from .repository import PickupSlotRepository

logger = logging.getLogger(__name__)

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def slot_interval(slot: StorePickupSlot) -> Interval:
    return Interval(slot.start_time, slot.end_time)


def slot_label(slot: StorePickupSlot) -> str:
    return f"{slot.start_time} – {slot.end_time}"


def validate_day_of_week(day_of_week: Optional[int]) -> None:
    if day_of_week is None:
        return
    if isinstance(day_of_week, bool) or not isinstance(day_of_week, int) or not 0 <= day_of_week <= 6:
        raise BadRequestError("dayOfWeek must be an integer between 0 (Sunday) and 6 (Saturday)")


class PickupSlotService:
    """Service layer for pickup slot business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PickupSlotRepository()
        self.catalog_repo = CatalogRepository()

    def list_slots(
        self, store_id: str, day_of_week: Optional[int] = None, active_only: bool = False
    ) -> list[StorePickupSlot]:
        validate_day_of_week(day_of_week)
        return self.repo.find_by_store(self.db, store_id, day_of_week, active_only)

    def list_public_slots(self, slug: str, day_of_week: Optional[int] = None) -> list[StorePickupSlot]:
        """Active slots of a store found by its public slug"""
        validate_day_of_week(day_of_week)
        store = self.catalog_repo.find_store_by_slug(self.db, slug)
        if not store:
            raise NotFoundError("Store not found")
        return self.repo.find_by_store(self.db, store.id, day_of_week, active_only=True)

    def create_slot(
        self, store_id: str, day_of_week: int, start_time: str, end_time: str
    ) -> StorePickupSlot:
        """
        Create an active pickup slot.

        Raises:
            BadRequestError: Invalid weekday, time format, or end not after start
            ConflictError: The window overlaps an active slot of the same day
        """
        validate_day_of_week(day_of_week)
        if not is_valid_time(start_time):
            raise BadRequestError("startTime must be in HH:mm format (e.g. '09:00')")
        if not is_valid_time(end_time):
            raise BadRequestError("endTime must be in HH:mm format (e.g. '18:00')")
        if end_time <= start_time:
            raise BadRequestError("endTime must be strictly after startTime")

        candidate = Interval(start_time, end_time)
        active = self.repo.find_by_store(self.db, store_id, day_of_week, active_only=True)
        clash = find_overlap(candidate, active, key=slot_interval)
        if clash:
            logger.warning(
                f"Rejected slot {start_time}-{end_time} on day {day_of_week} for store {store_id}: "
                f"overlaps {clash.start_time}-{clash.end_time}"
            )
            raise ConflictError(
                f"The slot {start_time}–{end_time} overlaps with an existing active slot "
                f"({clash.start_time}–{clash.end_time}) on {DAY_NAMES[day_of_week]}"
            )

        slot = self.repo.create_slot(self.db, store_id, day_of_week, start_time, end_time)
        logger.info(f"Created pickup slot {slot.id} ({DAY_NAMES[day_of_week]} {slot_label(slot)})")
        return slot

    def toggle_active(self, slot_id: str, store_id: str, is_active: bool) -> StorePickupSlot:
        """
        Activate or deactivate a slot. Reactivation re-checks overlaps against
        the other active slots of the same day.
        """
        slot = self.repo.find_by_id(self.db, slot_id, store_id)
        if not slot:
            raise NotFoundError("Pickup slot not found")

        if is_active and not slot.is_active:
            others = [
                s
                for s in self.repo.find_by_store(self.db, store_id, slot.day_of_week, active_only=True)
                if s.id != slot.id
            ]
            clash = find_overlap(slot_interval(slot), others, key=slot_interval)
            if clash:
                logger.warning(f"Rejected reactivation of slot {slot.id}: overlaps slot {clash.id}")
                raise ConflictError(
                    f"Cannot reactivate: slot {slot.start_time}–{slot.end_time} would overlap "
                    f"with active slot {clash.start_time}–{clash.end_time}"
                )

        slot = self.repo.set_active(self.db, slot, is_active)
        logger.info(f"Pickup slot {slot.id} {'activated' if is_active else 'deactivated'}")
        return slot

    def get_active_slot(self, slot_id: str, store_id: str) -> Optional[StorePickupSlot]:
        """Used by order placement; None when absent, foreign or inactive"""
        slot = self.repo.find_by_id(self.db, slot_id, store_id)
        if slot is None or not slot.is_active:
            return None
        return slot
