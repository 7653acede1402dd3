"""Pickup slot router - Admin slot management and public slot listing"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import AdminPrincipal, get_current_admin
from ...database import get_db
from ...models import StorePickupSlot
from ...rate_limiter import public_lookup_limit
from .schemas import (
    PickupSlotCreate,
    PickupSlotListResponse,
    PickupSlotResponse,
    PickupSlotToggle,
)
from .service import PickupSlotService, slot_label

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pickup-slots", tags=["Pickup Slots"])
public_router = APIRouter(prefix="/catalog", tags=["Catalog"])


def get_pickup_slot_service(db: Session = Depends(get_db)) -> PickupSlotService:
    """Dependency injection for PickupSlotService"""
    return PickupSlotService(db)


def _to_response(slot: StorePickupSlot) -> PickupSlotResponse:
    return PickupSlotResponse(
        id=slot.id,
        dayOfWeek=slot.day_of_week,
        startTime=slot.start_time,
        endTime=slot.end_time,
        label=slot_label(slot),
        isActive=slot.is_active,
    )


@router.get("", response_model=PickupSlotListResponse)
async def list_pickup_slots(
    dayOfWeek: Optional[int] = Query(None),
    activeOnly: bool = Query(False),
    admin: AdminPrincipal = Depends(get_current_admin),
    service: PickupSlotService = Depends(get_pickup_slot_service),
):
    """List the store's slots ordered by weekday then start time"""
    slots = service.list_slots(admin.store_id, dayOfWeek, activeOnly)
    return PickupSlotListResponse(slots=[_to_response(s) for s in slots], dayOfWeek=dayOfWeek)


@router.post("", response_model=PickupSlotResponse, status_code=status.HTTP_201_CREATED)
async def create_pickup_slot(
    data: PickupSlotCreate,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: PickupSlotService = Depends(get_pickup_slot_service),
):
    slot = service.create_slot(admin.store_id, data.dayOfWeek, data.startTime, data.endTime)
    return _to_response(slot)


@router.patch("/{slot_id}", response_model=PickupSlotResponse)
async def toggle_pickup_slot(
    slot_id: str,
    data: PickupSlotToggle,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: PickupSlotService = Depends(get_pickup_slot_service),
):
    """Activate or deactivate a slot"""
    return _to_response(service.toggle_active(slot_id, admin.store_id, data.isActive))


@public_router.get(
    "/{slug}/pickup-slots",
    response_model=PickupSlotListResponse,
    dependencies=[Depends(public_lookup_limit)],
)
async def list_public_pickup_slots(
    slug: str,
    dayOfWeek: Optional[int] = Query(None),
    service: PickupSlotService = Depends(get_pickup_slot_service),
):
    """Active pickup windows for the catalog checkout (public, no auth)"""
    slots = service.list_public_slots(slug, dayOfWeek)
    return PickupSlotListResponse(slots=[_to_response(s) for s in slots], dayOfWeek=dayOfWeek)
