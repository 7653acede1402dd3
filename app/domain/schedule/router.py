"""Schedule router - Admin availability calendar"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import AdminPrincipal, get_current_admin
from ...database import get_db
from .schemas import DayAvailabilityResponse, DayAvailabilityUpdate, ScheduleResponse
from .service import ScheduleService

router = APIRouter(prefix="/schedule", tags=["Schedule"])


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    """Dependency injection for ScheduleService"""
    return ScheduleService(db)


@router.get("", response_model=ScheduleResponse)
async def get_schedule(
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    admin: AdminPrincipal = Depends(get_current_admin),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Resolved availability, one entry per date"""
    return ScheduleResponse(days=service.resolve(admin.store_id, date_from, date_to))


@router.put("/{day}", response_model=DayAvailabilityResponse)
async def set_day_availability(
    day: str,
    data: DayAvailabilityUpdate,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: ScheduleService = Depends(get_schedule_service),
):
    return DayAvailabilityResponse(day=service.set_override(admin.store_id, day, data.isOpen))
