"""Pickup slot schemas - Pydantic models for recurring pickup windows"""

from typing import Optional

from pydantic import BaseModel


class PickupSlotCreate(BaseModel):
    """Schema for creating a weekly pickup window (dayOfWeek 0 = Sunday)"""

    dayOfWeek: int
    startTime: str
    endTime: str


class PickupSlotToggle(BaseModel):
    isActive: bool


class PickupSlotResponse(BaseModel):
    id: str
    dayOfWeek: int
    startTime: str
    endTime: str
    label: str
    isActive: bool


class PickupSlotListResponse(BaseModel):
    slots: list[PickupSlotResponse]
    dayOfWeek: Optional[int] = None
