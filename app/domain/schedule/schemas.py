"""Schedule schemas - Pydantic models for resolved store availability"""

from pydantic import BaseModel


class ScheduleDay(BaseModel):
    """One resolved calendar day

    isDefault is true when the day's value equals the default weekly rule,
    whether or not an override row is stored for it.
    """

    date: str
    isOpen: bool
    isDefault: bool
    isEditable: bool


class ScheduleResponse(BaseModel):
    days: list[ScheduleDay]


class DayAvailabilityUpdate(BaseModel):
    isOpen: bool


class DayAvailabilityResponse(BaseModel):
    day: ScheduleDay
