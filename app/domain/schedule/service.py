"""Schedule service - Resolves day-by-day availability

Default rule: Monday to Friday open, Saturday and Sunday closed. Only
exceptions are stored. All dates are UTC calendar dates.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ... import config
from ...shared import dates
from ...shared.errors import BadRequestError, UnprocessableEntityError
from ...shared.validators import parse_iso_date
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


def _parse(value: str, field: str) -> date:
    try:
        return parse_iso_date(value)
    except ValueError as e:
        raise BadRequestError(f"Invalid '{field}' date. Expected YYYY-MM-DD") from e


class ScheduleService:
    """Service layer for store schedule business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ScheduleRepository()

    def resolve(
        self, store_id: str, date_from: Optional[str] = None, date_to: Optional[str] = None
    ) -> list[dict]:
        """
        Resolve availability for every date in [date_from, date_to].

        Args:
            date_from: YYYY-MM-DD, defaults to today (UTC)
            date_to: YYYY-MM-DD, defaults to date_from plus the default window

        Raises:
            BadRequestError: Malformed dates, from after to, or window too large
        """
        today = dates.today_utc()
        start = _parse(date_from, "from") if date_from is not None else today
        if date_to is not None:
            end = _parse(date_to, "to")
        else:
            # Clamped at the end of the calendar
            end = dates.add_days_clamped(start, config.SCHEDULE_DEFAULT_WINDOW_DAYS - 1)

        if start > end:
            raise BadRequestError("'from' must be before or equal to 'to'")

        if (end - start).days + 1 > config.SCHEDULE_MAX_WINDOW_DAYS:
            raise BadRequestError(
                f"Schedule window cannot exceed {config.SCHEDULE_MAX_WINDOW_DAYS} days"
            )
        window = dates.date_range(start, end)

        overrides = {
            o.date: o.is_open
            for o in self.repo.find_by_date_range(self.db, store_id, start.isoformat(), end.isoformat())
        }

        days = []
        for day in window:
            key = day.isoformat()
            has_override = key in overrides
            days.append(
                {
                    "date": key,
                    "isOpen": overrides[key] if has_override else dates.default_is_open(day),
                    "isDefault": not has_override,
                    "isEditable": day >= today,
                }
            )
        return days

    def set_override(self, store_id: str, day: str, is_open: bool) -> dict:
        """
        Open or close a single date.

        Raises:
            BadRequestError: Malformed date
            UnprocessableEntityError: The date is before today (UTC)
        """
        parsed = _parse(day, "date")
        today = dates.today_utc()
        if dates.is_in_past(parsed, today):
            logger.warning(f"Rejected schedule change for past date {day} (store {store_id})")
            raise UnprocessableEntityError("Cannot modify availability for a past date")

        stored = self.repo.upsert(self.db, store_id, parsed.isoformat(), is_open)
        logger.info(f"Store {store_id} set {stored.date} to {'open' if stored.is_open else 'closed'}")

        return {
            "date": stored.date,
            "isOpen": stored.is_open,
            # Value equality with the default rule, not absence of the override row
            "isDefault": stored.is_open == dates.default_is_open(parsed),
            "isEditable": parsed >= today,
        }
