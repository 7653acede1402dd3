"""Half-open [start, end) interval overlap checks

Times are fixed-width "HH:mm" strings, so string comparison orders them
correctly. Touching endpoints (one window ends at 12:00, the next starts at
12:00) do not overlap.
"""

from collections.abc import Iterable
from typing import NamedTuple, Optional, TypeVar


class Interval(NamedTuple):
    start: str
    end: str


T = TypeVar("T")


def overlaps(a: Interval, b: Interval) -> bool:
    return a.start < b.end and b.start < a.end


def find_overlap(
    candidate: Interval,
    existing: Iterable[T],
    key=lambda item: item,
) -> Optional[T]:
    """Return the first existing item whose interval overlaps the candidate, if any."""
    for item in existing:
        if overlaps(key(item), candidate):
            return item
    return None
