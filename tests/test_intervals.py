from itertools import combinations

import pytest

from app.shared.intervals import Interval, find_overlap, overlaps


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (Interval("09:00", "12:00"), Interval("11:00", "13:00"), True),
        (Interval("09:00", "12:00"), Interval("12:00", "15:00"), False),  # touching
        (Interval("12:00", "15:00"), Interval("09:00", "12:00"), False),
        (Interval("09:00", "18:00"), Interval("10:00", "11:00"), True),  # containment
        (Interval("09:00", "10:00"), Interval("09:00", "10:00"), True),
        (Interval("08:00", "09:00"), Interval("10:00", "11:00"), False),
    ],
)
def test_overlaps_is_half_open(a, b, expected):
    assert overlaps(a, b) is expected
    assert overlaps(b, a) is expected


def test_back_to_back_day_has_no_overlapping_pair():
    day = [Interval("08:00", "10:00"), Interval("10:00", "12:00"), Interval("12:00", "14:30")]
    for a, b in combinations(day, 2):
        assert not overlaps(a, b)


def test_find_overlap_returns_first_clash():
    existing = [Interval("08:00", "09:00"), Interval("09:30", "11:00"), Interval("10:00", "12:00")]
    assert find_overlap(Interval("10:30", "10:45"), existing) == Interval("09:30", "11:00")
    assert find_overlap(Interval("12:00", "13:00"), existing) is None
    assert find_overlap(Interval("12:00", "13:00"), []) is None


def test_find_overlap_with_key():
    slots = [{"id": "a", "window": ("09:00", "12:00")}]
    clash = find_overlap(Interval("11:00", "13:00"), slots, key=lambda s: Interval(*s["window"]))
    assert clash["id"] == "a"
