from datetime import date

import pytest

from app.domain.schedule.service import ScheduleService
from app.shared import dates
from app.shared.errors import BadRequestError, UnprocessableEntityError

TODAY = date(2024, 3, 1)  # Friday


@pytest.fixture(autouse=True)
def fixed_today(monkeypatch):
    monkeypatch.setattr(dates, "today_utc", lambda: TODAY)


def test_default_week(session, seed):
    with session() as db:
        days = ScheduleService(db).resolve(seed.store_id, "2024-03-04", "2024-03-10")

    assert [d["date"] for d in days] == [f"2024-03-{n:02d}" for n in range(4, 11)]
    assert [d["isOpen"] for d in days] == [True] * 5 + [False] * 2
    assert all(d["isDefault"] for d in days)
    assert all(d["isEditable"] for d in days)


def test_default_window_starts_today(session, seed):
    with session() as db:
        days = ScheduleService(db).resolve(seed.store_id)

    assert len(days) == 60
    assert days[0]["date"] == "2024-03-01"
    assert days[-1]["date"] == "2024-04-29"


def test_past_days_are_not_editable(session, seed):
    with session() as db:
        days = ScheduleService(db).resolve(seed.store_id, "2024-02-28", "2024-03-01")
    assert [d["isEditable"] for d in days] == [False, False, True]


@pytest.mark.parametrize(
    "date_from, date_to",
    [
        ("2024-3-4", "2024-03-10"),
        ("2024-03-04", "10/03/2024"),
        ("2024-02-30", "2024-03-10"),
        ("2024-03-10", "2024-03-04"),
        ("2024-03-01", "2024-05-30"),  # 91 days
    ],
)
def test_resolve_rejects_bad_windows(session, seed, date_from, date_to):
    with session() as db:
        with pytest.raises(BadRequestError):
            ScheduleService(db).resolve(seed.store_id, date_from, date_to)


def test_window_cap_is_checked_before_building_days(session, seed, monkeypatch):
    built = []
    real_date_range = dates.date_range
    monkeypatch.setattr(
        dates, "date_range", lambda start, end: built.append((start, end)) or real_date_range(start, end)
    )
    with session() as db:
        with pytest.raises(BadRequestError):
            ScheduleService(db).resolve(seed.store_id, "0001-01-01", "9999-12-31")
    assert built == []


def test_default_window_stops_at_end_of_calendar(session, seed):
    with session() as db:
        days = ScheduleService(db).resolve(seed.store_id, "9999-12-31")
    assert [d["date"] for d in days] == ["9999-12-31"]


def test_ninety_day_window_is_allowed(session, seed):
    with session() as db:
        assert len(ScheduleService(db).resolve(seed.store_id, "2024-03-01", "2024-05-29")) == 90


def test_override_wins_and_resolve_is_idempotent(session, seed):
    with session() as db:
        service = ScheduleService(db)
        day = service.set_override(seed.store_id, "2024-03-09", True)  # Saturday
        assert day == {"date": "2024-03-09", "isOpen": True, "isDefault": False, "isEditable": True}

        first = service.resolve(seed.store_id, "2024-03-04", "2024-03-10")
        second = service.resolve(seed.store_id, "2024-03-04", "2024-03-10")

    assert first == second
    saturday = next(d for d in first if d["date"] == "2024-03-09")
    assert saturday["isOpen"] is True
    assert saturday["isDefault"] is False


def test_override_is_upserted(session, seed):
    with session() as db:
        service = ScheduleService(db)
        service.set_override(seed.store_id, "2024-03-05", False)
        service.set_override(seed.store_id, "2024-03-05", False)
        assert len(service.repo.find_by_date_range(db, seed.store_id, "2024-03-05", "2024-03-05")) == 1

        tuesday = service.resolve(seed.store_id, "2024-03-05", "2024-03-05")[0]
        assert tuesday["isOpen"] is False


def test_override_matching_default_reports_default(session, seed):
    with session() as db:
        service = ScheduleService(db)
        service.set_override(seed.store_id, "2024-03-06", False)
        day = service.set_override(seed.store_id, "2024-03-06", True)  # Wednesday back to open

        # Value equality with the weekly rule, even though an override row exists
        assert day["isDefault"] is True
        assert service.resolve(seed.store_id, "2024-03-06", "2024-03-06")[0]["isDefault"] is False


def test_set_override_validation(session, seed):
    with session() as db:
        service = ScheduleService(db)
        with pytest.raises(UnprocessableEntityError):
            service.set_override(seed.store_id, "2024-02-29", True)
        with pytest.raises(BadRequestError):
            service.set_override(seed.store_id, "2024-13-01", True)

        # Today is still editable
        assert service.set_override(seed.store_id, "2024-03-01", False)["isOpen"] is False


def test_overrides_are_per_store(session, seed):
    with session() as db:
        service = ScheduleService(db)
        service.set_override(seed.store_id, "2024-03-04", False)
        monday = service.resolve(seed.other_store_id, "2024-03-04", "2024-03-04")[0]
    assert monday == {"date": "2024-03-04", "isOpen": True, "isDefault": True, "isEditable": True}


def test_schedule_api(client):
    resp = client.get("/schedule", params={"from": "2024-03-04", "to": "2024-03-10"})
    assert resp.status_code == 200
    assert [d["isOpen"] for d in resp.json()["days"]] == [True] * 5 + [False] * 2

    resp = client.put("/schedule/2024-03-09", json={"isOpen": True})
    assert resp.status_code == 200
    assert resp.json()["day"]["isDefault"] is False

    resp = client.get("/schedule", params={"from": "2024-03-09", "to": "2024-03-09"})
    assert resp.json()["days"][0]["isOpen"] is True

    assert client.put("/schedule/2024-02-01", json={"isOpen": True}).status_code == 422
    assert client.put("/schedule/not-a-date", json={"isOpen": True}).status_code == 400
    assert client.get("/schedule", params={"from": "2024-03-10", "to": "2024-03-04"}).status_code == 400
