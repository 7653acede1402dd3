from itertools import combinations

import pytest

from app.domain.pickup_slots.service import PickupSlotService
from app.shared.errors import BadRequestError, ConflictError, NotFoundError

MONDAY = 1


def test_touching_slots_are_accepted_and_overlap_rejected(session, seed):
    with session() as db:
        service = PickupSlotService(db)
        service.create_slot(seed.store_id, MONDAY, "09:00", "12:00")
        service.create_slot(seed.store_id, MONDAY, "12:00", "15:00")

        with pytest.raises(ConflictError) as exc_info:
            service.create_slot(seed.store_id, MONDAY, "11:00", "13:00")
        assert "09:00–12:00" in exc_info.value.message
        assert "11:00–13:00" in exc_info.value.message

        # Same window on another day or in another store is fine
        service.create_slot(seed.store_id, MONDAY + 1, "11:00", "13:00")
        service.create_slot(seed.other_store_id, MONDAY, "11:00", "13:00")


@pytest.mark.parametrize(
    "day, start, end",
    [
        (7, "09:00", "12:00"),
        (-1, "09:00", "12:00"),
        (MONDAY, "9:00", "12:00"),
        (MONDAY, "09:00", "24:00"),
        (MONDAY, "12:00", "12:00"),
        (MONDAY, "13:00", "12:00"),
        (MONDAY, "09:00\n", "12:00"),
    ],
)
def test_create_rejects_invalid_input(session, seed, day, start, end):
    with session() as db:
        with pytest.raises(BadRequestError):
            PickupSlotService(db).create_slot(seed.store_id, day, start, end)


def test_inactive_slots_do_not_block(session, seed):
    with session() as db:
        service = PickupSlotService(db)
        morning = service.create_slot(seed.store_id, MONDAY, "09:00", "12:00")
        service.toggle_active(morning.id, seed.store_id, False)

        service.create_slot(seed.store_id, MONDAY, "10:00", "11:00")

        with pytest.raises(ConflictError) as exc_info:
            service.toggle_active(morning.id, seed.store_id, True)
        assert "Cannot reactivate" in exc_info.value.message


def test_reactivation_without_conflict(session, seed):
    with session() as db:
        service = PickupSlotService(db)
        slot = service.create_slot(seed.store_id, MONDAY, "09:00", "12:00")
        service.create_slot(seed.store_id, MONDAY, "12:00", "13:00")

        assert service.toggle_active(slot.id, seed.store_id, False).is_active is False
        assert service.toggle_active(slot.id, seed.store_id, True).is_active is True


def test_toggle_is_tenant_scoped(session, seed):
    with session() as db:
        service = PickupSlotService(db)
        slot = service.create_slot(seed.store_id, MONDAY, "09:00", "12:00")
        with pytest.raises(NotFoundError):
            service.toggle_active(slot.id, seed.other_store_id, False)
        with pytest.raises(NotFoundError):
            service.toggle_active("missing", seed.store_id, False)


def test_list_is_ordered_and_active_pairs_never_overlap(session, seed):
    with session() as db:
        service = PickupSlotService(db)
        service.create_slot(seed.store_id, 3, "14:00", "16:00")
        service.create_slot(seed.store_id, MONDAY, "13:00", "14:00")
        service.create_slot(seed.store_id, MONDAY, "08:00", "10:00")
        service.create_slot(seed.store_id, MONDAY, "10:00", "13:00")
        for start, end in [("09:00", "11:00"), ("12:30", "13:30"), ("07:00", "17:00")]:
            with pytest.raises(ConflictError):
                service.create_slot(seed.store_id, MONDAY, start, end)

        slots = service.list_slots(seed.store_id)
        assert [(s.day_of_week, s.start_time) for s in slots] == [
            (1, "08:00"),
            (1, "10:00"),
            (1, "13:00"),
            (3, "14:00"),
        ]

        monday = service.list_slots(seed.store_id, MONDAY, active_only=True)
        for a, b in combinations(monday, 2):
            assert not (a.start_time < b.end_time and b.start_time < a.end_time)


def test_pickup_slot_api(client):
    resp = client.post("/pickup-slots", json={"dayOfWeek": 1, "startTime": "09:00", "endTime": "12:00"})
    assert resp.status_code == 201
    slot_a = resp.json()
    assert slot_a["label"] == "09:00 – 12:00"
    assert slot_a["isActive"] is True

    resp = client.post("/pickup-slots", json={"dayOfWeek": 1, "startTime": "12:00", "endTime": "15:00"})
    assert resp.status_code == 201

    resp = client.post("/pickup-slots", json={"dayOfWeek": 1, "startTime": "11:00", "endTime": "13:00"})
    assert resp.status_code == 409
    assert "09:00–12:00" in resp.json()["detail"]

    resp = client.post("/pickup-slots", json={"dayOfWeek": 9, "startTime": "11:00", "endTime": "13:00"})
    assert resp.status_code == 400

    resp = client.patch(f"/pickup-slots/{slot_a['id']}", json={"isActive": False})
    assert resp.status_code == 200
    assert resp.json()["isActive"] is False

    assert client.patch("/pickup-slots/missing", json={"isActive": False}).status_code == 404

    listed = client.get("/pickup-slots", params={"dayOfWeek": 1}).json()["slots"]
    assert [s["startTime"] for s in listed] == ["09:00", "12:00"]

    public = client.get("/catalog/doce-lar/pickup-slots", params={"dayOfWeek": 1})
    assert public.status_code == 200
    assert [s["startTime"] for s in public.json()["slots"]] == ["12:00"]

    assert client.get("/catalog/nao-existe/pickup-slots").status_code == 404
    assert client.get("/catalog/doce-lar/pickup-slots", params={"dayOfWeek": 7}).status_code == 400
