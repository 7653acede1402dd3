from itertools import product

import pytest

from app.domain.orders.status import (
    FulfillmentType,
    OrderStatus,
    can_transition,
    ensure_transition,
    fulfillment_from_db,
    fulfillment_to_db,
    status_from_db,
    status_to_db,
)
from app.shared.errors import ConflictError

LEGAL = {
    (OrderStatus.PENDING, OrderStatus.APPROVED),
    (OrderStatus.PENDING, OrderStatus.REJECTED),
}


@pytest.mark.parametrize("current, new", list(product(OrderStatus, OrderStatus)))
def test_only_pending_can_move_forward(current, new):
    assert can_transition(current, new) is ((current, new) in LEGAL)


@pytest.mark.parametrize("status", list(OrderStatus))
def test_self_transition_is_illegal(status):
    assert not can_transition(status, status)


def test_illegal_transition_raises_conflict():
    with pytest.raises(ConflictError) as exc_info:
        ensure_transition(OrderStatus.APPROVED, OrderStatus.REJECTED)
    assert exc_info.value.status_code == 409
    assert "APPROVED" in exc_info.value.message
    assert "REJECTED" in exc_info.value.message


def test_legal_transition_passes():
    ensure_transition(OrderStatus.PENDING, OrderStatus.APPROVED)


def test_database_mapping_is_explicit():
    for status in OrderStatus:
        assert status_from_db(status_to_db(status)) is status
    for fulfillment in FulfillmentType:
        assert fulfillment_from_db(fulfillment_to_db(fulfillment)) is fulfillment

    with pytest.raises(ValueError):
        status_from_db("CANCELLED")
    with pytest.raises(ValueError):
        fulfillment_from_db("SHIPPING")
