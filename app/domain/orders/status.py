"""
Order lifecycle state machine

Order statuses: PENDING → APPROVED | REJECTED
- PENDING is the only initial state; every order is created in it
- APPROVED and REJECTED are terminal

The ORM stores statuses as plain strings. Conversion happens only through
status_from_db / status_to_db so an unexpected database value fails loudly
instead of leaking into the domain.
"""

from enum import Enum

from ...shared.errors import ConflictError


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class FulfillmentType(str, Enum):
    PICKUP = "PICKUP"
    DELIVERY = "DELIVERY"


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.APPROVED, OrderStatus.REJECTED}),
    OrderStatus.APPROVED: frozenset(),
    OrderStatus.REJECTED: frozenset(),
}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """Validate if an order status transition is allowed"""
    return new in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: OrderStatus, new: OrderStatus) -> None:
    if not can_transition(current, new):
        raise ConflictError(
            f"Invalid status transition: {current.value} → {new.value}"
        )


def status_from_db(value: str) -> OrderStatus:
    if value == "PENDING":
        return OrderStatus.PENDING
    if value == "APPROVED":
        return OrderStatus.APPROVED
    if value == "REJECTED":
        return OrderStatus.REJECTED
    raise ValueError(f"Unknown order status stored in database: {value!r}")


def status_to_db(status: OrderStatus) -> str:
    if status is OrderStatus.PENDING:
        return "PENDING"
    if status is OrderStatus.APPROVED:
        return "APPROVED"
    if status is OrderStatus.REJECTED:
        return "REJECTED"
    raise ValueError(f"Unknown order status: {status!r}")


def fulfillment_from_db(value: str) -> FulfillmentType:
    if value == "PICKUP":
        return FulfillmentType.PICKUP
    if value == "DELIVERY":
        return FulfillmentType.DELIVERY
    raise ValueError(f"Unknown fulfillment type stored in database: {value!r}")


def fulfillment_to_db(fulfillment_type: FulfillmentType) -> str:
    if fulfillment_type is FulfillmentType.PICKUP:
        return "PICKUP"
    if fulfillment_type is FulfillmentType.DELIVERY:
        return "DELIVERY"
    raise ValueError(f"Unknown fulfillment type: {fulfillment_type!r}")
