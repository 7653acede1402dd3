"""Order service - Public order placement and admin order management

Placement validates everything before the first write: payload shape, store,
WhatsApp number, every line item against the live catalog, then the delivery
zone or pickup slot. Only then does one transaction upsert the customer, take
the next order number and insert the order with its items.

Prices and labels are copied into the items at placement. Nothing reads the
catalog to price an existing order again.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ... import config
from ...models import Customer, Order, OrderItem, Product, Store
from ...shared import dates
from ...shared.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    UnprocessableEntityError,
)
from ...shared.validators import format_whatsapp, normalize_whatsapp, parse_iso_date
from ..catalog.repository import CatalogRepository
from ..customers.repository import CustomerRepository
from ..delivery.service import DeliveryService
from ..pickup_slots.service import PickupSlotService, slot_label
from .repository import OrderRepository
from .schemas import OrderLineInput, OrderUpdate, PlaceOrderRequest
from .status import (
    FulfillmentType,
    OrderStatus,
    fulfillment_from_db,
    fulfillment_to_db,
    status_from_db,
    status_to_db,
)

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

DELIVERY_FIELDS = (
    ("deliveryStreet", "delivery_street"),
    ("deliveryNumber", "delivery_number"),
    ("deliveryNeighborhood", "delivery_neighborhood"),
    ("deliveryCity", "delivery_city"),
    ("deliveryCep", "delivery_cep"),
)


# ============================================================================
# PRICING
# ============================================================================


def _money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS)


def line_total(item: OrderItem) -> Decimal:
    """quantity * unit_price - discount_amount"""
    return (item.quantity * _money(item.unit_price) - _money(item.discount_amount)).quantize(CENTS)


def order_total(items: list[OrderItem]) -> Decimal:
    return sum((line_total(item) for item in items), Decimal("0.00"))


# ============================================================================
# SHARED HELPERS
# ============================================================================


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def clean_notes(notes: Optional[str]) -> Optional[str]:
    notes = _clean(notes)
    return notes[: config.ORDER_NOTES_MAX_LENGTH] if notes else None


def build_shipping_address(street: str, number: str, neighborhood: str, city: str, cep: str) -> str:
    """Display-only address line. Never parse it back into fields"""
    return f"{street}, {number} – {neighborhood} – {city} – CEP {cep}"


def parse_delivery_date(value: Optional[str]) -> datetime:
    """
    Parse and check a delivery date.

    Returns:
        Naive UTC datetime

    Raises:
        BadRequestError: Missing or not ISO 8601
        UnprocessableEntityError: Not strictly in the future
    """
    if not value or not value.strip():
        raise BadRequestError("deliveryDate is required")
    try:
        parsed = dates.to_utc_naive(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except ValueError as e:
        raise BadRequestError("deliveryDate must be a valid ISO 8601 date") from e

    if parsed <= dates.utcnow_naive():
        raise UnprocessableEntityError("deliveryDate must be a future date")
    return parsed


def resolve_items(db: Session, store_id: str, lines: list[OrderLineInput]) -> list[dict]:
    """
    Validate requested lines against the live catalog and freeze their prices.

    Lines are checked in input order and the first invalid one aborts the whole
    request. Reads only.

    Returns:
        Item rows ready to be inserted (product_id, variant_id, product_name,
        variant_label, quantity, unit_price, discount_amount)
    """
    if not lines:
        raise BadRequestError("An order must have at least one item")

    catalog_repo = CatalogRepository()
    resolved = []

    for line in lines:
        if not line.productId or not line.productId.strip():
            raise BadRequestError("Each item must include a productId")
        if line.quantity is None:
            raise BadRequestError("Each item must include a quantity")

        product: Optional[Product] = catalog_repo.find_product(db, line.productId.strip(), store_id)
        if product is None:
            raise UnprocessableEntityError("Product not found or unavailable")
        if not product.is_active:
            raise UnprocessableEntityError(f'"{product.name}" is currently unavailable')

        if line.quantity <= 0:
            raise UnprocessableEntityError(f'Quantity for "{product.name}" must be a positive integer')
        if line.quantity < product.min_quantity:
            raise UnprocessableEntityError(
                f'Minimum quantity for "{product.name}" is {product.min_quantity} '
                f"(received {line.quantity})"
            )

        active_variants = [v for v in product.variants if v.is_active]
        if active_variants:
            if not line.variantId:
                raise UnprocessableEntityError(f'Please select a variant for "{product.name}"')
            variant = next((v for v in active_variants if v.id == line.variantId), None)
            if variant is None:
                raise UnprocessableEntityError(
                    f'Selected variant for "{product.name}" is not available'
                )
            unit_price, variant_id, variant_label = variant.price, variant.id, variant.label
        else:
            if product.price is None:
                raise UnprocessableEntityError(f'"{product.name}" has no available price')
            unit_price, variant_id, variant_label = product.price, None, None

        resolved.append(
            {
                "product_id": product.id,
                "variant_id": variant_id,
                "product_name": product.name,
                "variant_label": variant_label,
                "quantity": line.quantity,
                "unit_price": _money(unit_price),
                "discount_amount": Decimal("0.00"),
            }
        )

    return resolved


# ============================================================================
# PLACEMENT
# ============================================================================


class OrderPlacementService:
    """Public, unauthenticated order placement keyed by store slug"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepository()
        self.catalog_repo = CatalogRepository()
        self.customer_repo = CustomerRepository()
        self.delivery = DeliveryService(db)
        self.pickup_slots = PickupSlotService(db)

    def place_order(self, data: PlaceOrderRequest) -> dict:
        """Validate, price and persist an order. Nothing is written unless every check passes"""

        # 1. Structural validation
        slug = _clean(data.storeSlug)
        if not slug:
            raise BadRequestError("Store slug is required")
        name = _clean(data.customer.name) if data.customer else None
        if not name:
            raise BadRequestError("Customer name is required")
        raw_whatsapp = _clean(data.customer.whatsapp)
        if not raw_whatsapp:
            raise BadRequestError("Customer WhatsApp is required")
        if not data.items:
            raise BadRequestError("An order must have at least one item")
        delivery_date = parse_delivery_date(data.deliveryDate)

        is_delivery = data.fulfillmentType is FulfillmentType.DELIVERY
        if is_delivery:
            for field, _column in DELIVERY_FIELDS:
                if not _clean(getattr(data, field)):
                    raise UnprocessableEntityError(f"{field} is required for delivery orders")

        # 2. Store
        store: Optional[Store] = self.catalog_repo.find_store_by_slug(self.db, slug)
        if not store:
            raise NotFoundError("Store not found")

        # 3. Customer identity
        try:
            whatsapp = normalize_whatsapp(raw_whatsapp)
        except ValueError as e:
            raise UnprocessableEntityError(
                "Invalid WhatsApp number. Use format: (DD) 9XXXX-XXXX"
            ) from e

        # 4. Items, prices frozen here
        items = resolve_items(self.db, store.id, data.items)

        # 5. Fulfillment
        fulfillment = self._fulfillment_fields(store.id, data)

        # 6. One transaction: customer, order number, order, items
        try:
            customer = self._get_or_create_customer(store.id, name, whatsapp)
            order = self.repo.create_order(
                self.db,
                items,
                store_id=store.id,
                customer_id=customer.id,
                order_number=self.repo.next_order_number(self.db, store.id),
                status=status_to_db(OrderStatus.PENDING),
                delivery_date=delivery_date,
                notes=clean_notes(data.notes),
                **fulfillment,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Failed to persist order for store {store.id}", exc_info=True)
            raise

        self.db.refresh(order)
        logger.info(
            f"Order #{order.order_number} ({order.id}) placed for store {store.slug} "
            f"with {len(order.items)} item(s)"
        )
        return self.build_summary(order, store, customer)

    def _fulfillment_fields(self, store_id: str, data: PlaceOrderRequest) -> dict:
        empty = {
            "pickup_time": None,
            "pickup_slot_id": None,
            "delivery_cep": None,
            "delivery_street": None,
            "delivery_number": None,
            "delivery_neighborhood": None,
            "delivery_city": None,
            "shipping_address": None,
        }

        if data.fulfillmentType is FulfillmentType.DELIVERY:
            cep = self.delivery.ensure_deliverable(store_id, data.deliveryCep)
            fields = {column: _clean(getattr(data, field)) for field, column in DELIVERY_FIELDS}
            fields["delivery_cep"] = cep
            return {
                **empty,
                **fields,
                "fulfillment_type": fulfillment_to_db(FulfillmentType.DELIVERY),
                "shipping_address": build_shipping_address(
                    fields["delivery_street"],
                    fields["delivery_number"],
                    fields["delivery_neighborhood"],
                    fields["delivery_city"],
                    cep,
                ),
            }

        pickup_time = _clean(data.pickupTime)
        slot_id = _clean(data.pickupSlotId)
        if slot_id:
            slot = self.pickup_slots.get_active_slot(slot_id, store_id)
            if slot is None:
                raise UnprocessableEntityError("Selected pickup slot is not available")
            pickup_time = pickup_time or slot_label(slot)

        return {
            **empty,
            "fulfillment_type": fulfillment_to_db(FulfillmentType.PICKUP),
            "pickup_time": pickup_time,
            "pickup_slot_id": slot_id,
        }

    def _get_or_create_customer(self, store_id: str, name: str, whatsapp: str) -> Customer:
        customer = self.customer_repo.find_by_whatsapp(self.db, store_id, whatsapp)
        if customer:
            return customer
        try:
            return self.customer_repo.create_customer(self.db, store_id, name, whatsapp)
        except IntegrityError:
            # A concurrent order created the same customer; the unique constraint decided
            customer = self.customer_repo.find_by_whatsapp(self.db, store_id, whatsapp)
            if customer is None:
                raise
            logger.info(f"Customer {customer.id} was created concurrently, reusing it")
            return customer

    @staticmethod
    def build_summary(order: Order, store: Store, customer: Customer) -> dict:
        return {
            "reference": order.id,
            "orderNumber": order.order_number,
            "status": status_from_db(order.status),
            "storeName": store.name,
            "customer": {"name": customer.name, "whatsapp": format_whatsapp(customer.whatsapp)},
            "items": [
                {
                    "productName": item.product_name,
                    "variantLabel": item.variant_label,
                    "quantity": item.quantity,
                    "unitPrice": float(_money(item.unit_price)),
                    "discountAmount": float(_money(item.discount_amount)),
                    "lineTotal": float(line_total(item)),
                }
                for item in order.items
            ],
            "fulfillmentType": fulfillment_from_db(order.fulfillment_type),
            "pickupTime": order.pickup_time,
            "deliveryCep": order.delivery_cep,
            "deliveryStreet": order.delivery_street,
            "deliveryNumber": order.delivery_number,
            "deliveryNeighborhood": order.delivery_neighborhood,
            "deliveryCity": order.delivery_city,
            "shippingAddress": order.shipping_address,
            "deliveryDate": order.delivery_date,
            "total": float(order_total(order.items)),
            "notes": order.notes,
            "createdAt": order.created_at,
        }


# ============================================================================
# ADMIN
# ============================================================================


class OrderService:
    """Admin order operations, always scoped to the principal's store"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepository()
        self.delivery = DeliveryService(db)
        self.pickup_slots = PickupSlotService(db)

    def list_orders(
        self,
        store_id: str,
        status: Optional[str] = None,
        customer_id: Optional[str] = None,
        delivery_date_from: Optional[str] = None,
        delivery_date_to: Optional[str] = None,
    ) -> list[Order]:
        """List orders with optional filters; date bounds are inclusive YYYY-MM-DD"""
        parsed_status = self._parse_status(status) if status else None

        delivery_from = delivery_before = None
        try:
            if delivery_date_from:
                delivery_from = datetime.combine(parse_iso_date(delivery_date_from), datetime.min.time())
            if delivery_date_to:
                last_day = parse_iso_date(delivery_date_to)
                # No upper bound when the last day is date.max
                if last_day < date.max:
                    delivery_before = datetime.combine(
                        dates.add_days(last_day, 1), datetime.min.time()
                    )
        except ValueError as e:
            raise BadRequestError(str(e)) from e

        return self.repo.find_all_by_store_with_details(
            self.db, store_id, parsed_status, customer_id, delivery_from, delivery_before
        )

    def get_order(self, order_id: str, store_id: str) -> Order:
        order = self.repo.find_by_id(self.db, order_id, store_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def update_status(self, order_id: str, store_id: str, status: str) -> Order:
        new_status = self._parse_status(status)
        try:
            order = self.repo.update_status(self.db, order_id, store_id, new_status)
        except ConflictError as e:
            logger.warning(f"Order {order_id}: {e.message}")
            raise
        if not order:
            raise NotFoundError("Order not found")

        logger.info(f"Order {order_id} status changed to {new_status.value}")
        return self.get_order(order_id, store_id)

    def update_order(self, order_id: str, store_id: str, data: OrderUpdate) -> Order:
        """Edit fulfillment metadata, then re-derive the shipping address"""
        order = self.get_order(order_id, store_id)
        given = data.model_fields_set

        updates = {}
        if "deliveryDate" in given:
            updates["delivery_date"] = parse_delivery_date(data.deliveryDate)
        if "notes" in given:
            updates["notes"] = clean_notes(data.notes)

        fulfillment = (
            data.fulfillmentType
            if "fulfillmentType" in given and data.fulfillmentType is not None
            else fulfillment_from_db(order.fulfillment_type)
        )
        updates["fulfillment_type"] = fulfillment_to_db(fulfillment)

        if fulfillment is FulfillmentType.DELIVERY:
            fields = {}
            for field, column in DELIVERY_FIELDS:
                value = _clean(getattr(data, field)) if field in given else getattr(order, column)
                if not value:
                    raise UnprocessableEntityError(f"{field} is required for delivery orders")
                fields[column] = value
            fields["delivery_cep"] = self.delivery.ensure_deliverable(store_id, fields["delivery_cep"])
            updates.update(fields)
            updates["shipping_address"] = build_shipping_address(
                fields["delivery_street"],
                fields["delivery_number"],
                fields["delivery_neighborhood"],
                fields["delivery_city"],
                fields["delivery_cep"],
            )
            updates["pickup_time"] = None
            updates["pickup_slot_id"] = None
        else:
            pickup_time = _clean(data.pickupTime) if "pickupTime" in given else order.pickup_time
            slot_id = _clean(data.pickupSlotId) if "pickupSlotId" in given else order.pickup_slot_id
            if slot_id and "pickupSlotId" in given:
                slot = self.pickup_slots.get_active_slot(slot_id, store_id)
                if slot is None:
                    raise UnprocessableEntityError("Selected pickup slot is not available")
                pickup_time = pickup_time or slot_label(slot)
            updates.update(
                pickup_time=pickup_time,
                pickup_slot_id=slot_id,
                delivery_cep=None,
                delivery_street=None,
                delivery_number=None,
                delivery_neighborhood=None,
                delivery_city=None,
                shipping_address=None,
            )

        self.repo.update_order(self.db, order, **updates)
        logger.info(f"Order {order_id} updated ({', '.join(sorted(given)) or 'no fields'})")
        return order

    def replace_items(self, order_id: str, store_id: str, lines: list[OrderLineInput]) -> Order:
        """Re-price the given lines against the current catalog and swap the item set"""
        order = self.get_order(order_id, store_id)
        if status_from_db(order.status) is not OrderStatus.PENDING:
            raise ConflictError("Items can only be changed while the order is PENDING")

        items = resolve_items(self.db, store_id, lines)
        self.repo.replace_items(self.db, order, items)
        logger.info(f"Order {order_id} items replaced ({len(items)} item(s))")
        return order

    def delete_order(self, order_id: str, store_id: str) -> None:
        order = self.get_order(order_id, store_id)
        self.repo.delete_order(self.db, order)
        logger.info(f"Order {order_id} deleted")

    @staticmethod
    def _parse_status(value: str) -> OrderStatus:
        try:
            return OrderStatus(value.strip().upper())
        except ValueError as e:
            raise UnprocessableEntityError(
                f"Invalid status '{value}'. Expected one of: "
                + ", ".join(s.value for s in OrderStatus)
            ) from e
