import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate an opaque, non-sequential identifier"""
    return str(uuid.uuid4())


class Store(Base):
    """Tenant boundary - every other row carries a store_id"""

    __tablename__ = "stores"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)  # Public catalog link
    whatsapp = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    products = relationship("Product", back_populates="store")
    admins = relationship("Admin", back_populates="store")


class Admin(Base):
    """Store administrator - credentials live in the auth service"""

    __tablename__ = "admins"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    store_id = Column(String(36), ForeignKey("stores.id"), unique=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    store = relationship("Store", back_populates="admins")


class Product(Base):
    """Catalog product (read-only to the order workflow)"""

    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=generate_id)
    store_id = Column(String(36), ForeignKey("stores.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    # Null price means the product is priced per active variant
    price = Column(Numeric(10, 2), nullable=True)
    min_quantity = Column(Integer, default=1, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    store = relationship("Store", back_populates="products")
    variants = relationship(
        "ProductVariant",
        back_populates="product",
        order_by="ProductVariant.sort_order",
        cascade="all, delete-orphan",
    )


class ProductVariant(Base):
    __tablename__ = "product_variants"

    id = Column(String(36), primary_key=True, default=generate_id)
    product_id = Column(
        String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    store_id = Column(String(36), ForeignKey("stores.id"), nullable=False, index=True)
    label = Column(String(100), nullable=False)  # e.g. "500g", "G", "Chocolate"
    price = Column(Numeric(10, 2), nullable=False)
    pricing_type = Column(String(20), default="UNIT", nullable=False)  # UNIT, WEIGHT
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    product = relationship("Product", back_populates="variants")


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (UniqueConstraint("store_id", "whatsapp", name="uq_customers_store_whatsapp"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    store_id = Column(String(36), ForeignKey("stores.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    whatsapp = Column(String(20), nullable=False)  # Normalized digits with country code
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    orders = relationship("Order", back_populates="customer")


class StoreOrderCounter(Base):
    """Per-store sequence backing Order.order_number"""

    __tablename__ = "store_order_counters"

    store_id = Column(String(36), ForeignKey("stores.id", ondelete="CASCADE"), primary_key=True)
    last_number = Column(Integer, default=0, nullable=False)


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("store_id", "order_number", name="uq_orders_store_number"),
        Index("ix_orders_store_status", "store_id", "status"),
        Index("ix_orders_store_delivery_date", "store_id", "delivery_date"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    store_id = Column(String(36), ForeignKey("stores.id"), nullable=False)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    order_number = Column(Integer, nullable=True)

    # Status workflow: PENDING → APPROVED | REJECTED (see domain/orders/status.py)
    status = Column(String(20), default="PENDING", nullable=False)
    fulfillment_type = Column(String(20), default="PICKUP", nullable=False)  # PICKUP, DELIVERY

    delivery_date = Column(DateTime, nullable=False)  # UTC

    # Pickup
    pickup_time = Column(String(50), nullable=True)  # Slot label e.g. "09:00 – 12:00"
    pickup_slot_id = Column(String(36), ForeignKey("store_pickup_slots.id"), nullable=True)

    # Delivery
    delivery_cep = Column(String(8), nullable=True)
    delivery_street = Column(String(255), nullable=True)
    delivery_number = Column(String(50), nullable=True)
    delivery_neighborhood = Column(String(255), nullable=True)
    delivery_city = Column(String(255), nullable=True)
    shipping_address = Column(Text, nullable=True)  # Display only, derived from the fields above

    notes = Column(String(500), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class OrderItem(Base):
    """Frozen snapshot of a purchased line - never recomputed from the catalog"""

    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=generate_id)
    order_id = Column(
        String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)
    variant_id = Column(
        String(36), ForeignKey("product_variants.id", ondelete="SET NULL"), nullable=True
    )
    product_name = Column(String(255), nullable=False)
    variant_label = Column(String(100), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    discount_amount = Column(Numeric(10, 2), default=0, nullable=False)
    position = Column(Integer, default=0, nullable=False)  # Input order within the order
    created_at = Column(DateTime, server_default=func.now())

    order = relationship("Order", back_populates="items")


class StorePickupSlot(Base):
    """Recurring weekly pickup window"""

    __tablename__ = "store_pickup_slots"
    __table_args__ = (Index("ix_pickup_slots_store_day", "store_id", "day_of_week"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    store_id = Column(String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday ... 6 = Saturday
    start_time = Column(String(5), nullable=False)  # HH:mm
    end_time = Column(String(5), nullable=False)  # HH:mm, always > start_time
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class StoreCepRange(Base):
    """Delivery zone - a store with no ranges delivers everywhere"""

    __tablename__ = "store_cep_ranges"

    id = Column(String(36), primary_key=True, default=generate_id)
    store_id = Column(
        String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True
    )
    cep_start = Column(String(8), nullable=False)  # 8 digits, zero-padded
    cep_end = Column(String(8), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class StoreSchedule(Base):
    """Per-date override of the default Mon-Fri open rule"""

    __tablename__ = "store_schedules"
    __table_args__ = (UniqueConstraint("store_id", "date", name="uq_store_schedules_store_date"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    store_id = Column(
        String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    is_open = Column(Boolean, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
