"""Order repository - Database operations for orders and their items

Methods that take part in order placement only flush; the service commits the
whole unit once. Admin writes commit on their own.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Order, OrderItem, StoreOrderCounter
from ...shared.errors import ConflictError
from .status import OrderStatus, ensure_transition, status_from_db, status_to_db

logger = logging.getLogger(__name__)


class OrderRepository:
    """Repository for order database operations"""

    @staticmethod
    def next_order_number(db: Session, store_id: str) -> int:
        """Increment and return the store's order counter (row locked until commit)"""
        query = db.query(StoreOrderCounter).filter(StoreOrderCounter.store_id == store_id)
        counter = query.with_for_update().first()
        if counter is None:
            try:
                with db.begin_nested():
                    counter = StoreOrderCounter(store_id=store_id, last_number=0)
                    db.add(counter)
            except IntegrityError:
                # Another transaction created the counter first
                counter = query.with_for_update().first()

        counter.last_number += 1
        db.flush()
        return counter.last_number

    @staticmethod
    def create_order(db: Session, items: list[dict], **order_data) -> Order:
        """Stage an order with its items in the current transaction"""
        order = Order(**order_data)
        order.items = [OrderItem(position=i, **item) for i, item in enumerate(items)]
        db.add(order)
        db.flush()
        return order

    @staticmethod
    def find_by_id(db: Session, order_id: str, store_id: str) -> Optional[Order]:
        """Get an order of this store with customer and items loaded"""
        return (
            db.query(Order)
            .options(joinedload(Order.customer), selectinload(Order.items))
            .filter(Order.id == order_id, Order.store_id == store_id)
            .first()
        )

    @staticmethod
    def find_all_by_store_with_details(
        db: Session,
        store_id: str,
        status: Optional[OrderStatus] = None,
        customer_id: Optional[str] = None,
        delivery_from: Optional[datetime] = None,
        delivery_before: Optional[datetime] = None,
    ) -> list[Order]:
        """
        Joined admin listing ordered by delivery date then pickup time.

        Args:
            delivery_from: Inclusive lower bound on delivery_date
            delivery_before: Exclusive upper bound on delivery_date
        """
        query = (
            db.query(Order)
            .options(joinedload(Order.customer), selectinload(Order.items))
            .filter(Order.store_id == store_id)
        )
        if status is not None:
            query = query.filter(Order.status == status_to_db(status))
        if customer_id:
            query = query.filter(Order.customer_id == customer_id)
        if delivery_from is not None:
            query = query.filter(Order.delivery_date >= delivery_from)
        if delivery_before is not None:
            query = query.filter(Order.delivery_date < delivery_before)

        return query.order_by(
            Order.delivery_date.asc(), Order.pickup_time.asc(), Order.order_number.asc()
        ).all()

    @staticmethod
    def update_status(
        db: Session, order_id: str, store_id: str, new_status: OrderStatus
    ) -> Optional[Order]:
        """
        Apply a status transition against the persisted status.

        The row is read with SELECT ... FOR UPDATE in the same transaction as
        the write, so two concurrent transitions cannot both start from PENDING.

        Returns:
            The updated order, or None when it does not exist in this store

        Raises:
            ConflictError: If the transition is not allowed
        """
        order = (
            db.query(Order)
            .filter(Order.id == order_id, Order.store_id == store_id)
            .with_for_update()
            .first()
        )
        if order is None:
            db.rollback()
            return None

        try:
            ensure_transition(status_from_db(order.status), new_status)
            order.status = status_to_db(new_status)
            db.commit()
        except (ConflictError, SQLAlchemyError):
            db.rollback()
            raise

        db.refresh(order)
        return order

    @staticmethod
    def update_order(db: Session, order: Order, **updates) -> Order:
        for key, value in updates.items():
            setattr(order, key, value)
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(order)
        return order

    @staticmethod
    def replace_items(db: Session, order: Order, items: list[dict]) -> Order:
        """Swap the whole item set in one transaction"""
        try:
            # delete-orphan cascade removes the previous items in the same flush
            order.items = [
                OrderItem(position=i, **item) for i, item in enumerate(items)
            ]
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(order)
        return order

    @staticmethod
    def delete_order(db: Session, order: Order) -> None:
        try:
            db.delete(order)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
