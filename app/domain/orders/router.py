"""Order router - Public order placement and admin order management"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ...auth import AdminPrincipal, get_current_admin
from ...database import get_db
from ...models import Order
from ...rate_limiter import place_order_limit
from ...shared.validators import format_whatsapp
from .schemas import (
    OrderDetailResponse,
    OrderStatusUpdate,
    OrderSummary,
    OrderUpdate,
    PlaceOrderRequest,
    ReplaceItemsRequest,
)
from .service import OrderPlacementService, OrderService, line_total, order_total
from .status import fulfillment_from_db, status_from_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])
public_router = APIRouter(prefix="/catalog", tags=["Catalog"])


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    """Dependency injection for OrderService"""
    return OrderService(db)


def get_placement_service(db: Session = Depends(get_db)) -> OrderPlacementService:
    """Dependency injection for OrderPlacementService"""
    return OrderPlacementService(db)


def _to_detail(order: Order) -> OrderDetailResponse:
    return OrderDetailResponse(
        id=order.id,
        orderNumber=order.order_number,
        status=status_from_db(order.status),
        fulfillmentType=fulfillment_from_db(order.fulfillment_type),
        deliveryDate=order.delivery_date,
        pickupTime=order.pickup_time,
        pickupSlotId=order.pickup_slot_id,
        deliveryCep=order.delivery_cep,
        deliveryStreet=order.delivery_street,
        deliveryNumber=order.delivery_number,
        deliveryNeighborhood=order.delivery_neighborhood,
        deliveryCity=order.delivery_city,
        shippingAddress=order.shipping_address,
        notes=order.notes,
        total=float(order_total(order.items)),
        customer={
            "id": order.customer.id,
            "name": order.customer.name,
            "whatsapp": order.customer.whatsapp,
            "whatsappFormatted": format_whatsapp(order.customer.whatsapp),
        },
        items=[
            {
                "id": item.id,
                "productId": item.product_id,
                "variantId": item.variant_id,
                "productName": item.product_name,
                "variantLabel": item.variant_label,
                "quantity": item.quantity,
                "unitPrice": float(item.unit_price),
                "discountAmount": float(item.discount_amount),
                "lineTotal": float(line_total(item)),
            }
            for item in order.items
        ],
        createdAt=order.created_at,
        updatedAt=order.updated_at,
    )


# ============================================================================
# PUBLIC PLACEMENT
# ============================================================================


@public_router.post(
    "/{slug}/orders",
    response_model=OrderSummary,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(place_order_limit)],
)
async def place_catalog_order(
    slug: str,
    data: PlaceOrderRequest,
    service: OrderPlacementService = Depends(get_placement_service),
):
    """Place an order from a store's public catalog (no auth)"""
    data.storeSlug = slug
    return service.place_order(data)


@router.post(
    "",
    response_model=OrderSummary,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(place_order_limit)],
)
async def place_order(
    data: PlaceOrderRequest,
    service: OrderPlacementService = Depends(get_placement_service),
):
    """Place an order with the store slug in the body (no auth)"""
    return service.place_order(data)


# ============================================================================
# ADMIN
# ============================================================================


@router.get("", response_model=list[OrderDetailResponse])
async def list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    customerId: Optional[str] = Query(None),
    deliveryDateFrom: Optional[str] = Query(None),
    deliveryDateTo: Optional[str] = Query(None),
    admin: AdminPrincipal = Depends(get_current_admin),
    service: OrderService = Depends(get_order_service),
):
    """List the store's orders by delivery date, with optional filters"""
    orders = service.list_orders(
        admin.store_id, status_filter, customerId, deliveryDateFrom, deliveryDateTo
    )
    return [_to_detail(o) for o in orders]


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: str,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: OrderService = Depends(get_order_service),
):
    return _to_detail(service.get_order(order_id, admin.store_id))


@router.patch("/{order_id}/status", response_model=OrderDetailResponse)
async def update_order_status(
    order_id: str,
    data: OrderStatusUpdate,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: OrderService = Depends(get_order_service),
):
    """Approve or reject a pending order"""
    return _to_detail(service.update_status(order_id, admin.store_id, data.status))


@router.patch("/{order_id}", response_model=OrderDetailResponse)
async def update_order(
    order_id: str,
    data: OrderUpdate,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: OrderService = Depends(get_order_service),
):
    """Edit delivery or pickup details"""
    return _to_detail(service.update_order(order_id, admin.store_id, data))


@router.put("/{order_id}/items", response_model=OrderDetailResponse)
async def replace_order_items(
    order_id: str,
    data: ReplaceItemsRequest,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: OrderService = Depends(get_order_service),
):
    """Replace every item of a pending order, priced at current catalog values"""
    return _to_detail(service.replace_items(order_id, admin.store_id, data.items))


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: str,
    admin: AdminPrincipal = Depends(get_current_admin),
    service: OrderService = Depends(get_order_service),
):
    service.delete_order(order_id, admin.store_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
