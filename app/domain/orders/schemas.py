"""Order domain schemas - Pydantic models for placement and admin views"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .status import FulfillmentType, OrderStatus


class OrderLineInput(BaseModel):
    """One requested line. Prices are never accepted from the client"""

    productId: Optional[str] = None
    variantId: Optional[str] = None
    quantity: Optional[int] = None


class CustomerInput(BaseModel):
    name: Optional[str] = None
    whatsapp: Optional[str] = None


class PlaceOrderRequest(BaseModel):
    """Schema for a public order submission

    deliveryDate is an ISO 8601 date or datetime; naive values are read as UTC.
    """

    storeSlug: Optional[str] = None
    customer: Optional[CustomerInput] = None
    items: list[OrderLineInput] = []
    fulfillmentType: FulfillmentType = FulfillmentType.PICKUP
    deliveryDate: Optional[str] = None
    # Pickup
    pickupTime: Optional[str] = None
    pickupSlotId: Optional[str] = None
    # Delivery
    deliveryCep: Optional[str] = None
    deliveryStreet: Optional[str] = None
    deliveryNumber: Optional[str] = None
    deliveryNeighborhood: Optional[str] = None
    deliveryCity: Optional[str] = None
    notes: Optional[str] = None


class OrderSummaryItem(BaseModel):
    productName: str
    variantLabel: Optional[str] = None
    quantity: int
    unitPrice: float
    discountAmount: float
    lineTotal: float


class OrderSummaryCustomer(BaseModel):
    name: str
    whatsapp: str  # (DD) XXXXX-XXXX


class OrderSummary(BaseModel):
    """Public confirmation - the only id exposed is the opaque order reference"""

    reference: str
    orderNumber: Optional[int] = None
    status: OrderStatus
    storeName: str
    customer: OrderSummaryCustomer
    items: list[OrderSummaryItem]
    fulfillmentType: FulfillmentType
    pickupTime: Optional[str] = None
    deliveryCep: Optional[str] = None
    deliveryStreet: Optional[str] = None
    deliveryNumber: Optional[str] = None
    deliveryNeighborhood: Optional[str] = None
    deliveryCity: Optional[str] = None
    shippingAddress: Optional[str] = None
    deliveryDate: datetime
    total: float
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None


# ============================================================================
# ADMIN
# ============================================================================


class OrderItemResponse(BaseModel):
    id: str
    productId: str
    variantId: Optional[str] = None
    productName: str
    variantLabel: Optional[str] = None
    quantity: int
    unitPrice: float
    discountAmount: float
    lineTotal: float


class OrderCustomerResponse(BaseModel):
    id: str
    name: str
    whatsapp: str
    whatsappFormatted: str


class OrderDetailResponse(BaseModel):
    id: str
    orderNumber: Optional[int] = None
    status: OrderStatus
    fulfillmentType: FulfillmentType
    deliveryDate: datetime
    pickupTime: Optional[str] = None
    pickupSlotId: Optional[str] = None
    deliveryCep: Optional[str] = None
    deliveryStreet: Optional[str] = None
    deliveryNumber: Optional[str] = None
    deliveryNeighborhood: Optional[str] = None
    deliveryCity: Optional[str] = None
    shippingAddress: Optional[str] = None
    notes: Optional[str] = None
    total: float
    customer: OrderCustomerResponse
    items: list[OrderItemResponse]
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class OrderStatusUpdate(BaseModel):
    status: str


class OrderUpdate(BaseModel):
    """Field edits of fulfillment metadata. Only fields present in the body change"""

    fulfillmentType: Optional[FulfillmentType] = None
    deliveryDate: Optional[str] = None
    pickupTime: Optional[str] = None
    pickupSlotId: Optional[str] = None
    deliveryCep: Optional[str] = None
    deliveryStreet: Optional[str] = None
    deliveryNumber: Optional[str] = None
    deliveryNeighborhood: Optional[str] = None
    deliveryCity: Optional[str] = None
    notes: Optional[str] = None


class ReplaceItemsRequest(BaseModel):
    items: list[OrderLineInput] = []
