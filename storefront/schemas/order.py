from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel, Field
from storefront.models.order import EventSeverity, OrderStatus


class CartItemCreate(BaseModel):
    """Schema for adding a gemstone to a cart."""
    gemstone_id: UUID
    quantity: int = Field(1, ge=1)


class CartItemUpdate(BaseModel):
    """Schema for changing a cart line. Zero removes the line."""
    quantity: int = Field(..., ge=0)


class CartItemResponse(BaseModel):
    gemstone_id: UUID
    quantity: int
    unit_price: int
    line_total: int
    currency: str
    in_stock: bool


class CartResponse(BaseModel):
    """Schema for a user's cart."""
    user_id: UUID
    items: List[CartItemResponse] = Field(default_factory=list)
    total_amount: int = 0
    currency_code: Optional[str] = None


class OrderCreate(BaseModel):
    """Schema for placing an order from the user's cart."""
    user_id: UUID
    notes: Optional[str] = Field(None, max_length=2000)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    performed_by: Optional[UUID] = None


class OrderItemResponse(BaseModel):
    gemstone_id: UUID
    quantity: int
    unit_price: int
    line_total: int

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    """Schema for order response."""
    id: UUID
    order_number: str
    user_id: UUID
    status: OrderStatus
    total_amount: int
    currency_code: str
    notes: Optional[str] = None
    items: List[OrderItemResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrderEventResponse(BaseModel):
    """Schema for one audit entry of an order."""
    id: UUID
    order_id: UUID
    event_type: str
    severity: EventSeverity
    title: str
    description: str
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="event_metadata")
    performed_by: Optional[UUID] = None
    performed_at: datetime
    is_internal: bool

    model_config = {"from_attributes": True}
