import logging
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from storefront.api.deps import get_order_service
from storefront.exceptions import CartError, NotFoundError, OrderStateError
from storefront.schemas.order import OrderCreate, OrderEventResponse, OrderResponse, OrderStatusUpdate
from storefront.services.orders import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/orders", response_model=OrderResponse, status_code=201)
async def create_order(
    data: OrderCreate,
    orders: OrderService = Depends(get_order_service)
):
    """
    Place an order from the user's cart.

    Prices are snapshotted and the cart is emptied.
    """
    try:
        return await orders.create_order(data.user_id, data.notes)
    except CartError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    data: OrderStatusUpdate,
    orders: OrderService = Depends(get_order_service)
):
    try:
        return await orders.change_status(order_id, data.status, data.performed_by)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    except OrderStateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/orders/{order_id}/events", response_model=List[OrderEventResponse])
async def list_order_events(
    order_id: UUID,
    orders: OrderService = Depends(get_order_service)
):
    """Audit log of an order, oldest first."""
    try:
        return await orders.list_events(order_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
