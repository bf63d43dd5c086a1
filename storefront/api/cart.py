from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException
from storefront.api.deps import get_cart_service
from storefront.exceptions import CartError, NotFoundError
from storefront.schemas.order import CartItemCreate, CartItemUpdate, CartResponse
from storefront.services.cart import CartService

router = APIRouter()


@router.get("/cart/{user_id}", response_model=CartResponse)
async def get_cart(
    user_id: UUID,
    cart: CartService = Depends(get_cart_service)
):
    """Get a user's cart at current prices."""
    return await cart.get(user_id)


@router.post("/cart/{user_id}/items", response_model=CartResponse)
async def add_cart_item(
    user_id: UUID,
    data: CartItemCreate,
    cart: CartService = Depends(get_cart_service)
):
    try:
        return await cart.add(user_id, data.gemstone_id, data.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CartError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.patch("/cart/{user_id}/items/{gemstone_id}", response_model=CartResponse)
async def update_cart_item(
    user_id: UUID,
    gemstone_id: UUID,
    data: CartItemUpdate,
    cart: CartService = Depends(get_cart_service)
):
    try:
        return await cart.update(user_id, gemstone_id, data.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CartError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.delete("/cart/{user_id}/items/{gemstone_id}", response_model=CartResponse)
async def remove_cart_item(
    user_id: UUID,
    gemstone_id: UUID,
    cart: CartService = Depends(get_cart_service)
):
    return await cart.remove(user_id, gemstone_id)
