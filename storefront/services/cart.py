import logging
from typing import List
from uuid import UUID
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.exceptions import CartError, NotFoundError
from storefront.models.gemstone import Gemstone
from storefront.models.order import CartItem
from storefront.schemas.order import CartItemResponse, CartResponse

logger = logging.getLogger(__name__)


class CartService:
    """Per-user shopping cart of gemstones."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def items(self, user_id: UUID) -> List[CartItem]:
        result = await self.db.execute(
            select(CartItem).where(CartItem.user_id == user_id).order_by(CartItem.created_at)
        )
        return list(result.scalars().all())

    async def get(self, user_id: UUID) -> CartResponse:
        """Cart lines priced at the current gemstone prices."""
        items = await self.items(user_id)
        if not items:
            return CartResponse(user_id=user_id)

        result = await self.db.execute(
            select(Gemstone).where(Gemstone.id.in_([item.gemstone_id for item in items]))
        )
        gemstones = {gemstone.id: gemstone for gemstone in result.scalars().all()}

        lines = []
        for item in items:
            gemstone = gemstones.get(item.gemstone_id)
            if gemstone is None:
                continue
            lines.append(CartItemResponse(
                gemstone_id=item.gemstone_id,
                quantity=item.quantity,
                unit_price=gemstone.price_amount,
                line_total=gemstone.price_amount * item.quantity,
                currency=gemstone.price_currency,
                in_stock=gemstone.in_stock,
            ))

        return CartResponse(
            user_id=user_id,
            items=lines,
            total_amount=sum(line.line_total for line in lines),
            currency_code=lines[0].currency if lines else None,
        )

    async def add(self, user_id: UUID, gemstone_id: UUID, quantity: int = 1) -> CartResponse:
        """
        Add a gemstone, or increase its quantity when already in the cart.

        Raises:
            NotFoundError: Unknown gemstone
            CartError: Gemstone out of stock or quantity not positive
        """
        if quantity < 1:
            raise CartError("Quantity must be at least 1")

        gemstone = await self.db.get(Gemstone, gemstone_id)
        if gemstone is None:
            raise NotFoundError("Gemstone", gemstone_id)
        if not gemstone.in_stock:
            raise CartError(f"Gemstone {gemstone.serial_number} is out of stock")

        result = await self.db.execute(
            select(CartItem).where(CartItem.user_id == user_id, CartItem.gemstone_id == gemstone_id)
        )
        item = result.scalar_one_or_none()
        if item is None:
            self.db.add(CartItem(user_id=user_id, gemstone_id=gemstone_id, quantity=quantity))
        else:
            item.quantity += quantity

        await self.db.commit()
        logger.info(f"Added gemstone {gemstone_id} x{quantity} to cart of {user_id}")
        return await self.get(user_id)

    async def update(self, user_id: UUID, gemstone_id: UUID, quantity: int) -> CartResponse:
        """Set a line's quantity. Zero removes the line."""
        if quantity < 0:
            raise CartError("Quantity cannot be negative")
        if quantity == 0:
            return await self.remove(user_id, gemstone_id)

        result = await self.db.execute(
            select(CartItem).where(CartItem.user_id == user_id, CartItem.gemstone_id == gemstone_id)
        )
        item = result.scalar_one_or_none()
        if item is None:
            raise NotFoundError("Cart item", gemstone_id)

        item.quantity = quantity
        await self.db.commit()
        return await self.get(user_id)

    async def remove(self, user_id: UUID, gemstone_id: UUID) -> CartResponse:
        await self.db.execute(
            delete(CartItem).where(CartItem.user_id == user_id, CartItem.gemstone_id == gemstone_id)
        )
        await self.db.commit()
        return await self.get(user_id)

    async def clear(self, user_id: UUID) -> None:
        """Empty the cart without committing, so order creation stays atomic."""
        await self.db.execute(delete(CartItem).where(CartItem.user_id == user_id))
