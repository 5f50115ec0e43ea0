"""
Cart service: one cart per user, line items keyed by variant_id.

Every mutation runs as load -> mutate -> version-checked save. If another
request wrote the cart in between, the mutation is re-applied on a fresh copy
(up to max_retries times). clear() is a single atomic upsert.
"""

import logging
from typing import Awaitable, Callable, Dict, List, Optional, Protocol

from core.config import settings
from core.exceptions import (
    CartItemNotFoundException,
    CartItemRemovedException,
    ConcurrentCartUpdateException,
    InsufficientStockException,
    InternalServerException,
    VariantNotFoundException,
)
from schemas.cart import Cart, CartItem
from schemas.product import ProductSummary, Variant
from services.inventory import InventoryResolver, Stale, quantity_at

logger = logging.getLogger(__name__)


class CartRepository(Protocol):
    async def get_or_create(self, user_id: str) -> Cart: ...

    async def save(self, cart: Cart) -> bool: ...

    async def clear(self, user_id: str) -> Cart: ...


class ProductDisplay(Protocol):
    async def get_display(self, product_ids: List[str]) -> Dict[str, ProductSummary]: ...


def options_from_variant(variant: Variant) -> Dict[str, str]:
    """Display labels for a variant; colors like 'Red "#ff0000"' keep only the name."""
    options = variant.options or {}
    labels: Dict[str, str] = {}

    color = options.get("color")
    if color:
        name = str(color).split('"')[0].strip()
        labels["Color"] = name or str(color)

    for key, label in (("size", "Size"), ("shade", "Shade")):
        value = options.get(key)
        if not value:
            plural = options.get(key + "s")
            value = plural[0] if isinstance(plural, list) and plural else None
        if value:
            labels[label] = str(value)
    return labels


def _check_stock(variant: Variant, branch_id: Optional[str], requested: int) -> None:
    available = quantity_at(variant, branch_id)
    if requested > available:
        raise InsufficientStockException(available=available, requested=requested)


class CartService:

    def __init__(
        self,
        carts: CartRepository,
        resolver: InventoryResolver,
        display: ProductDisplay,
        max_retries: int = settings.CART_MAX_RETRIES,
    ):
        self.carts = carts
        self.resolver = resolver
        self.display = display
        self.max_retries = max(max_retries, 1)

    async def _mutate(self, user_id: str, mutation: Callable[[Cart], Awaitable[bool]]) -> Cart:
        """Apply ``mutation`` (returns True if it changed the cart) and persist it."""
        for attempt in range(1, self.max_retries + 1):
            cart = await self.carts.get_or_create(user_id)
            if not await mutation(cart):
                return cart
            cart.recalculate_total()
            if await self.carts.save(cart):
                return cart
            logger.warning("Cart of user %s changed concurrently (attempt %d/%d)", user_id, attempt, self.max_retries)
        raise ConcurrentCartUpdateException()

    async def _prune_stale(self, cart: Cart) -> bool:
        kept = []
        for item in cart.items:
            if isinstance(await self.resolver.resolve(item.product_id, item.variant_id), Stale):
                logger.info("Dropping stale cart item %s/%s for user %s", item.product_id, item.variant_id, cart.user_id)
                continue
            kept.append(item)
        if len(kept) == len(cart.items):
            return False
        cart.items = kept
        return True

    async def materialize(self, cart: Cart) -> dict:
        """Join product and brand display fields onto each item."""
        try:
            products = await self.display.get_display([item.product_id for item in cart.items])
        except Exception as e:
            logger.exception("Failed to load product details for cart %s", cart.id)
            raise InternalServerException("Không thể lấy thông tin giỏ hàng") from e

        return {
            "id": cart.id,
            "user_id": cart.user_id,
            "items": [
                {**item.model_dump(), "product": products.get(item.product_id)}
                for item in cart.items
            ],
            "total_amount": cart.total_amount,
            "updated_at": cart.updated_at,
        }

    async def get(self, user_id: str) -> dict:
        cart = await self._mutate(user_id, self._prune_stale)
        cart.recalculate_total()
        return await self.materialize(cart)

    async def add_item(
        self,
        user_id: str,
        product_id: str,
        variant_id: str,
        quantity: int,
        selected_options: Optional[Dict[str, str]] = None,
        selected_branch_id: Optional[str] = None,
    ) -> dict:
        resolution = await self.resolver.resolve(product_id, variant_id)
        if isinstance(resolution, Stale):
            raise VariantNotFoundException(product_id, variant_id)
        variant = resolution.variant

        async def add(cart: Cart) -> bool:
            item = cart.find_item(variant_id)
            if item is not None:
                branch_id = selected_branch_id or item.selected_branch_id
                _check_stock(variant, branch_id, item.quantity + quantity)
                item.quantity += quantity
                item.price = variant.effective_price
                item.selected_branch_id = branch_id
            else:
                _check_stock(variant, selected_branch_id, quantity)
                cart.items.append(CartItem(
                    product_id=product_id,
                    variant_id=variant_id,
                    quantity=quantity,
                    selected_options=selected_options if selected_options else options_from_variant(variant),
                    price=variant.effective_price,
                    selected_branch_id=selected_branch_id,
                ))
            return True

        cart = await self._mutate(user_id, add)
        logger.info("User %s added %d x %s to cart", user_id, quantity, variant_id)
        return await self.materialize(cart)

    async def update_item(
        self,
        user_id: str,
        variant_id: str,
        quantity: int,
        selected_branch_id: Optional[str] = None,
    ) -> dict:
        if quantity <= 0:
            return await self.remove_item(user_id, variant_id)

        removed = False

        async def update(cart: Cart) -> bool:
            nonlocal removed
            removed = False
            item = cart.find_item(variant_id)
            if item is None:
                raise CartItemNotFoundException(variant_id)

            resolution = await self.resolver.resolve(item.product_id, variant_id)
            if isinstance(resolution, Stale):
                cart.items = [i for i in cart.items if i.variant_id != variant_id]
                removed = True
                return True

            branch_id = selected_branch_id or item.selected_branch_id
            _check_stock(resolution.variant, branch_id, quantity)
            item.quantity = quantity
            item.price = resolution.variant.effective_price
            item.selected_branch_id = branch_id
            return True

        cart = await self._mutate(user_id, update)
        if removed:
            logger.info("Cart item %s of user %s no longer exists and was removed", variant_id, user_id)
            raise CartItemRemovedException(variant_id)
        return await self.materialize(cart)

    async def remove_item(self, user_id: str, variant_id: str) -> dict:
        async def remove(cart: Cart) -> bool:
            kept = [item for item in cart.items if item.variant_id != variant_id]
            if len(kept) == len(cart.items):
                return False
            cart.items = kept
            return True

        cart = await self._mutate(user_id, remove)
        return await self.materialize(cart)

    async def clear(self, user_id: str) -> dict:
        cart = await self.carts.clear(user_id)
        logger.info("Cleared cart of user %s", user_id)
        return await self.materialize(cart)
