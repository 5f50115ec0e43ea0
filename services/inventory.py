"""
Variant lookup and stock availability.

resolve() returns a tagged result instead of raising: callers decide whether
a missing variant is an error (adding to cart) or a stale line to prune
(reading the cart).
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Union

from schemas.product import Variant


class VariantCatalog(Protocol):
    async def find_variant(self, product_id: str, variant_id: str) -> Optional[Variant]: ...


@dataclass(frozen=True)
class Resolved:
    variant: Variant


@dataclass(frozen=True)
class Stale:
    product_id: str
    variant_id: str


Resolution = Union[Resolved, Stale]


def quantity_at(variant: Variant, branch_id: Optional[str] = None) -> int:
    """Stock of one branch, or the sum over every branch when branch_id is None."""
    if branch_id is None:
        return sum(stock.quantity for stock in variant.inventory)
    for stock in variant.inventory:
        if stock.branch_id == branch_id:
            return stock.quantity
    return 0


class InventoryResolver:

    def __init__(self, catalog: VariantCatalog):
        self.catalog = catalog

    async def resolve(self, product_id: str, variant_id: str) -> Resolution:
        variant = await self.catalog.find_variant(product_id, variant_id)
        if variant is None:
            return Stale(product_id=product_id, variant_id=variant_id)
        return Resolved(variant)

    async def available_quantity(self, product_id: str, variant_id: str, branch_id: Optional[str] = None) -> int:
        resolution = await self.resolve(product_id, variant_id)
        if isinstance(resolution, Stale):
            return 0
        return quantity_at(resolution.variant, branch_id)
