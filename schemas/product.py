# schemas/product.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class BranchStock(BaseModel):
    branch_id: str
    quantity: int = Field(0, ge=0)


class Variant(BaseModel):
    """An embedded product variant together with its per-branch inventory."""

    product_id: str
    variant_id: str
    sku: Optional[str] = None
    price: float = Field(0, ge=0)
    promotion_price: Optional[float] = None
    options: Dict[str, Any] = Field(default_factory=dict)
    inventory: List[BranchStock] = Field(default_factory=list)

    @property
    def effective_price(self) -> float:
        if self.promotion_price is not None and self.promotion_price > 0:
            return self.promotion_price
        return self.price


class BrandSummary(BaseModel):
    id: str
    name: str
    slug: Optional[str] = None


class ProductSummary(BaseModel):
    id: str
    name: str
    slug: Optional[str] = None
    image: Optional[str] = None
    brand: Optional[BrandSummary] = None


class VariantAvailability(BaseModel):
    product_id: str
    variant_id: str
    branch_id: Optional[str] = None
    available: int
