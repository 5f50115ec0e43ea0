# schemas/cart.py
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime

from schemas.product import ProductSummary


class CartItem(BaseModel):
    product_id: str
    variant_id: str
    quantity: int = Field(..., ge=1)
    selected_options: Dict[str, str] = Field(default_factory=dict)
    price: float = Field(0, ge=0)   # snapshot giá tại thời điểm thêm/cập nhật
    selected_branch_id: Optional[str] = None


class Cart(BaseModel):
    id: str
    user_id: str
    items: List[CartItem] = Field(default_factory=list)
    total_amount: float = 0
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def find_item(self, variant_id: str) -> Optional[CartItem]:
        for item in self.items:
            if item.variant_id == variant_id:
                return item
        return None

    def recalculate_total(self) -> float:
        self.total_amount = sum(item.price * item.quantity for item in self.items)
        return self.total_amount


class AddToCart(BaseModel):
    product_id: str = Field(..., min_length=1)
    variant_id: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1)
    selected_options: Optional[Dict[str, str]] = None
    selected_branch_id: Optional[str] = None


class UpdateCartItem(BaseModel):
    quantity: int     # <= 0 nghĩa là xoá khỏi giỏ
    selected_branch_id: Optional[str] = None


class CartItemOut(CartItem):
    product: Optional[ProductSummary] = None


class CartOut(BaseModel):
    id: str
    user_id: str
    items: List[CartItemOut]
    total_amount: float
    updated_at: Optional[datetime] = None
