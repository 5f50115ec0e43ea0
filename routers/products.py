from fastapi import APIRouter, Depends, Query
from typing import Optional
from core.dependencies import get_current_user, get_inventory_resolver
from schemas.product import VariantAvailability
from services.inventory import InventoryResolver

router = APIRouter(prefix="/products", tags=["Products"])


# GET /products/{product_id}/variants/{variant_id}/availability - Tồn kho có thể mua
@router.get("/{product_id}/variants/{variant_id}/availability", response_model=VariantAvailability)
async def variant_availability(
    product_id: str,
    variant_id: str,
    branch_id: Optional[str] = Query(None, description="Bỏ trống để cộng tồn kho mọi chi nhánh"),
    current_user: dict = Depends(get_current_user),
    resolver: InventoryResolver = Depends(get_inventory_resolver),
):
    available = await resolver.available_quantity(product_id, variant_id, branch_id)
    return {
        "product_id": product_id,
        "variant_id": variant_id,
        "branch_id": branch_id,
        "available": available,
    }
