from fastapi import APIRouter, Depends, status
from core.dependencies import get_current_user, get_cart_service
from schemas.cart import AddToCart, UpdateCartItem, CartOut
from services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["Cart"])


def user_id_of(current_user: dict) -> str:
    return str(current_user["_id"])


# GET /carts - Lấy giỏ hàng hiện tại
@router.get("", response_model=CartOut)
async def get_cart(
    current_user: dict = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
):
    return await service.get(user_id_of(current_user))


# POST /carts/items - Thêm sản phẩm vào giỏ
@router.post("/items", response_model=CartOut, status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    item: AddToCart,
    current_user: dict = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
):
    return await service.add_item(
        user_id_of(current_user),
        item.product_id,
        item.variant_id,
        item.quantity,
        selected_options=item.selected_options,
        selected_branch_id=item.selected_branch_id,
    )


# PATCH /carts/items/{variant_id} - Cập nhật số lượng (<= 0 thì xoá)
@router.patch("/items/{variant_id}", response_model=CartOut)
async def update_cart_item(
    variant_id: str,
    data: UpdateCartItem,
    current_user: dict = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
):
    return await service.update_item(
        user_id_of(current_user),
        variant_id,
        data.quantity,
        selected_branch_id=data.selected_branch_id,
    )


# DELETE /carts/items/{variant_id} - Xóa 1 sản phẩm khỏi giỏ
@router.delete("/items/{variant_id}", response_model=CartOut)
async def remove_from_cart(
    variant_id: str,
    current_user: dict = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
):
    return await service.remove_item(user_id_of(current_user), variant_id)


# DELETE /carts - Xóa toàn bộ giỏ hàng
@router.delete("", response_model=CartOut)
async def clear_cart(
    current_user: dict = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
):
    return await service.clear(user_id_of(current_user))
