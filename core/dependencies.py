from functools import lru_cache

from fastapi import Request, HTTPException, status
from jose import jwt, JWTError

from core.config import SECRET_KEY, ALGORITHM
from db import db
from repositories.branch_repository import MongoBranchRepository
from repositories.cart_repository import MongoCartRepository
from repositories.catalog import MongoCatalog
from services.address_registry import ViettelPostAddressRegistry
from services.address_validator import AddressValidator
from services.branch_service import BranchService
from services.cart_service import CartService
from services.inventory import InventoryResolver
from services.reference_guard import ReferenceGuard


async def get_current_user(request: Request):
    token = request.cookies.get("access_token")
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Không tìm thấy token, vui lòng đăng nhập lại",
        )

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        email: str = payload.get("sub")
        if email is None:
            raise HTTPException(status_code=401, detail="Token không hợp lệ")
    except JWTError:
        raise HTTPException(status_code=401, detail="Token không hợp lệ")

    user = await db.users.find_one({"email": email})
    if user is None:
        raise HTTPException(status_code=401, detail="User không tồn tại")
    return user


# ===================== Services =====================

@lru_cache()
def get_address_registry() -> ViettelPostAddressRegistry:
    # giữ token đăng nhập giữa các request
    return ViettelPostAddressRegistry()


def get_catalog() -> MongoCatalog:
    return MongoCatalog(db)


def get_inventory_resolver() -> InventoryResolver:
    return InventoryResolver(get_catalog())


def get_cart_service() -> CartService:
    catalog = get_catalog()
    return CartService(MongoCartRepository(db), InventoryResolver(catalog), catalog)


def get_branch_service() -> BranchService:
    return BranchService(
        MongoBranchRepository(db),
        AddressValidator(get_address_registry()),
        ReferenceGuard(get_catalog()),
    )
