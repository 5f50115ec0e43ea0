from fastapi import APIRouter
from . import cart, products, addresses, admin
router = APIRouter()
router.include_router(products.router)
router.include_router(cart.router)
router.include_router(addresses.router)
router.include_router(admin.router)
