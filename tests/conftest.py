import pytest

from schemas.address import District, Province, Ward
from services.address_validator import AddressValidator
from services.branch_service import BranchService
from services.cart_service import CartService
from services.inventory import InventoryResolver
from services.reference_guard import ReferenceGuard
from tests.fakes import (
    FakeAddressRegistry,
    FakeBranchRepository,
    FakeCartRepository,
    FakeCatalog,
)

BRANCH_A = "branch-a"
BRANCH_B = "branch-b"


def make_product(product_id="P1", status="active"):
    return {
        "_id": product_id,
        "name": "Áo thun basic",
        "slug": "ao-thun-basic",
        "brand_id": "brand-1",
        "status": status,
        "variants": [
            {
                "variant_id": "V1",
                "sku": "AT-DO-M",
                "price": 100000,
                "options": {"color": 'Đỏ "#ff0000"', "sizes": ["M", "L"]},
            },
            {
                "variant_id": "V2",
                "sku": "AT-XANH-L",
                "price": 250000,
                "promotion_price": 200000,
                "options": {"color": "Xanh", "size": "L"},
            },
        ],
        "variant_inventory": [
            {"branch_id": BRANCH_A, "variant_id": "V1", "quantity": 10},
            {"branch_id": BRANCH_B, "variant_id": "V1", "quantity": 5},
            {"branch_id": BRANCH_A, "variant_id": "V2", "quantity": 2},
        ],
        "inventory": [
            {"branch_id": BRANCH_A, "quantity": 12, "low_stock_threshold": 3},
            {"branch_id": BRANCH_B, "quantity": 5, "low_stock_threshold": 5},
        ],
    }


@pytest.fixture
def registry():
    return FakeAddressRegistry(
        provinces=[Province(id=1, name="Hà Nội"), Province(id=2, name="Hồ Chí Minh")],
        districts=[
            District(id=10, name="Ba Đình", province_id=1),
            District(id=11, name="Hoàn Kiếm", province_id=1),
            District(id=20, name="Quận 1", province_id=2),
        ],
        wards=[
            Ward(id=100, name="Phúc Xá", district_id=10),
            Ward(id=110, name="Hàng Bạc", district_id=11),
            Ward(id=200, name="Bến Nghé", district_id=20),
        ],
    )


@pytest.fixture
def branch_repo():
    return FakeBranchRepository([
        {"id": BRANCH_A, "name": "Chi nhánh Ba Đình", "address": "12 Phúc Xá", "contact": "0901000001",
         "province_code": "1", "district_code": "10", "ward_code": "100"},
        {"id": BRANCH_B, "name": "Chi nhánh Quận 1", "address": "5 Lê Lợi", "contact": None,
         "province_code": "2", "district_code": "20", "ward_code": "200"},
    ])


@pytest.fixture
def catalog(branch_repo):
    return FakeCatalog(
        products=[make_product("P1")],
        branches=branch_repo,
        brands={"brand-1": {"name": "Coolmate", "slug": "coolmate"}},
    )


@pytest.fixture
def resolver(catalog):
    return InventoryResolver(catalog)


@pytest.fixture
def cart_repo():
    return FakeCartRepository()


@pytest.fixture
def cart_service(cart_repo, resolver, catalog):
    return CartService(cart_repo, resolver, catalog, max_retries=3)


@pytest.fixture
def guard(catalog):
    return ReferenceGuard(catalog)


@pytest.fixture
def branch_service(branch_repo, registry, guard):
    return BranchService(branch_repo, AddressValidator(registry), guard)
