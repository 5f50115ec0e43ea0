"""In-memory fakes for the catalog, repositories and address registry.

They follow the same method signatures as the MongoDB/httpx implementations
but keep everything in dicts. No network, no database.
"""

import copy
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from core.exceptions import AddressServiceUnavailableException
from repositories.branch_repository import parse_sort
from repositories.catalog import strip_branch, strip_orphans, variant_from_product
from schemas.address import District, Province, Ward
from schemas.cart import Cart
from schemas.product import BrandSummary, ProductSummary, Variant


class FakeBranchRepository:

    def __init__(self, branches: Optional[List[dict]] = None):
        self._store: Dict[str, dict] = {}
        now = datetime.now(timezone.utc)
        for b in branches or []:
            self._store[b["id"]] = {"created_at": now, "updated_at": now, **b}

    async def insert(self, data: dict) -> dict:
        now = datetime.now(timezone.utc)
        branch = {"id": str(uuid.uuid4()), **data, "created_at": now, "updated_at": now}
        self._store[branch["id"]] = branch
        return dict(branch)

    async def find_page(self, search, sort, skip, limit):
        rows = list(self._store.values())
        if search:
            needle = search.lower()
            rows = [
                b for b in rows
                if any(needle in (b.get(k) or "").lower() for k in ("name", "address", "contact"))
            ]
        field, direction = parse_sort(sort)
        rows.sort(key=lambda b: b.get(field) or "", reverse=direction == -1)
        return [dict(b) for b in rows[skip:skip + limit]], len(rows)

    async def get(self, branch_id: str) -> Optional[dict]:
        branch = self._store.get(branch_id)
        return dict(branch) if branch else None

    async def update(self, branch_id: str, data: dict) -> Optional[dict]:
        if branch_id not in self._store:
            return None
        self._store[branch_id].update(data, updated_at=datetime.now(timezone.utc))
        return dict(self._store[branch_id])

    async def delete(self, branch_id: str) -> bool:
        return self._store.pop(branch_id, None) is not None

    async def count(self) -> int:
        return len(self._store)

    async def existing_ids(self):
        return set(self._store)


class FakeCatalog:

    def __init__(self, products: Optional[List[dict]] = None, branches: Optional[FakeBranchRepository] = None,
                 brands: Optional[Dict[str, dict]] = None):
        self.products: Dict[str, dict] = {p["_id"]: copy.deepcopy(p) for p in products or []}
        self.branches = branches or FakeBranchRepository()
        self.brands = brands or {}
        self.fail_display = False
        self.fail_cleanup = False

    async def find_variant(self, product_id: str, variant_id: str) -> Optional[Variant]:
        doc = self.products.get(product_id)
        return variant_from_product(doc, variant_id) if doc else None

    def _references(self, doc: dict, branch_id: str) -> bool:
        return any(
            str(inv.get("branch_id")) == branch_id
            for inv in (doc.get("inventory") or []) + (doc.get("variant_inventory") or [])
        )

    async def count_products_referencing_branch(self, branch_id: str) -> int:
        return sum(1 for doc in self.products.values() if self._references(doc, branch_id))

    async def remove_branch_from_products(self, branch_id: str) -> int:
        updated = 0
        for doc in self.products.values():
            changes = strip_branch(doc, branch_id)
            if changes is not None:
                doc.update(changes)
                updated += 1
        return updated

    async def cleanup_orphaned_inventory(self) -> int:
        if self.fail_cleanup:
            raise RuntimeError("database unavailable")
        live = await self.branches.existing_ids()
        cleaned = 0
        for doc in self.products.values():
            changes = strip_orphans(doc, live)
            if changes is not None:
                doc.update(changes)
                cleaned += 1
        return cleaned

    async def get_display(self, product_ids: List[str]) -> Dict[str, ProductSummary]:
        if self.fail_display:
            raise RuntimeError("database unavailable")
        result = {}
        for pid in product_ids:
            doc = self.products.get(pid)
            if not doc:
                continue
            brand = self.brands.get(doc.get("brand_id"))
            result[pid] = ProductSummary(
                id=pid,
                name=doc.get("name", ""),
                slug=doc.get("slug"),
                brand=BrandSummary(id=doc["brand_id"], **brand) if brand else None,
            )
        return result

    def delete_variant(self, product_id: str, variant_id: str) -> None:
        doc = self.products[product_id]
        doc["variants"] = [v for v in doc["variants"] if v["variant_id"] != variant_id]


class FakeCartRepository:

    def __init__(self):
        self._store: Dict[str, Cart] = {}
        self.saves = 0
        self.conflicts = 0  # number of upcoming saves that lose a race

    async def get_or_create(self, user_id: str) -> Cart:
        if user_id not in self._store:
            self._store[user_id] = Cart(id=str(uuid.uuid4()), user_id=user_id)
        return self._store[user_id].model_copy(deep=True)

    async def save(self, cart: Cart) -> bool:
        stored = self._store[cart.user_id]
        if self.conflicts > 0:
            self.conflicts -= 1
            stored.version += 1
            return False
        if stored.version != cart.version:
            return False
        cart.version += 1
        self._store[cart.user_id] = cart.model_copy(deep=True)
        self.saves += 1
        return True

    async def clear(self, user_id: str) -> Cart:
        cart = self._store.get(user_id) or Cart(id=str(uuid.uuid4()), user_id=user_id)
        cart = cart.model_copy(update={"items": [], "total_amount": 0, "version": cart.version + 1})
        self._store[user_id] = cart
        return cart.model_copy(deep=True)

    def stored(self, user_id: str) -> Optional[Cart]:
        return self._store.get(user_id)


class FakeAddressRegistry:

    def __init__(self, provinces: List[Province], districts: List[District], wards: List[Ward]):
        self.provinces = provinces
        self.districts = districts
        self.wards = wards
        self.unavailable = False
        self.calls: List[tuple] = []

    def _check(self):
        if self.unavailable:
            raise AddressServiceUnavailableException("hết thời gian chờ")

    async def list_provinces(self) -> List[Province]:
        self.calls.append(("provinces",))
        self._check()
        return list(self.provinces)

    async def list_districts(self, province_id: int) -> List[District]:
        self.calls.append(("districts", province_id))
        self._check()
        return [d for d in self.districts if d.province_id == province_id]

    async def list_wards(self, district_id: int) -> List[Ward]:
        self.calls.append(("wards", district_id))
        self._check()
        return [w for w in self.wards if w.district_id == district_id]
