"""
Read access to the product catalog, plus the branch-reference maintenance
operations that keep product inventory consistent with the branch registry.

Products embed their variants and two inventory lists:
  variant_inventory: [{branch_id, variant_id, quantity}]
  inventory:         [{branch_id, quantity, low_stock_threshold}]  (per-branch totals)
"""

import logging
from collections import OrderedDict
from typing import Callable, Dict, Iterable, List, Optional

from schemas.product import BranchStock, BrandSummary, ProductSummary, Variant

logger = logging.getLogger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 5


def variant_from_product(doc: dict, variant_id: str) -> Optional[Variant]:
    for v in doc.get("variants") or []:
        if str(v.get("variant_id", "")) == variant_id:
            stock = [
                BranchStock(branch_id=str(inv["branch_id"]), quantity=max(int(inv.get("quantity", 0)), 0))
                for inv in doc.get("variant_inventory") or []
                if str(inv.get("variant_id", "")) == variant_id and inv.get("branch_id") is not None
            ]
            return Variant(
                product_id=str(doc["_id"]),
                variant_id=variant_id,
                sku=v.get("sku"),
                price=v.get("price") or 0,
                promotion_price=v.get("promotion_price"),
                options=v.get("options") or {},
                inventory=stock,
            )
    return None


def _rebuild_inventory(doc: dict, keep: Callable[[str], bool]) -> Optional[dict]:
    """Drop inventory entries whose branch fails ``keep``.

    Returns the fields to $set, or None when nothing referenced a dropped branch.
    """
    variant_inventory = doc.get("variant_inventory") or []
    inventory = doc.get("inventory") or []

    kept_variant_inventory = [inv for inv in variant_inventory if keep(str(inv.get("branch_id")))]
    kept_inventory = [inv for inv in inventory if keep(str(inv.get("branch_id")))]
    if len(kept_variant_inventory) == len(variant_inventory) and len(kept_inventory) == len(inventory):
        return None

    if doc.get("variants"):
        # per-branch totals follow the variant stock
        thresholds = {str(inv.get("branch_id")): inv.get("low_stock_threshold", DEFAULT_LOW_STOCK_THRESHOLD)
                      for inv in kept_inventory}
        totals: "OrderedDict[str, int]" = OrderedDict()
        for inv in kept_variant_inventory:
            branch_id = str(inv.get("branch_id"))
            totals[branch_id] = totals.get(branch_id, 0) + int(inv.get("quantity", 0))
        kept_inventory = [
            {
                "branch_id": branch_id,
                "quantity": quantity,
                "low_stock_threshold": thresholds.get(branch_id, DEFAULT_LOW_STOCK_THRESHOLD),
            }
            for branch_id, quantity in totals.items()
        ]

    update = {"variant_inventory": kept_variant_inventory, "inventory": kept_inventory}
    total_stock = sum(int(inv.get("quantity", 0)) for inv in kept_inventory)
    status = doc.get("status")
    if total_stock <= 0 and status == "active":
        update["status"] = "out_of_stock"
    elif total_stock > 0 and status == "out_of_stock":
        update["status"] = "active"
    return update


def strip_branch(doc: dict, branch_id: str) -> Optional[dict]:
    return _rebuild_inventory(doc, lambda b: b != branch_id)


def strip_orphans(doc: dict, live_branch_ids: Iterable[str]) -> Optional[dict]:
    live = set(live_branch_ids)
    return _rebuild_inventory(doc, lambda b: b in live)


def _branch_filter(branch_id: str) -> dict:
    return {"$or": [
        {"inventory.branch_id": branch_id},
        {"variant_inventory.branch_id": branch_id},
    ]}


def _primary_image(images) -> Optional[str]:
    if not images:
        return None
    for img in images:
        if isinstance(img, dict) and img.get("is_primary"):
            return img.get("url")
    first = images[0]
    return first.get("url") if isinstance(first, dict) else str(first)


class MongoCatalog:

    def __init__(self, database):
        self.products = database.products
        self.brands = database.brands
        self.branches = database.branches

    async def find_variant(self, product_id: str, variant_id: str) -> Optional[Variant]:
        doc = await self.products.find_one(
            {"_id": product_id},
            {"variants": 1, "variant_inventory": 1},
        )
        if not doc:
            return None
        return variant_from_product(doc, variant_id)

    async def count_products_referencing_branch(self, branch_id: str) -> int:
        return await self.products.count_documents(_branch_filter(branch_id))

    async def remove_branch_from_products(self, branch_id: str) -> int:
        updated = 0
        async for doc in self.products.find(_branch_filter(branch_id)):
            changes = strip_branch(doc, branch_id)
            if changes is None:
                continue
            await self.products.update_one({"_id": doc["_id"]}, {"$set": changes})
            updated += 1
        logger.info("Removed branch %s from %d products", branch_id, updated)
        return updated

    async def cleanup_orphaned_inventory(self) -> int:
        live = [str(i) for i in await self.branches.distinct("_id")]
        query = {"$or": [
            {"inventory": {"$elemMatch": {"branch_id": {"$nin": live}}}},
            {"variant_inventory": {"$elemMatch": {"branch_id": {"$nin": live}}}},
        ]}
        cleaned = 0
        async for doc in self.products.find(query):
            changes = strip_orphans(doc, live)
            if changes is None:
                continue
            await self.products.update_one({"_id": doc["_id"]}, {"$set": changes})
            cleaned += 1
        logger.info("Orphaned inventory cleanup touched %d products", cleaned)
        return cleaned

    async def get_display(self, product_ids: List[str]) -> Dict[str, ProductSummary]:
        if not product_ids:
            return {}
        docs = await self.products.find(
            {"_id": {"$in": list(set(product_ids))}},
            {"name": 1, "slug": 1, "images": 1, "brand_id": 1},
        ).to_list(length=None)

        brand_ids = list({d["brand_id"] for d in docs if d.get("brand_id")})
        brands: Dict[str, BrandSummary] = {}
        if brand_ids:
            async for b in self.brands.find({"_id": {"$in": brand_ids}}, {"name": 1, "slug": 1}):
                brands[str(b["_id"])] = BrandSummary(id=str(b["_id"]), name=b.get("name", ""), slug=b.get("slug"))

        return {
            str(d["_id"]): ProductSummary(
                id=str(d["_id"]),
                name=d.get("name", ""),
                slug=d.get("slug"),
                image=_primary_image(d.get("images")),
                brand=brands.get(str(d.get("brand_id"))) if d.get("brand_id") else None,
            )
            for d in docs
        }
