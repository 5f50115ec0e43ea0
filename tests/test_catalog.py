"""Tests for the pure product-document helpers used by the catalog."""

from repositories.branch_repository import build_search_query, parse_sort
from repositories.catalog import _primary_image, strip_branch, strip_orphans, variant_from_product
from tests.conftest import BRANCH_A, BRANCH_B, make_product


class TestVariantFromProduct:

    def test_variant_with_branch_stock(self):
        variant = variant_from_product(make_product(), "V1")

        assert variant.price == 100000
        assert {(s.branch_id, s.quantity) for s in variant.inventory} == {(BRANCH_A, 10), (BRANCH_B, 5)}

    def test_missing_variant(self):
        assert variant_from_product(make_product(), "V9") is None

    def test_negative_stock_clamped(self):
        doc = make_product()
        doc["variant_inventory"][0]["quantity"] = -3
        variant = variant_from_product(doc, "V1")
        assert variant.inventory[0].quantity == 0

    def test_effective_price(self):
        assert variant_from_product(make_product(), "V2").effective_price == 200000
        doc = make_product()
        doc["variants"][1]["promotion_price"] = 0
        assert variant_from_product(doc, "V2").effective_price == 250000


class TestStripBranch:

    def test_recomputes_branch_totals(self):
        changes = strip_branch(make_product(), BRANCH_B)

        assert changes["variant_inventory"] == [
            {"branch_id": BRANCH_A, "variant_id": "V1", "quantity": 10},
            {"branch_id": BRANCH_A, "variant_id": "V2", "quantity": 2},
        ]
        assert changes["inventory"] == [{"branch_id": BRANCH_A, "quantity": 12, "low_stock_threshold": 3}]
        assert "status" not in changes

    def test_untouched_product(self):
        assert strip_branch(make_product(), "branch-zzz") is None

    def test_last_branch_marks_out_of_stock(self):
        doc = make_product()
        changes = strip_branch(doc, BRANCH_A)
        doc.update(changes)
        changes = strip_branch(doc, BRANCH_B)

        assert changes["inventory"] == []
        assert changes["status"] == "out_of_stock"

    def test_product_without_variants_keeps_inventory_rows(self):
        doc = {
            "_id": "P9",
            "status": "active",
            "inventory": [
                {"branch_id": BRANCH_A, "quantity": 4, "low_stock_threshold": 2},
                {"branch_id": BRANCH_B, "quantity": 0, "low_stock_threshold": 2},
            ],
        }
        changes = strip_branch(doc, BRANCH_B)
        assert changes["inventory"] == [{"branch_id": BRANCH_A, "quantity": 4, "low_stock_threshold": 2}]


class TestStripOrphans:

    def test_orphaned_branch_removed(self):
        changes = strip_orphans(make_product(), {BRANCH_B})
        assert {inv["branch_id"] for inv in changes["variant_inventory"]} == {BRANCH_B}

    def test_out_of_stock_product_reactivated(self):
        doc = make_product(status="out_of_stock")
        changes = strip_orphans(doc, {BRANCH_A})
        assert changes["status"] == "active"

    def test_all_live(self):
        assert strip_orphans(make_product(), [BRANCH_A, BRANCH_B]) is None


class TestQueryHelpers:

    def test_parse_sort(self):
        assert parse_sort(None) == ("created_at", -1)
        assert parse_sort("name,desc") == ("name", -1)
        assert parse_sort("address") == ("address", 1)
        assert parse_sort("password,asc") == ("created_at", 1)

    def test_search_query_escapes_regex(self):
        query = build_search_query("a.b")
        assert query["$or"][0] == {"name": {"$regex": r"a\.b", "$options": "i"}}
        assert build_search_query("") == {}

    def test_primary_image(self):
        images = [{"url": "a.jpg"}, {"url": "b.jpg", "is_primary": True}]
        assert _primary_image(images) == "b.jpg"
        assert _primary_image(["c.jpg"]) == "c.jpg"
        assert _primary_image(None) is None
