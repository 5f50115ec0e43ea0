from services.inventory import Resolved, Stale
from tests.conftest import BRANCH_A, BRANCH_B


class TestResolve:

    async def test_existing_variant(self, resolver):
        result = await resolver.resolve("P1", "V1")
        assert isinstance(result, Resolved)
        assert result.variant.variant_id == "V1"

    async def test_missing_variant_is_stale(self, resolver):
        assert await resolver.resolve("P1", "V9") == Stale(product_id="P1", variant_id="V9")

    async def test_missing_product_is_stale(self, resolver):
        assert isinstance(await resolver.resolve("P404", "V1"), Stale)


class TestAvailableQuantity:

    async def test_per_branch(self, resolver):
        assert await resolver.available_quantity("P1", "V1", BRANCH_A) == 10
        assert await resolver.available_quantity("P1", "V1", BRANCH_B) == 5

    async def test_summed_without_branch(self, resolver):
        assert await resolver.available_quantity("P1", "V1") == 15

    async def test_branch_without_entry(self, resolver):
        assert await resolver.available_quantity("P1", "V2", BRANCH_B) == 0

    async def test_stale_variant_has_nothing(self, resolver):
        assert await resolver.available_quantity("P1", "V9") == 0
