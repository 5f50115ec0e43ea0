import logging
from typing import Dict, Protocol

logger = logging.getLogger(__name__)


class BranchReferenceCatalog(Protocol):
    async def count_products_referencing_branch(self, branch_id: str) -> int: ...

    async def remove_branch_from_products(self, branch_id: str) -> int: ...

    async def cleanup_orphaned_inventory(self) -> int: ...


class ReferenceGuard:
    """Keeps product inventory from pointing at branches that no longer exist."""

    def __init__(self, catalog: BranchReferenceCatalog):
        self.catalog = catalog

    async def count_references(self, branch_id: str) -> int:
        return await self.catalog.count_products_referencing_branch(branch_id)

    async def strip_references(self, branch_id: str) -> Dict[str, int]:
        updated = await self.catalog.remove_branch_from_products(branch_id)
        return {"updated_count": updated}

    async def cleanup_orphaned_inventory(self) -> Dict[str, int]:
        cleaned = await self.catalog.cleanup_orphaned_inventory()
        return {"cleaned_count": cleaned}

    async def cleanup_safely(self) -> None:
        """Run the sweep after a cascade delete; failures are only logged."""
        try:
            result = await self.cleanup_orphaned_inventory()
            logger.info("Orphaned inventory cleanup finished: %s", result)
        except Exception:
            logger.exception("Orphaned inventory cleanup failed")
