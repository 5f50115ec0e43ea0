import logging
import math
from typing import List, Optional, Protocol, Tuple

from fastapi import BackgroundTasks

from core.exceptions import (
    BranchInUseException,
    BranchNotFoundException,
    IncompleteAddressException,
)
from schemas.branch import BranchBase, BranchCreate, BranchUpdate
from services.address_validator import AddressValidator
from services.reference_guard import ReferenceGuard

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("province_code", "district_code", "ward_code")


class BranchRepository(Protocol):
    async def insert(self, data: dict) -> dict: ...

    async def find_page(self, search: Optional[str], sort: Optional[str], skip: int, limit: int) -> Tuple[List[dict], int]: ...

    async def get(self, branch_id: str) -> Optional[dict]: ...

    async def update(self, branch_id: str, data: dict) -> Optional[dict]: ...

    async def delete(self, branch_id: str) -> bool: ...

    async def count(self) -> int: ...


def _check_address_triple(payload: BranchBase) -> bool:
    """True when a full triple is present, False when none is; raises on a partial one."""
    supplied = [c is not None and str(c).strip() != "" for c in payload.address_codes()]
    if any(supplied) and not all(supplied):
        raise IncompleteAddressException()
    return all(supplied)


def _strip_codes(data: dict) -> dict:
    for key in ADDRESS_FIELDS:
        if data.get(key) is not None:
            data[key] = str(data[key]).strip()
    return data


class BranchService:

    def __init__(self, branches: BranchRepository, validator: AddressValidator, guard: ReferenceGuard):
        self.branches = branches
        self.validator = validator
        self.guard = guard

    async def create(self, payload: BranchCreate) -> dict:
        if not _check_address_triple(payload):
            raise IncompleteAddressException()
        data = _strip_codes(payload.model_dump())
        await self.validator.validate(data["province_code"], data["district_code"], data["ward_code"])

        branch = await self.branches.insert(data)
        logger.info("Created branch %s (%s)", branch["id"], branch["name"])
        return branch

    async def list(self, page: int = 1, limit: int = 10, search: Optional[str] = None, sort: Optional[str] = None) -> dict:
        page = max(page, 1)
        limit = max(limit, 1)
        data, total = await self.branches.find_page(search, sort, (page - 1) * limit, limit)
        return {
            "data": data,
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "total_pages": math.ceil(total / limit),
            },
        }

    async def get(self, branch_id: str) -> dict:
        branch = await self.branches.get(branch_id)
        if not branch:
            raise BranchNotFoundException(branch_id)
        return branch

    async def update(self, branch_id: str, payload: BranchUpdate) -> dict:
        has_address = _check_address_triple(payload)
        existing = await self.get(branch_id)

        update_data = _strip_codes(payload.model_dump(exclude_none=True))
        if not has_address:
            for key in ADDRESS_FIELDS:
                update_data.pop(key, None)
        if not update_data:
            return existing
        if has_address:
            await self.validator.validate(*(update_data[key] for key in ADDRESS_FIELDS))

        branch = await self.branches.update(branch_id, update_data)
        if not branch:
            raise BranchNotFoundException(branch_id)
        return branch

    async def delete(self, branch_id: str) -> None:
        await self.get(branch_id)
        count = await self.guard.count_references(branch_id)
        if count > 0:
            logger.warning("Refusing to delete branch %s: %d products reference it", branch_id, count)
            raise BranchInUseException(branch_id, count)

        if not await self.branches.delete(branch_id):
            raise BranchNotFoundException(branch_id)
        logger.info("Deleted branch %s", branch_id)

    async def delete_with_cascade(self, branch_id: str, background_tasks: Optional[BackgroundTasks] = None) -> dict:
        """Strip the branch from every product, delete it, then sweep orphaned inventory.

        With background_tasks the sweep runs after the response is sent;
        otherwise it runs inline. Either way its failure is only logged.
        """
        branch = await self.get(branch_id)
        stripped = await self.guard.strip_references(branch_id)

        if not await self.branches.delete(branch_id):
            raise BranchNotFoundException(branch_id)
        logger.info("Force-deleted branch %s, %d products updated", branch_id, stripped["updated_count"])

        if background_tasks is not None:
            background_tasks.add_task(self.guard.cleanup_safely)
        else:
            await self.guard.cleanup_safely()

        return {
            "success": True,
            "message": f"Đã xóa chi nhánh {branch['name']} và cập nhật {stripped['updated_count']} sản phẩm",
            "products_updated": stripped["updated_count"],
        }

    async def products_count(self, branch_id: str) -> dict:
        branch = await self.get(branch_id)
        return {
            "branch_id": branch_id,
            "products_count": await self.guard.count_references(branch_id),
            "branch_name": branch["name"],
        }

    async def statistics(self) -> dict:
        return {"total_branches": await self.branches.count()}
