import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pymongo import ReturnDocument

SORTABLE_FIELDS = {"name", "address", "contact", "created_at", "updated_at"}


def to_out(doc: dict) -> dict:
    return {"id": str(doc["_id"]), **{k: v for k, v in doc.items() if k != "_id"}}


def build_search_query(search: Optional[str]) -> Dict[str, Any]:
    if not search:
        return {}
    pattern = re.escape(search.strip())
    return {"$or": [
        {"name": {"$regex": pattern, "$options": "i"}},
        {"address": {"$regex": pattern, "$options": "i"}},
        {"contact": {"$regex": pattern, "$options": "i"}},
    ]}


def parse_sort(sort: Optional[str]) -> Tuple[str, int]:
    """'name,asc' -> ('name', 1). Mặc định: mới nhất trước."""
    if not sort:
        return "created_at", -1
    field, _, order = sort.partition(",")
    field = field.strip()
    if field not in SORTABLE_FIELDS:
        field = "created_at"
    return field, -1 if order.strip().lower() == "desc" else 1


class MongoBranchRepository:

    def __init__(self, database):
        self.collection = database.branches

    async def insert(self, data: dict) -> dict:
        now = datetime.now(timezone.utc)
        doc = {"_id": str(uuid.uuid4()), **data, "created_at": now, "updated_at": now}
        await self.collection.insert_one(doc)
        return to_out(doc)

    async def find_page(
        self, search: Optional[str], sort: Optional[str], skip: int, limit: int
    ) -> Tuple[List[dict], int]:
        query = build_search_query(search)
        field, direction = parse_sort(sort)
        total = await self.collection.count_documents(query)
        cursor = self.collection.find(query).sort([(field, direction), ("_id", direction)]).skip(skip).limit(limit)
        return [to_out(d) async for d in cursor], total

    async def get(self, branch_id: str) -> Optional[dict]:
        doc = await self.collection.find_one({"_id": branch_id})
        return to_out(doc) if doc else None

    async def update(self, branch_id: str, data: dict) -> Optional[dict]:
        doc = await self.collection.find_one_and_update(
            {"_id": branch_id},
            {"$set": {**data, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
        return to_out(doc) if doc else None

    async def delete(self, branch_id: str) -> bool:
        result = await self.collection.delete_one({"_id": branch_id})
        return result.deleted_count > 0

    async def count(self) -> int:
        return await self.collection.count_documents({})
