"""
Cart persistence.

Lazy creation and clear are single atomic upserts. Other writes are
version-checked: save() only succeeds when the stored version still equals
the version that was loaded.
"""

import uuid
from datetime import datetime, timezone

from pymongo import ReturnDocument

from schemas.cart import Cart


def to_cart(doc: dict) -> Cart:
    return Cart(
        id=str(doc["_id"]),
        user_id=doc["user_id"],
        items=doc.get("items", []),
        total_amount=doc.get("total_amount", 0),
        version=doc.get("version", 0),
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
    )


class MongoCartRepository:

    def __init__(self, database):
        self.collection = database.carts

    async def get_or_create(self, user_id: str) -> Cart:
        now = datetime.now(timezone.utc)
        doc = await self.collection.find_one_and_update(
            {"user_id": user_id},
            {"$setOnInsert": {
                "_id": str(uuid.uuid4()),
                "items": [],
                "total_amount": 0,
                "version": 0,
                "created_at": now,
                "updated_at": now,
            }},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return to_cart(doc)

    async def save(self, cart: Cart) -> bool:
        """Write items/total if nobody else has written since the cart was loaded."""
        now = datetime.now(timezone.utc)
        query = {"_id": cart.id, "version": cart.version}
        if cart.version == 0:
            # carts written before versioning have no version field
            query = {"_id": cart.id, "$or": [{"version": 0}, {"version": {"$exists": False}}]}
        result = await self.collection.update_one(
            query,
            {
                "$set": {
                    "items": [item.model_dump() for item in cart.items],
                    "total_amount": cart.total_amount,
                    "updated_at": now,
                },
                "$inc": {"version": 1},
            },
        )
        if result.matched_count == 0:
            return False
        cart.version += 1
        cart.updated_at = now
        return True

    async def clear(self, user_id: str) -> Cart:
        now = datetime.now(timezone.utc)
        doc = await self.collection.find_one_and_update(
            {"user_id": user_id},
            {
                "$set": {"items": [], "total_amount": 0, "updated_at": now},
                "$inc": {"version": 1},
                "$setOnInsert": {"_id": str(uuid.uuid4()), "created_at": now},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return to_cart(doc)
