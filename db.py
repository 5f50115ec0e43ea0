from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING

from core.config import settings

client = AsyncIOMotorClient(settings.MONGO_URL)
db = client[settings.MONGO_DB]


async def ensure_indexes():
    """Tạo các index cần thiết (chạy lúc khởi động)."""
    await db.carts.create_index([("user_id", ASCENDING)], unique=True)
    await db.branches.create_index([("created_at", ASCENDING)])
    await db.products.create_index([("variant_inventory.branch_id", ASCENDING)])
    await db.products.create_index([("inventory.branch_id", ASCENDING)])
