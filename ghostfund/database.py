"""
GhostFund 数据库连接管理
使用 Motor 异步驱动连接 MongoDB
"""

import logging
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ghostfund.config import MONGODB_URI, DATABASE_NAME

logger = logging.getLogger(__name__)


async def ensure_indexes(db: AsyncIOMotorDatabase):
    """创建列表查询用到的索引"""
    await db.projects.create_index("status")
    await db.projects.create_index("category")
    await db.projects.create_index("created_at")


async def connect_db(
    uri: str = MONGODB_URI, name: str = DATABASE_NAME
) -> tuple[AsyncIOMotorClient, AsyncIOMotorDatabase]:
    """连接 MongoDB 数据库，返回客户端与数据库实例"""
    client = AsyncIOMotorClient(uri, tz_aware=True)
    db = client[name]
    await ensure_indexes(db)
    logger.info("已连接 MongoDB: %s / %s", uri, name)
    return client, db


def close_db(client: AsyncIOMotorClient):
    """关闭数据库连接"""
    if client:
        client.close()
        logger.info("MongoDB 连接已关闭")
