"""
应用上下文（AppContext）
在 lifespan 中构建并挂到 app.state 上，路由通过 Depends(get_context) 获取，
测试中可直接替换为使用假实现的上下文
"""

from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from ghostfund.services.ai_service import AIService
from ghostfund.services.blockchain_service import BlockchainService
from ghostfund.services.project_service import ProjectService


@dataclass
class AppContext:
    """
    Attributes:
        db: MongoDB 数据库实例
        blockchain: 区块链服务
        ai: AI 文本补全服务
        projects: 项目工作流
        http_client: 共享的 HTTP 客户端（由 lifespan 负责关闭）
    """
    db: AsyncIOMotorDatabase
    blockchain: BlockchainService
    ai: AIService
    projects: ProjectService
    http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def build(
        cls,
        db: AsyncIOMotorDatabase,
        blockchain: BlockchainService,
        ai: AIService,
        **overrides,
    ) -> "AppContext":
        """根据数据库与外部服务组装上下文"""
        projects = overrides.pop("projects", None) or ProjectService(db, blockchain)
        return cls(db=db, blockchain=blockchain, ai=ai, projects=projects, **overrides)


def get_context(request: Request) -> AppContext:
    return request.app.state.context
