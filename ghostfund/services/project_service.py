"""
项目工作流（Project Workflow）
负责项目的创建、查询、资助与取消

资助流程：
1. 校验参数与项目状态
2. 调用区块链服务获取交易回执（失败则整体失败，不修改数据）
3. 单次原子条件更新：累加 current_funding 并追加交易记录
4. 达到募资目标时将状态从 active 切换为 funded
"""

import asyncio
import logging
import math
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from ghostfund.config import BLOCKCHAIN_TIMEOUT, LIST_LIMIT
from ghostfund.errors import (
    InvalidProjectState,
    PermissionDenied,
    ProjectNotFound,
    UpstreamServiceError,
    ValidationFailed,
)
from ghostfund.models.project import (
    CANCELLABLE_STATUSES,
    FUNDABLE_STATUSES,
    ProjectCreate,
)
from ghostfund.services.blockchain_service import BlockchainService, TransferResult

logger = logging.getLogger(__name__)


@dataclass
class CreationResult:
    """
    创建结果

    Attributes:
        project: 已持久化的项目文档
        linked: 是否已成功在链上注册
    """
    project: dict
    linked: bool = False


@dataclass
class FundingResult:
    project: dict
    transaction: dict


def _now() -> datetime:
    # MongoDB 只保存到毫秒，保证创建响应与后续读取一致
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class ProjectService:
    """项目工作流，依赖通过构造函数显式传入"""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        blockchain: BlockchainService,
        chain_timeout: float = BLOCKCHAIN_TIMEOUT,
    ):
        self.collection = db.projects
        self.blockchain = blockchain
        self.chain_timeout = chain_timeout

    async def create(self, data: ProjectCreate) -> CreationResult:
        """创建项目，并尽力在链上注册"""
        now = _now()
        doc = {
            "_id": str(uuid.uuid4()),
            "title": data.title,
            "description": data.description,
            "category": data.category,
            "tags": list(data.tags),
            "is_anonymous": data.is_anonymous,
            "funding_goal": data.funding_goal,
            "current_funding": 0,
            "status": "active",
            "owner_address": data.owner_address,
            "contract_address": None,
            "transaction_hash": None,
            "created_at": now,
            "updated_at": now,
            "deadline": now + timedelta(days=data.duration),
            "transactions": [],
        }
        await self.collection.insert_one(doc)
        logger.info("已创建项目 [%s] %s", doc["_id"], data.title)

        linked = await self._register_on_chain(doc, data)
        return CreationResult(project=doc, linked=linked)

    async def _register_on_chain(self, doc: dict, data: ProjectCreate) -> bool:
        """链上注册失败只记录日志，不影响项目创建"""
        if not self.blockchain.enabled:
            logger.info("区块链服务未启用，跳过链上注册 [%s]", doc["_id"])
            return False

        try:
            result: TransferResult = await asyncio.wait_for(
                self.blockchain.create_project(
                    title=data.title,
                    description=data.description,
                    funding_goal=data.funding_goal,
                    owner_address=data.owner_address,
                    duration=data.duration,
                ),
                timeout=self.chain_timeout,
            )
        except Exception:
            logger.warning("链上注册异常 [%s]", doc["_id"], exc_info=True)
            return False

        if not result.success:
            logger.warning("链上注册失败 [%s]: %s", doc["_id"], result.error)
            return False

        update = {
            "contract_address": result.project_address,
            "transaction_hash": result.transaction.get("hash"),
            "updated_at": _now(),
        }
        await self.collection.update_one({"_id": doc["_id"]}, {"$set": update})
        doc.update(update)
        return True

    async def list_projects(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[dict]:
        """按状态、分类、关键字筛选项目，按创建时间倒序"""
        query = {}
        if status and status != "all":
            query["status"] = status
        if category and category != "all":
            query["category"] = category
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [{"title": pattern}, {"description": pattern}]

        cursor = self.collection.find(query).sort("created_at", -1).limit(LIST_LIMIT)
        items = []
        async for doc in cursor:
            items.append(doc)
        return items

    async def get_by_id(self, project_id: str) -> dict:
        doc = await self.collection.find_one({"_id": project_id})
        if not doc:
            raise ProjectNotFound(project_id)
        return doc

    async def fund(self, project_id: str, amount: float, funder_address: str) -> FundingResult:
        """资助项目"""
        if not project_id or not funder_address:
            raise ValidationFailed("Missing required funding information")
        if amount is None or not math.isfinite(amount) or amount <= 0:
            raise ValidationFailed("Amount must be a positive number")

        project = await self.get_by_id(project_id)
        self._ensure_fundable(project)

        try:
            result: TransferResult = await asyncio.wait_for(
                self.blockchain.process_funding(project_id, amount, funder_address),
                timeout=self.chain_timeout,
            )
        except asyncio.TimeoutError:
            logger.error("资助交易超时 [%s]", project_id)
            raise UpstreamServiceError("Blockchain transaction timed out")
        except Exception as e:
            logger.error("资助交易异常 [%s]", project_id, exc_info=True)
            raise UpstreamServiceError(f"Blockchain transaction failed: {e}") from e
        if not result.success:
            logger.error("资助交易失败 [%s]: %s", project_id, result.error)
            raise UpstreamServiceError(f"Blockchain transaction failed: {result.error}")

        now = _now()
        entry = {
            "funder_address": funder_address,
            "amount": amount,
            "timestamp": now,
            "transaction_hash": result.transaction.get("hash"),
        }
        # 以 status 作为条件，累加与追加在同一次更新中完成
        updated = await self.collection.find_one_and_update(
            {"_id": project_id, "status": {"$in": list(FUNDABLE_STATUSES)}},
            {
                "$inc": {"current_funding": amount},
                "$push": {"transactions": entry},
                "$set": {"updated_at": now},
            },
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            # 回执已生成但项目在此期间被修改
            logger.warning("资助时项目状态已变化 [%s]", project_id)
            current = await self.get_by_id(project_id)
            self._ensure_fundable(current)
            raise InvalidProjectState(
                "Project changed while the funding was processed, please retry",
                current["status"],
            )

        if updated["current_funding"] >= updated["funding_goal"]:
            flipped = await self.collection.find_one_and_update(
                {"_id": project_id, "status": "active"},
                {"$set": {"status": "funded", "updated_at": now}},
                return_document=ReturnDocument.AFTER,
            )
            if flipped is not None:
                logger.info("项目已达成募资目标 [%s]", project_id)
                updated = flipped

        return FundingResult(project=updated, transaction=result.transaction)

    async def cancel(self, project_id: str, owner_address: str) -> dict:
        """取消项目，仅限发起人"""
        project = await self.get_by_id(project_id)
        if project["owner_address"] != owner_address:
            raise PermissionDenied("Only the project owner can cancel this project")
        if project["status"] not in CANCELLABLE_STATUSES:
            raise InvalidProjectState(
                f"Project cannot be cancelled in its current status: {project['status']}",
                project["status"],
            )

        updated = await self.collection.find_one_and_update(
            {"_id": project_id, "status": {"$in": list(CANCELLABLE_STATUSES)}},
            {"$set": {"status": "cancelled", "updated_at": _now()}},
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            current = await self.get_by_id(project_id)
            raise InvalidProjectState(
                f"Project cannot be cancelled in its current status: {current['status']}",
                current["status"],
            )
        logger.info("项目已取消 [%s]", project_id)
        return updated

    async def chain_details(self, project_id: str) -> dict:
        """查询项目的链上信息，项目须已在链上注册"""
        project = await self.get_by_id(project_id)
        if not project.get("contract_address"):
            raise InvalidProjectState(
                "Project is not registered on chain", project.get("status")
            )

        try:
            result: TransferResult = await asyncio.wait_for(
                self.blockchain.get_project_details(project["contract_address"], project),
                timeout=self.chain_timeout,
            )
        except asyncio.TimeoutError:
            raise UpstreamServiceError("Blockchain lookup timed out")
        if not result.success:
            logger.error("链上查询失败 [%s]: %s", project_id, result.error)
            raise UpstreamServiceError(f"Blockchain lookup failed: {result.error}")
        return {"contractAddress": result.project_address, "details": result.details}

    async def private_fund(self, project_id: str, amount: float) -> dict:
        """生成隐私资助指引，不修改项目数据"""
        if amount is None or not math.isfinite(amount) or amount <= 0:
            raise ValidationFailed("Amount must be a positive number")
        project = await self.get_by_id(project_id)
        self._ensure_fundable(project)
        return await self.blockchain.generate_private_transaction(project_id, amount)

    @staticmethod
    def _ensure_fundable(project: dict):
        status = project.get("status")
        if status not in FUNDABLE_STATUSES:
            raise InvalidProjectState(
                f"Project is not accepting funding (current status: {status})", status
            )
