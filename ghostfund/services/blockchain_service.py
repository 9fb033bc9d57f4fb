"""
区块链服务（模拟转账）
当前不与链上合约交互，只生成模拟的交易回执；
RPC 地址、签名私钥、合约地址任意一项缺失时进入开发模式（disabled），
此时创建项目时跳过链上注册，资助交易仍返回模拟回执
"""

import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

# .env.example 中的占位值，视同未配置
_PLACEHOLDERS = {
    "your_rpc_url_here",
    "your_private_key_here",
    "your_contract_address_here",
}

PRIVATE_FUND_INSTRUCTIONS = [
    "Send the exact amount to the deposit address",
    "Save your note securely - you'll need it to claim funds",
    "Wait for confirmation (typically 10-20 blocks)",
]


@dataclass
class TransferResult:
    """
    链上操作结果

    Attributes:
        success: 是否成功
        transaction: 交易回执（至少包含 hash）
        project_address: 项目在链上的合约地址（创建项目时返回）
        details: 链上读取到的项目信息（查询项目时返回）
        error: 错误信息
    """
    success: bool = True
    transaction: dict = field(default_factory=dict)
    project_address: Optional[str] = None
    details: dict = field(default_factory=dict)
    error: Optional[str] = None


def _fake_hash() -> str:
    return "0x" + secrets.token_hex(32)


def _fake_address() -> str:
    return "0x" + secrets.token_hex(20)


def _configured(value: str) -> bool:
    return bool(value) and value not in _PLACEHOLDERS


class BlockchainService:
    """模拟的资金转移服务"""

    def __init__(self, rpc_url: str = "", private_key: str = "", contract_address: str = ""):
        self.rpc_url = rpc_url
        self.contract_address = contract_address or None
        self._private_key = private_key
        self.enabled = self._check_config(rpc_url, private_key, contract_address)

    @staticmethod
    def _check_config(rpc_url: str, private_key: str, contract_address: str) -> bool:
        missing = [
            name
            for name, value in (
                ("CHAIN_RPC_URL", rpc_url),
                ("PRIVATE_KEY", private_key),
                ("CONTRACT_ADDRESS", contract_address),
            )
            if not _configured(value)
        ]
        if missing:
            logger.warning("区块链配置缺失 %s，运行在开发模式", ", ".join(missing))
            return False
        logger.info("区块链服务已初始化: %s", rpc_url)
        return True

    @property
    def mode(self) -> str:
        return "enabled" if self.enabled else "disabled"

    async def create_project(
        self,
        title: str,
        description: str,
        funding_goal: float,
        owner_address: str,
        duration: int,
    ) -> TransferResult:
        """在链上注册项目"""
        if not self.enabled:
            return TransferResult(success=False, error="Blockchain service is disabled")

        tx = {
            "hash": _fake_hash(),
            "to": self.contract_address,
            "timestamp": int(time.time() * 1000),
        }
        logger.info("链上注册项目 [%s] owner=%s tx=%s", title, owner_address, tx["hash"])
        return TransferResult(
            success=True, transaction=tx, project_address=self.contract_address
        )

    async def process_funding(
        self, project_id: str, amount: float, funder_address: str
    ) -> TransferResult:
        """处理一笔资助转账，返回模拟回执"""
        tx = {
            "hash": _fake_hash(),
            "from": funder_address,
            "to": self.contract_address,
            "value": amount,
            "timestamp": int(time.time() * 1000),
        }
        logger.info("资助交易 project=%s amount=%s tx=%s", project_id, amount, tx["hash"])
        return TransferResult(success=True, transaction=tx)

    async def get_project_details(self, project_address: str, project: dict) -> TransferResult:
        """
        读取项目在链上的状态

        模拟链没有独立状态，按已登记的项目记录返回合约视图
        """
        if not self.enabled:
            return TransferResult(success=False, error="Blockchain service is disabled")
        if not project_address:
            return TransferResult(success=False, error="Project is not registered on chain")

        details = {
            "title": project["title"],
            "description": project["description"],
            "fundingGoal": project["funding_goal"],
            "currentFunding": project["current_funding"],
            "ownerAddress": project["owner_address"],
            "deadline": project["deadline"].isoformat(),
        }
        return TransferResult(success=True, project_address=project_address, details=details)

    async def generate_private_transaction(self, project_id: str, amount: float) -> dict:
        """生成隐私资助所需的一次性存款地址与凭证"""
        return {
            "depositAddress": _fake_address(),
            "note": f"ghostfund-{secrets.token_hex(16)}",
            "amount": amount,
            "instructions": list(PRIVATE_FUND_INSTRUCTIONS),
        }
