import asyncio
import uuid

import httpx
import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from ghostfund.context import AppContext
from ghostfund.main import app
from ghostfund.models.project import ProjectCreate
from ghostfund.services.ai_service import AIService
from ghostfund.services.blockchain_service import BlockchainService, TransferResult
from ghostfund.services.project_service import ProjectService

AI_URL = "https://api.perplexity.test"


class FailingBlockchain(BlockchainService):
    """链上调用全部失败的区块链服务"""

    def __init__(self):
        super().__init__("http://rpc.test", "0xkey", "0xcontract")
        self.funding_calls = 0

    async def create_project(self, **kwargs) -> TransferResult:
        raise RuntimeError("node unreachable")

    async def process_funding(self, project_id, amount, funder_address) -> TransferResult:
        self.funding_calls += 1
        return TransferResult(success=False, error="insufficient gas")


class SlowBlockchain(BlockchainService):
    def __init__(self):
        super().__init__("http://rpc.test", "0xkey", "0xcontract")

    async def create_project(self, **kwargs) -> TransferResult:
        await asyncio.sleep(1)
        return await super().create_project(**kwargs)

    async def process_funding(self, project_id, amount, funder_address) -> TransferResult:
        await asyncio.sleep(1)
        return await super().process_funding(project_id, amount, funder_address)


def completion_payload(text: str, citations=None) -> dict:
    payload = {"choices": [{"message": {"role": "assistant", "content": text}}]}
    if citations:
        payload["citations"] = citations
    return payload


def make_ai(handler, api_key: str = "test-key") -> AIService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AIService(client, api_key, AI_URL, "sonar")


def project_input(**overrides) -> ProjectCreate:
    data = {
        "title": "T",
        "description": "D" * 100,
        "fundingGoal": 10,
        "ownerAddress": "0xabc",
    }
    data.update(overrides)
    return ProjectCreate(**data)


@pytest.fixture
def db():
    # mongomock 中同名 host 的客户端共享数据，每个测试使用独立的库
    return AsyncMongoMockClient(tz_aware=True)[f"ghostfund_test_{uuid.uuid4().hex}"]


@pytest.fixture
def disabled_chain():
    return BlockchainService()


@pytest.fixture
def enabled_chain():
    return BlockchainService("http://rpc.test", "0xkey", "0xcontract")


@pytest.fixture
def service(db, disabled_chain):
    return ProjectService(db, disabled_chain)


@pytest.fixture
def ai_requests():
    return []


@pytest.fixture
def ai(ai_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        ai_requests.append(request)
        return httpx.Response(
            200,
            json=completion_payload(
                "Overall risk score: 3. Recommendation: approve.",
                citations=["https://example.org/source"],
            ),
        )

    return make_ai(handler)


@pytest.fixture
def api(db, disabled_chain, ai):
    """使用 mongomock 与假服务的 TestClient（不触发 lifespan）"""
    app.state.context = AppContext.build(db, disabled_chain, ai)
    client = TestClient(app)
    yield client
    del app.state.context
