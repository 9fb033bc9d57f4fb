"""
HTTP 请求客户端封装
基于 httpx 异步客户端，复用连接池，供外部 API 调用共享
"""

import logging
import httpx

from ghostfund.config import REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


def create_client(
    timeout: float = REQUEST_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """创建共享的 AsyncClient（在 FastAPI lifespan 中调用）"""
    client = httpx.AsyncClient(
        timeout=timeout,
        transport=transport,
        limits=httpx.Limits(
            max_connections=50,
            max_keepalive_connections=10,
        ),
    )
    logger.info("HTTP 客户端已初始化（超时 %ss）", timeout)
    return client


async def close_client(client: httpx.AsyncClient | None):
    """关闭 HTTP 客户端（在 FastAPI lifespan 中调用）"""
    if client is not None:
        await client.aclose()
        logger.info("HTTP 客户端已关闭")
