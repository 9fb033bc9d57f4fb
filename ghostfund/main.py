"""
GhostFund — 注重隐私的众筹平台
FastAPI 应用入口
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ghostfund.config import (
    CHAIN_RPC_URL,
    CONTRACT_ADDRESS,
    LOG_LEVEL,
    PERPLEXITY_API_KEY,
    PERPLEXITY_API_URL,
    PERPLEXITY_MODEL,
    PRIVATE_KEY,
)
from ghostfund.context import AppContext
from ghostfund.database import connect_db, close_db
from ghostfund.errors import GhostFundError
from ghostfund.services.ai_service import AIService
from ghostfund.services.blockchain_service import BlockchainService
from ghostfund.utils.http_client import create_client, close_client
from ghostfund.api.projects import router as projects_router
from ghostfund.api.chat import router as chat_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    mongo_client, db = await connect_db()
    http_client = create_client()
    blockchain = BlockchainService(CHAIN_RPC_URL, PRIVATE_KEY, CONTRACT_ADDRESS)
    ai = AIService(http_client, PERPLEXITY_API_KEY, PERPLEXITY_API_URL, PERPLEXITY_MODEL)
    app.state.context = AppContext.build(db, blockchain, ai, http_client=http_client)
    logger.info("GhostFund 已启动（区块链: %s）", blockchain.mode)
    yield
    await close_client(http_client)
    close_db(mongo_client)


app = FastAPI(
    title="GhostFund",
    description="注重隐私的众筹平台后端",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS 中间件
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(projects_router)
app.include_router(chat_router)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status_code)


@app.exception_handler(GhostFundError)
async def ghostfund_error_handler(request: Request, exc: GhostFundError):
    return _error(exc.message, exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """请求体校验失败统一返回 400"""
    details = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        details.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg"))
    return _error("Invalid request: " + "; ".join(details), 400)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(str(exc.detail), exc.status_code)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("未处理的异常: %s %s", request.method, request.url.path, exc_info=exc)
    return _error("Server error", 500)


@app.get("/api/health")
async def health_check(request: Request):
    ctx = getattr(request.app.state, "context", None)
    return {
        "status": "ok",
        "service": "GhostFund",
        "blockchain": ctx.blockchain.mode if ctx else "unknown",
    }
