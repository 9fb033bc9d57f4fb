"""
聊天助手 API
"""

import logging
from fastapi import APIRouter, Depends

from ghostfund.context import AppContext, get_context
from ghostfund.errors import UpstreamServiceError
from ghostfund.models.chat import ChatRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["聊天助手"])


@router.post("")
async def chat(body: ChatRequest, ctx: AppContext = Depends(get_context)):
    """向 AI 助手发送消息"""
    result = await ctx.ai.get_chat_response(body.message)
    if not result.success:
        logger.error("聊天请求失败: %s", result.error)
        raise UpstreamServiceError(result.error or "Failed to get chat response")

    payload = {"success": True, "response": result.text}
    if result.citations:
        payload["citations"] = result.citations
    return payload
