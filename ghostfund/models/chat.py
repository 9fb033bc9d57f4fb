"""
聊天接口数据模型
"""

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """聊天请求体"""
    message: str = Field(..., min_length=1, max_length=4000, description="用户消息")

    model_config = {"str_strip_whitespace": True}
