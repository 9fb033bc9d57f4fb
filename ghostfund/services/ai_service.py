"""
AI 服务
调用 Perplexity chat-completions 接口，提供项目风险分析、改进建议与聊天助手
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

import httpx

from ghostfund.config import AI_MAX_TOKENS
from ghostfund.errors import UpstreamServiceError
from ghostfund.services.prompts import (
    CHAT_SYSTEM_PROMPT,
    get_risk_analysis_prompt,
    get_suggestions_prompt,
)

logger = logging.getLogger(__name__)

RISK_SCORE_PATTERN = re.compile(r"risk score.*?(\d+)", re.IGNORECASE)
DEFAULT_RISK_SCORE = 5
RECOMMENDATIONS = ("approve", "reject", "review")
DEFAULT_RECOMMENDATION = "review"


@dataclass
class CompletionResult:
    """文本补全结果"""
    success: bool = True
    text: Optional[str] = None
    citations: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class RiskAnalysis:
    analysis: str
    risk_score: int
    recommendation: str


def parse_risk_score(text: str) -> int:
    """
    从分析文本中提取风险评分

    取第一个 "risk score ... <数字>" 匹配；不在 1-10 范围内或无法解析时返回 5
    """
    match = RISK_SCORE_PATTERN.search(text or "")
    if not match:
        return DEFAULT_RISK_SCORE
    score = int(match.group(1))
    return score if 1 <= score <= 10 else DEFAULT_RISK_SCORE


def parse_recommendation(text: str) -> str:
    """按 approve → reject → review 的固定顺序匹配关键字，默认 review"""
    lowered = (text or "").lower()
    for keyword in RECOMMENDATIONS:
        if keyword in lowered:
            return keyword
    return DEFAULT_RECOMMENDATION


class AIService:
    """Perplexity 文本补全客户端"""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        api_url: str,
        model: str,
        max_tokens: int = AI_MAX_TOKENS,
    ):
        self.client = client
        self.api_key = api_key
        self.endpoint = f"{api_url.rstrip('/')}/chat/completions"
        self.model = model
        self.max_tokens = max_tokens

    async def complete(
        self, prompt: str, system_prompt: Optional[str] = None
    ) -> CompletionResult:
        """发送补全请求；失败时返回 success=False，不抛出异常"""
        if not self.api_key:
            return CompletionResult(success=False, error="Perplexity API key is not configured")

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
        }

        try:
            response = await self.client.post(self.endpoint, headers=headers, json=body)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException:
            logger.warning("Perplexity 请求超时: %s", self.endpoint)
            return CompletionResult(success=False, error="Timeout")
        except httpx.HTTPStatusError as e:
            logger.warning("Perplexity 返回错误状态 %s", e.response.status_code)
            return CompletionResult(
                success=False, error=f"Perplexity API returned {e.response.status_code}"
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Perplexity 请求失败: %s", e)
            return CompletionResult(success=False, error=str(e))

        text = self._extract_text(data)
        if text is None:
            logger.warning("Perplexity 返回格式无法解析")
            return CompletionResult(success=False, error="Invalid response from Perplexity API")

        citations = data.get("citations")
        if not isinstance(citations, list):
            citations = []
        return CompletionResult(
            success=True, text=text, citations=[c for c in citations if isinstance(c, str)]
        )

    @staticmethod
    def _extract_text(data) -> Optional[str]:
        """取 choices[0].message.content，结构不符时返回 None"""
        if not isinstance(data, dict):
            return None
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return None
        message = choices[0].get("message")
        if not isinstance(message, dict):
            return None
        text = message.get("content")
        if not isinstance(text, str) or not text.strip():
            return None
        return text

    async def analyze_project_risk(self, description: str) -> RiskAnalysis:
        """对项目描述做风险评估"""
        result = await self.complete(get_risk_analysis_prompt(description))
        if not result.success:
            logger.error("项目风险分析失败: %s", result.error)
            raise UpstreamServiceError(f"AI analysis failed: {result.error}")

        return RiskAnalysis(
            analysis=result.text,
            risk_score=parse_risk_score(result.text),
            recommendation=parse_recommendation(result.text),
        )

    async def generate_project_suggestions(self, description: str) -> str:
        result = await self.complete(get_suggestions_prompt(description))
        if not result.success:
            logger.error("生成项目建议失败: %s", result.error)
            raise UpstreamServiceError(f"AI suggestions failed: {result.error}")
        return result.text

    async def get_chat_response(self, message: str) -> CompletionResult:
        """聊天助手，使用固定的系统提示词"""
        return await self.complete(message, system_prompt=CHAT_SYSTEM_PROMPT)
