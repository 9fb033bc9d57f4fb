import json

import httpx
import pytest

from ghostfund.errors import UpstreamServiceError
from ghostfund.services.ai_service import parse_recommendation, parse_risk_score
from ghostfund.services.prompts import CHAT_SYSTEM_PROMPT

from conftest import completion_payload, make_ai


@pytest.mark.parametrize(
    "text,expected",
    [
        ("some risk score of 8 out of 10, recommend reject", 8),
        ("Overall Risk Score: 2/10", 2),
        ("RISK SCORE is 10", 10),
        ("risk score: 42", 5),
        ("risk score: 0", 5),
        ("no score mentioned", 5),
        ("", 5),
        ("risk score\n7", 5),
    ],
)
def test_parse_risk_score(text, expected):
    assert parse_risk_score(text) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("some risk score of 8 out of 10, recommend reject", "reject"),
        ("I would APPROVE this", "approve"),
        ("needs manual review", "review"),
        ("review carefully, then approve", "approve"),
        ("reject rather than review", "reject"),
        ("nothing useful", "review"),
        ("", "review"),
    ],
)
def test_parse_recommendation(text, expected):
    assert parse_recommendation(text) == expected


async def test_analyze_project_risk_parses_response():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(
            200, json=completion_payload("some risk score of 8 out of 10, recommend reject")
        )

    ai = make_ai(handler)
    analysis = await ai.analyze_project_risk("A project about rockets")

    assert analysis.risk_score == 8
    assert analysis.recommendation == "reject"
    assert analysis.analysis.startswith("some risk score")

    body = seen[0]
    assert body["model"] == "sonar"
    assert body["max_tokens"] == 500
    assert "A project about rockets" in body["messages"][-1]["content"]


async def test_complete_sends_bearer_token_and_endpoint():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=completion_payload("hi"))

    result = await make_ai(handler).complete("hello")
    assert result.success is True
    assert result.text == "hi"
    assert str(seen[0].url) == "https://api.perplexity.test/chat/completions"
    assert seen[0].headers["Authorization"] == "Bearer test-key"


async def test_chat_uses_system_prompt_and_returns_citations():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, json=completion_payload("Sure", citations=["https://a.test"]))

    result = await make_ai(handler).get_chat_response("How do I fund?")
    assert result.text == "Sure"
    assert result.citations == ["https://a.test"]
    assert seen[0]["messages"][0] == {"role": "system", "content": CHAT_SYSTEM_PROMPT}
    assert seen[0]["messages"][1] == {"role": "user", "content": "How do I fund?"}


async def test_complete_without_api_key_does_not_call_out():
    def handler(request):
        raise AssertionError("should not be called")

    result = await make_ai(handler, api_key="").complete("hello")
    assert result.success is False
    assert "not configured" in result.error


async def test_complete_reports_http_errors():
    result = await make_ai(lambda r: httpx.Response(429, json={"error": "slow down"})).complete("x")
    assert result.success is False
    assert "429" in result.error


async def test_complete_reports_timeouts():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    result = await make_ai(handler).complete("x")
    assert result.success is False
    assert result.error == "Timeout"


async def test_complete_rejects_malformed_body():
    result = await make_ai(lambda r: httpx.Response(200, json={"choices": []})).complete("x")
    assert result.success is False

    result = await make_ai(lambda r: httpx.Response(200, text="not json")).complete("x")
    assert result.success is False


async def test_suggestions_raise_when_completion_fails():
    ai = make_ai(lambda r: httpx.Response(500))
    with pytest.raises(UpstreamServiceError):
        await ai.generate_project_suggestions("desc")


@pytest.mark.parametrize(
    "payload",
    [
        {"choices": ["oops"]},
        {"choices": "oops"},
        {"choices": [{"message": "oops"}]},
        {"choices": [{"message": {"content": ["a", "list"]}}]},
        {"choices": [{"message": {"content": 42}}]},
        {"choices": [{"message": {"content": "   "}}]},
        {"choices": [{}]},
        ["not", "an", "object"],
    ],
)
async def test_complete_handles_unexpected_shapes(payload):
    result = await make_ai(lambda r: httpx.Response(200, json=payload)).complete("x")
    assert result.success is False
    assert result.error == "Invalid response from Perplexity API"


async def test_analyze_with_non_string_content_is_upstream_error():
    payload = {"choices": [{"message": {"content": ["risk score 3"]}}]}
    ai = make_ai(lambda r: httpx.Response(200, json=payload))
    with pytest.raises(UpstreamServiceError):
        await ai.analyze_project_risk("desc")


async def test_complete_ignores_malformed_citations():
    payload = completion_payload("ok")
    payload["citations"] = "https://not-a-list.test"
    result = await make_ai(lambda r: httpx.Response(200, json=payload)).complete("x")
    assert result.success is True
    assert result.citations == []
