# backend/tests/unit/test_llm_client.py
"""
Unit tests for the Perplexity client (OpenAI SDK over a mocked httpx transport).
"""
import json

import httpx
import pytest

from stockwatch.core.exceptions import ParseFailure, RateLimitExceededError, UpstreamHttpError
from stockwatch.services.llm.client import LLMClient


def completion(content, cost=0.0125):
    usage = {"prompt_tokens": 12, "completion_tokens": 34, "total_tokens": 46}
    if cost is not None:
        usage["cost"] = {"total_cost": cost}
    return {
        "id": "cmpl-1",
        "object": "chat.completion",
        "created": 1718450000,
        "model": "sonar-pro",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
        "usage": usage,
    }


def make_client(handler):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return LLMClient(api_key="pplx-test", base_url="https://api.perplexity.ai", model="sonar-pro", http_client=http_client)


class TestLLMClient:
    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            LLMClient(api_key="")

    @pytest.mark.asyncio
    async def test_complete_returns_content_and_usage(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json=completion("1. Recent news\n- Something happened"))

        client = make_client(handler)
        result = await client.complete("Analyze AAPL", max_tokens=3000, temperature=0.2)

        assert result.content.startswith("1. Recent news")
        assert result.model == "sonar-pro"
        assert result.input_tokens == 12
        assert result.output_tokens == 34
        assert result.cost_usd == pytest.approx(0.0125)

        assert seen["path"].endswith("/chat/completions")
        assert seen["body"]["model"] == "sonar-pro"
        assert seen["body"]["max_tokens"] == 3000
        assert seen["body"]["messages"] == [{"role": "user", "content": "Analyze AAPL"}]
        assert seen["auth"] == "Bearer pplx-test"

    @pytest.mark.asyncio
    async def test_missing_cost_is_none(self):
        client = make_client(lambda request: httpx.Response(200, json=completion("text", cost=None)))
        result = await client.complete("prompt")
        assert result.cost_usd is None

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(429, json={"error": {"message": "Too many requests"}})

        client = make_client(handler)
        with pytest.raises(RateLimitExceededError):
            await client.complete("prompt")
        # No automatic retries
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_server_error(self):
        client = make_client(lambda request: httpx.Response(500, json={"error": {"message": "boom"}}))
        with pytest.raises(UpstreamHttpError) as exc_info:
            await client.complete("prompt")
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        client = make_client(handler)
        with pytest.raises(UpstreamHttpError) as exc_info:
            await client.complete("prompt")
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_empty_content_is_parse_failure(self):
        client = make_client(lambda request: httpx.Response(200, json=completion("")))
        with pytest.raises(ParseFailure):
            await client.complete("prompt")

    @pytest.mark.asyncio
    async def test_no_choices_is_parse_failure(self):
        body = completion("x")
        body["choices"] = []
        client = make_client(lambda request: httpx.Response(200, json=body))
        with pytest.raises(ParseFailure):
            await client.complete("prompt")
