"""
Tests for single-key diagnostics.
"""

import httpx
import pytest

from conftest import FakeCompletion, RecordingTransport
from edumagic.gateway.errors import AuthRejected
from edumagic.gateway.key_check import check_key


class TestCheckKey:

    @pytest.mark.asyncio
    async def test_text_key_valid(self):
        completion = FakeCompletion({"o1": "Hello"})
        result = await check_key("OPENAI_API_KEY1", "o1", completion=completion)
        assert result.success
        assert completion.calls[0]["max_tokens"] == 1

    @pytest.mark.asyncio
    async def test_text_key_rejected(self):
        completion = FakeCompletion({"g1": AuthRejected("API key not valid", provider="gemini")})
        result = await check_key("GEMINI_API_KEY", "g1", completion=completion)
        assert not result.success
        assert "API key not valid" in result.message

    @pytest.mark.asyncio
    async def test_rapid_key_tries_second_endpoint(self):
        def handler(request):
            if "hd-ai-image-gen" in request.url.host:
                return httpx.Response(403, text="not subscribed")
            return httpx.Response(200, json={"id": "job"})

        transport = RecordingTransport(handler)
        result = await check_key("RAPID_API_KEY", "r1", transport=transport)
        assert result.success
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_gpt_key_failure_message(self):
        transport = RecordingTransport(lambda request: httpx.Response(401, text="Invalid API key"))
        result = await check_key("GPT_API_KEY", "x1", transport=transport)
        assert not result.success
        assert "401" in result.message

    @pytest.mark.asyncio
    async def test_unknown_prefix(self):
        result = await check_key("MISTRAL_API_KEY", "m1")
        assert not result.success
        assert result.message == "Unknown key type"
