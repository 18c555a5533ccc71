"""
Tests for the conversational assistant.
"""

import pytest

from conftest import FakeCompletion
from edumagic.gateway.assistant import CANNED_APOLOGY, ConversationalAssistant
from edumagic.gateway.errors import RateLimited


class TestExplain:

    @pytest.mark.asyncio
    async def test_answer_from_first_working_key(self, make_executor):
        completion = FakeCompletion({"g1": RateLimited(), "g2": "Fotosynthese hiya bhal l'kouzina dyal nnbata."})
        assistant = ConversationalAssistant(
            make_executor({"GEMINI_API_KEY": "g1", "GEMINI_API_KEY1": "g2"}),
            provider="gemini",
            completion=completion,
        )

        answer = await assistant.explain("Chno hiya photosynthesis?")

        assert answer.startswith("Fotosynthese")
        assert completion.keys_used == ["g1", "g2"]
        prompt = completion.calls[-1]["messages"][0]["content"]
        assert "Darija" in prompt
        assert 'User says: "Chno hiya photosynthesis?"' in prompt

    @pytest.mark.asyncio
    async def test_all_keys_failing_returns_apology(self, make_executor):
        completion = FakeCompletion(default=RateLimited())
        assistant = ConversationalAssistant(
            make_executor({"OPENAI_API_KEY": "o1"}), provider="openai", completion=completion,
        )
        assert await assistant.explain("salam") == CANNED_APOLOGY

    @pytest.mark.asyncio
    async def test_no_keys_returns_apology(self, make_executor):
        completion = FakeCompletion()
        assistant = ConversationalAssistant(make_executor({}), provider="openai", completion=completion)
        assert await assistant.explain("salam") == CANNED_APOLOGY
        assert completion.calls == []

    @pytest.mark.asyncio
    async def test_no_secondary_provider(self, make_executor):
        completion = FakeCompletion({"o1": "should not be used"})
        assistant = ConversationalAssistant(
            make_executor({"OPENAI_API_KEY": "o1"}), provider="gemini", completion=completion,
        )
        assert await assistant.explain("salam") == CANNED_APOLOGY
        assert completion.calls == []

    @pytest.mark.asyncio
    async def test_empty_text_rejected(self, make_executor):
        assistant = ConversationalAssistant(make_executor({}), completion=FakeCompletion())
        with pytest.raises(ValueError):
            await assistant.explain("   ")
