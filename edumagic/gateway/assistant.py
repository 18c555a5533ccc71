"""Conversational assistant: one rotation-wrapped call, no provider fallback."""
import functools
import logging

from configs import CHAT_PROVIDER, TEXT_REQUEST_TIMEOUT_SECONDS

from .errors import GatewayError
from .prompts import build_assistant_prompt
from .rotation import KeyRotationExecutor
from .text_generation import CompletionFn, acompletion, complete_text, get_text_provider

logger = logging.getLogger("edumagic.assistant")

CANNED_APOLOGY = "Oups! Sma7 lia, t3ksat lia l'magie. Chno bghiti t3rf?"


class ConversationalAssistant:
    """Short persona-driven answers for the chat companion."""

    def __init__(
        self,
        executor: KeyRotationExecutor,
        provider: str = CHAT_PROVIDER,
        completion: CompletionFn = acompletion,
        timeout: float = TEXT_REQUEST_TIMEOUT_SECONDS,
    ):
        self.executor = executor
        self.provider = get_text_provider(provider)
        self.completion = completion
        self.timeout = timeout

    async def explain(self, text: str) -> str:
        """
        Answer `text` in the assistant persona.

        Never raises on provider failure: the canned apology is returned
        instead so the conversation can continue.
        """
        if not text or not text.strip():
            raise ValueError("No text provided")

        prompt = build_assistant_prompt(text.strip())
        call = functools.partial(
            complete_text,
            self.provider,
            prompt,
            completion=self.completion,
            timeout=self.timeout,
        )

        try:
            return await self.executor.with_rotation(self.provider.key_prefix, call)
        except GatewayError as e:
            logger.error("Assistant call via %s failed: %s", self.provider.name, e)
            return CANNED_APOLOGY
