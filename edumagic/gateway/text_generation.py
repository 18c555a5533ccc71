"""
Text generation with key rotation and provider fallback.

FALLBACK CHAIN (DETERMINISTIC):
===============================
1. PRIMARY: Gemini (all GEMINI_API_KEY* keys, in discovery order)
2. SECONDARY: OpenAI (all OPENAI_API_KEY* keys, in discovery order)
3. Both exhausted -> LessonGenerationError ("All models and keys failed")

A family "fails" at any stage: no keys configured, every key rejected,
unparseable JSON, or JSON that is not a valid lesson. There is no partial
result: either a validated LessonContent comes back or an error is raised.

All provider calls go through LiteLLM so both families share one call path.
"""
import functools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

import litellm
from litellm import acompletion

from configs import (
    GEMINI_KEY_PREFIX,
    GEMINI_MODEL,
    OPENAI_KEY_PREFIX,
    OPENAI_MODEL,
    PRIMARY_TEXT_PROVIDER,
    SECONDARY_TEXT_PROVIDER,
    TEXT_REQUEST_TIMEOUT_SECONDS,
    TEXT_TEMPERATURE,
)

from .errors import (
    AuthRejected,
    FatalProviderError,
    GatewayError,
    InvalidResponse,
    LessonGenerationError,
    ProviderError,
    ProviderTransientError,
    RateLimited,
)
from .json_utils import parse_json_object
from .models import GenerationRequest, LessonContent, validate_lesson
from .prompts import build_lesson_prompt, normalize_level
from .rotation import KeyRotationExecutor

logger = logging.getLogger("edumagic.text")

CompletionFn = Callable[..., Awaitable[Any]]


# ============================================================
# PROVIDERS
# ============================================================

@dataclass(frozen=True)
class TextProvider:
    """A text provider family: which keys to rotate and which model to call."""
    name: str
    key_prefix: str
    model: str


TEXT_PROVIDERS: Dict[str, TextProvider] = {
    "gemini": TextProvider("gemini", GEMINI_KEY_PREFIX, GEMINI_MODEL),
    "openai": TextProvider("openai", OPENAI_KEY_PREFIX, OPENAI_MODEL),
}


def get_text_provider(name: str) -> TextProvider:
    try:
        return TEXT_PROVIDERS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown text provider '{name}'. Use one of: {', '.join(TEXT_PROVIDERS)}"
        ) from None


def classify_llm_error(error: Exception, provider: str) -> ProviderError:
    """Translate a LiteLLM exception into the gateway's tagged errors."""
    message = f"{provider} API error: {error}"
    status_code = getattr(error, "status_code", None)

    if isinstance(error, litellm.RateLimitError):
        return RateLimited(message, provider=provider, status_code=status_code or 429)
    if isinstance(error, (litellm.AuthenticationError, litellm.PermissionDeniedError)):
        return AuthRejected(message, provider=provider, status_code=status_code)
    if isinstance(error, litellm.BadRequestError):
        # Gemini reports invalid keys as 400 "API key not valid"
        if "api key" in str(error).lower() or "api_key" in str(error).lower():
            return AuthRejected(message, provider=provider, status_code=status_code)
        return FatalProviderError(message, provider=provider, status_code=status_code)
    return ProviderTransientError(message, provider=provider, status_code=status_code)


def _message_text(response: Any) -> Optional[str]:
    try:
        return response.choices[0].message.content
    except (AttributeError, IndexError, TypeError):
        return None


async def complete_text(
    provider: TextProvider,
    prompt: str,
    api_key: str,
    *,
    completion: CompletionFn = acompletion,
    json_mode: bool = False,
    temperature: float = TEXT_TEMPERATURE,
    timeout: float = TEXT_REQUEST_TIMEOUT_SECONDS,
    max_tokens: Optional[int] = None,
) -> str:
    """
    Single completion call with one credential.

    Raises:
        ProviderError subclasses (classified LiteLLM failures)
        InvalidResponse: Provider answered with empty text
    """
    kwargs: Dict[str, Any] = {
        "model": provider.model,
        "messages": [{"role": "user", "content": prompt}],
        "api_key": api_key,
        "temperature": temperature,
        "timeout": timeout,
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens

    try:
        response = await completion(**kwargs)
    except GatewayError:
        raise
    except Exception as e:
        raise classify_llm_error(e, provider.name) from e

    text = _message_text(response)
    if not text or not text.strip():
        raise InvalidResponse(f"{provider.name} returned an empty response", provider=provider.name)
    return text


# ============================================================
# LESSON GENERATOR
# ============================================================

class LessonGenerator:
    """
    Generates structured lesson JSON with a primary -> secondary fallback.

    Args:
        executor: Key rotation executor shared by all provider families
        primary: Name of the primary text provider
        secondary: Name of the fallback text provider (None disables fallback)
        completion: LiteLLM-compatible async completion function
    """

    def __init__(
        self,
        executor: KeyRotationExecutor,
        primary: str = PRIMARY_TEXT_PROVIDER,
        secondary: Optional[str] = SECONDARY_TEXT_PROVIDER,
        completion: CompletionFn = acompletion,
        timeout: float = TEXT_REQUEST_TIMEOUT_SECONDS,
    ):
        self.executor = executor
        self.completion = completion
        self.timeout = timeout
        self.chain: List[TextProvider] = [get_text_provider(primary)]
        if secondary and secondary.lower() != primary.lower():
            self.chain.append(get_text_provider(secondary))

    async def generate_lesson(self, topic: str, level: str, language: str = "en") -> LessonContent:
        """
        Generate a validated lesson for a topic/level/language triple.

        Raises:
            ValueError: Empty topic
            LessonGenerationError: Every provider family failed
        """
        if not topic or not topic.strip():
            raise ValueError("Topic is required")

        request = GenerationRequest(
            topic=topic.strip(),
            level=normalize_level(level),
            language=(language or "en").strip() or "en",
        )
        prompt = build_lesson_prompt(request.topic, request.level, request.language)
        logger.info(
            "Generating %s lesson on %r (%s) via %s",
            request.level.value, request.topic, request.language,
            " -> ".join(p.name for p in self.chain),
        )

        reasons: Dict[str, str] = {}
        for position, provider in enumerate(self.chain):
            role = "PRIMARY" if position == 0 else "SECONDARY"
            try:
                logger.info("Attempting %s provider: %s", role, provider.name.upper())
                data = await self.executor.with_rotation(
                    provider.key_prefix,
                    functools.partial(self._generate_json, provider, prompt),
                )
                lesson = validate_lesson(data)
            except GatewayError as e:
                reasons[provider.name] = str(e)
                logger.warning("%s provider %s failed: %s", role, provider.name.upper(), e)
                continue

            if position > 0:
                logger.info("Lesson produced by fallback provider %s", provider.name.upper())
            return lesson

        details = "; ".join(f"{name}: {reason}" for name, reason in reasons.items())
        logger.error("All models and keys failed for topic %r", request.topic)
        raise LessonGenerationError(f"All models and keys failed. {details}", reasons=reasons)

    async def _generate_json(self, provider: TextProvider, prompt: str, api_key: str) -> Dict[str, Any]:
        text = await complete_text(
            provider,
            prompt,
            api_key,
            completion=self.completion,
            json_mode=True,
            timeout=self.timeout,
        )
        try:
            return parse_json_object(text)
        except InvalidResponse:
            logger.error("%s JSON parse failed. Content: %s", provider.name, text[:100])
            raise
