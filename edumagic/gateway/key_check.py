"""
Credential diagnostics.

Checks a single key against its provider with the cheapest possible call.
Used by the key diagnostics endpoint and the `keys --test` CLI command;
never raises on provider failure.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from configs import GEMINI_KEY_PREFIX, GPT_KEY_PREFIX, OPENAI_KEY_PREFIX, RAPID_KEY_PREFIX

from .errors import GatewayError
from .image_providers import IMAGE_PROVIDERS, rapidapi_headers
from .key_pool import mask_key
from .text_generation import CompletionFn, acompletion, complete_text, get_text_provider

logger = logging.getLogger("edumagic.keys")


@dataclass
class KeyCheckResult:
    success: bool
    message: str


def _family(prefix: str) -> Optional[str]:
    upper = prefix.upper()
    for family in (OPENAI_KEY_PREFIX, GEMINI_KEY_PREFIX, GPT_KEY_PREFIX, RAPID_KEY_PREFIX):
        if upper.startswith(family):
            return family
    return None


async def check_key(
    prefix: str,
    key: str,
    completion: CompletionFn = acompletion,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: float = 30.0,
) -> KeyCheckResult:
    """Validate `key` for the family named by `prefix`."""
    family = _family(prefix or "")
    if family is None or not key:
        return KeyCheckResult(False, "Unknown key type")

    logger.info("Checking %s key %s", family, mask_key(key))

    if family in (OPENAI_KEY_PREFIX, GEMINI_KEY_PREFIX):
        provider = get_text_provider("openai" if family == OPENAI_KEY_PREFIX else "gemini")
        try:
            await complete_text(provider, "Hi", key, completion=completion, timeout=timeout, max_tokens=1)
        except GatewayError as e:
            return KeyCheckResult(False, str(e))
        return KeyCheckResult(True, f"{provider.name.title()} key is valid!")

    if family == GPT_KEY_PREFIX:
        candidates = [IMAGE_PROVIDERS["chatgpt-42"]]
    else:
        candidates = [IMAGE_PROVIDERS["hd-ai-image-gen"], IMAGE_PROVIDERS["midjourney-imaginecraft"]]

    message = "No endpoint answered"
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        for spec in candidates:
            try:
                response = await client.post(
                    spec.endpoints[0],
                    headers=rapidapi_headers(key, spec.host),
                    json=spec.build_body("test"),
                )
            except httpx.HTTPError as e:
                message = str(e)
                continue
            if response.is_success:
                return KeyCheckResult(True, "RapidAPI key is valid!")
            message = f"RapidAPI Error [{response.status_code}]: {response.text[:100]}"

    return KeyCheckResult(False, message)
