"""
Image generation gateway.

Resolves an image URL for a prompt through a RapidAPI-hosted provider:

    generate_image(prompt, provider, api_key=None)
      ├── fallback id (pollinations/lexica) -> fallback image, no network
      ├── api_key given -> attempt_generation() once, errors propagate
      └── otherwise     -> rotation over the provider's key family
                           └── any gateway failure -> fallback image + warning

attempt_generation() strategies:
    SYNC     one POST, extract the URL from the JSON body
    PROBING  POST to each candidate endpoint in order; a 2xx carrying a job id
             starts the polling protocol (poll_rounds x poll_interval) over
             the provider's result endpoints

Nothing is persisted here; the caller stores the returned URL.
"""
import asyncio
import functools
import logging
import time
from typing import Any, Awaitable, Callable, List, Optional, Tuple

import httpx

from configs import (
    DEFAULT_IMAGE_PROVIDER,
    FALLBACK_IMAGE_PROVIDER,
    FALLBACK_IMAGE_URL,
    IMAGE_POLL_INTERVAL_SECONDS,
    IMAGE_POLL_ROUNDS,
    IMAGE_REQUEST_TIMEOUT_SECONDS,
    IMAGE_STYLE_SUFFIX,
)

from .errors import (
    AllCredentialsExhaustedError,
    AuthRejected,
    FatalProviderError,
    GatewayError,
    InvalidResponse,
    PollTimeoutError,
    ProviderError,
    ProviderTransientError,
    RateLimited,
    error_for_status,
)
from .image_providers import (
    FALLBACK_PROVIDER_IDS,
    IMAGE_PROVIDERS,
    ImageProviderSpec,
    ProviderMode,
    normalize_image_url,
    rapidapi_headers,
)
from .json_utils import parse_json_body
from .key_pool import mask_key
from .models import AttemptOutcome, ImageResult, ProviderAttempt
from .prompts import build_image_prompt
from .rotation import KeyRotationExecutor

logger = logging.getLogger("edumagic.images")

SleepFn = Callable[[float], Awaitable[Any]]
Found = Tuple[str, Any]


class ImageGateway:
    """
    Image generation with key rotation, endpoint probing and job polling.

    Args:
        executor: Key rotation executor
        transport: Optional httpx transport (tests use httpx.MockTransport)
        sleep: Coroutine used between poll rounds
        poll_rounds: Maximum number of poll rounds per job
        poll_interval: Seconds to wait before each poll round
        timeout: Per-request timeout in seconds
        fallback_url: Image returned when every provider path fails
        style_suffix: Appended to every prompt before it is sent
    """

    def __init__(
        self,
        executor: KeyRotationExecutor,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFn = asyncio.sleep,
        poll_rounds: int = IMAGE_POLL_ROUNDS,
        poll_interval: float = IMAGE_POLL_INTERVAL_SECONDS,
        timeout: float = IMAGE_REQUEST_TIMEOUT_SECONDS,
        fallback_url: str = FALLBACK_IMAGE_URL,
        style_suffix: str = IMAGE_STYLE_SUFFIX,
    ):
        self.executor = executor
        self.transport = transport
        self.sleep = sleep
        self.poll_rounds = poll_rounds
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.fallback_url = fallback_url
        self.style_suffix = style_suffix

    # ============================================================
    # PUBLIC API
    # ============================================================

    async def generate_image(
        self,
        prompt: str,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> ImageResult:
        """
        Resolve an image for `prompt`.

        Raises:
            ValueError: Empty prompt
            GatewayError: Only when a caller-supplied api_key is used
                (including FatalProviderError for an unknown provider id)
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt is required")

        provider = (provider or DEFAULT_IMAGE_PROVIDER).strip()
        prompt = build_image_prompt(prompt, self.style_suffix)

        if provider in FALLBACK_PROVIDER_IDS:
            logger.info("Provider %s is fallback-only, skipping network", provider)
            return self.fallback(f"{provider} requested or deprecated")

        if provider not in IMAGE_PROVIDERS and not api_key:
            logger.error("Unknown image provider %s, using default image", provider)
            return self.fallback(f"Unknown provider {provider}")

        spec = self._get_spec(provider)

        if api_key:
            logger.info("Generating image via %s with caller-supplied key (%s)", spec.id, mask_key(api_key))
            return await self.attempt_generation(spec.id, prompt, api_key)

        try:
            return await self.executor.with_rotation(
                spec.key_prefix,
                functools.partial(self.attempt_generation, spec.id, prompt),
            )
        except GatewayError as e:
            logger.error("All keys for %s failed, falling back to default image: %s", spec.id, e)
            attempts = e.attempts if isinstance(e, AllCredentialsExhaustedError) else []
            return self.fallback(f"Service {spec.id} unavailable: {e}", attempts)

    async def attempt_generation(self, provider: str, prompt: str, api_key: str) -> ImageResult:
        """
        One generation attempt with a single credential.

        Raises:
            RateLimited / AuthRejected / ProviderTransientError / FatalProviderError
            InvalidResponse: 2xx without a usable image locator
            PollTimeoutError: Job id returned but polling never produced a URL
        """
        spec = self._get_spec(provider)
        attempts: List[ProviderAttempt] = []

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            if spec.mode is ProviderMode.PROBING:
                image_url, raw = await self._probe(client, spec, prompt, api_key, attempts)
            else:
                image_url, raw = await self._post_sync(client, spec, prompt, api_key, attempts)

        final_url = normalize_image_url(image_url)
        logger.info("Image ready from %s after %d request(s)", spec.id, len(attempts))
        return ImageResult(image_url=final_url, provider=spec.id, raw=raw, attempts=attempts)

    def fallback(self, reason: str, attempts: Optional[List[ProviderAttempt]] = None) -> ImageResult:
        """The guaranteed placeholder image, annotated with why it was used."""
        return ImageResult(
            image_url=self.fallback_url,
            provider=FALLBACK_IMAGE_PROVIDER,
            raw=None,
            warning=f"{reason}. Displaying a high-quality educational visual instead.",
            attempts=list(attempts or []),
        )

    # ============================================================
    # STRATEGIES
    # ============================================================

    async def _post_sync(
        self,
        client: httpx.AsyncClient,
        spec: ImageProviderSpec,
        prompt: str,
        api_key: str,
        attempts: List[ProviderAttempt],
    ) -> Found:
        url = spec.endpoints[0]
        response = await self._send(
            client, spec, "POST", url, rapidapi_headers(api_key, spec.host), attempts,
            json=spec.build_body(prompt),
        )
        status = response.status_code
        text = response.text

        if status == 429:
            raise RateLimited("Rate limit exceeded", provider=spec.id, body=text[:200])
        if not response.is_success:
            raise error_for_status(status, f"RapidAPI Error [{status}]: {text[:500]}", spec.id, text[:200])

        data = parse_json_body(text, spec.id)
        extraction = spec.normalize(data)
        if not extraction.image_url:
            raise InvalidResponse(f"Empty response format from {spec.id}", provider=spec.id,
                                  status_code=status, body=text[:200])
        return extraction.image_url, data

    async def _probe(
        self,
        client: httpx.AsyncClient,
        spec: ImageProviderSpec,
        prompt: str,
        api_key: str,
        attempts: List[ProviderAttempt],
    ) -> Found:
        headers = rapidapi_headers(api_key, spec.host)
        failures: List[ProviderError] = []

        for url in spec.endpoints:
            try:
                response = await self._send(client, spec, "POST", url, headers, attempts,
                                            json=spec.build_body(prompt))
            except ProviderTransientError as e:
                failures.append(e)
                continue

            status = response.status_code
            text = response.text
            detail = f"Endpoint {url} responded with {status}: {text[:200]}"

            if not response.is_success:
                logger.warning("%s probe %s -> %d", spec.id, url, status)
                failures.append(error_for_status(status, detail, spec.id, text[:200]))
                continue

            try:
                data = parse_json_body(text, spec.id)
            except InvalidResponse as e:
                failures.append(e)
                continue

            extraction = spec.normalize(data)
            if extraction.image_url:
                return extraction.image_url, data

            if not extraction.job_id:
                failures.append(InvalidResponse(detail, provider=spec.id, status_code=status))
                continue

            logger.info("%s accepted job %s, polling for result", spec.id, extraction.job_id)
            found = await self._poll(client, spec, extraction.job_id, api_key, attempts)
            if found:
                return found
            failures.append(PollTimeoutError(
                f"Job {extraction.job_id} from {url} produced no image after {self.poll_rounds} poll rounds",
                provider=spec.id,
            ))

        raise _probe_failure(spec.id, failures)

    async def _poll(
        self,
        client: httpx.AsyncClient,
        spec: ImageProviderSpec,
        job_id: str,
        api_key: str,
        attempts: List[ProviderAttempt],
    ) -> Optional[Found]:
        headers = rapidapi_headers(api_key, spec.host, json_body=False)
        poll_urls = spec.poll_urls(job_id)

        for round_num in range(1, self.poll_rounds + 1):
            await self.sleep(self.poll_interval)

            for poll_url in poll_urls:
                try:
                    response = await self._send(client, spec, "GET", poll_url, headers, attempts)
                except ProviderTransientError:
                    continue
                if not response.is_success:
                    continue
                try:
                    data = parse_json_body(response.text, spec.id)
                except InvalidResponse:
                    continue

                image_url = (spec.poll_normalize or spec.normalize)(data).image_url
                if image_url:
                    logger.info("Job %s ready on round %d via %s", job_id, round_num, poll_url)
                    return image_url, data

            logger.debug("Job %s not ready after round %d/%d", job_id, round_num, self.poll_rounds)

        logger.warning("Job %s timed out after %d poll rounds", job_id, self.poll_rounds)
        return None

    # ============================================================
    # HELPERS
    # ============================================================

    async def _send(
        self,
        client: httpx.AsyncClient,
        spec: ImageProviderSpec,
        method: str,
        url: str,
        headers: dict,
        attempts: List[ProviderAttempt],
        json: Any = None,
    ) -> httpx.Response:
        started = time.monotonic()
        try:
            response = await client.request(method, url, headers=headers, json=json)
        except httpx.HTTPError as e:
            attempts.append(ProviderAttempt(
                provider=spec.id,
                endpoint=url,
                outcome=AttemptOutcome.TRANSIENT_FAILURE,
                elapsed_ms=(time.monotonic() - started) * 1000,
                detail=str(e)[:200],
            ))
            logger.warning("%s %s %s failed: %s", spec.id, method, url, e)
            raise ProviderTransientError(f"Request to {url} failed: {e}", provider=spec.id) from e

        status = response.status_code
        if response.is_success:
            outcome = AttemptOutcome.SUCCESS
        elif isinstance(error_for_status(status, ""), FatalProviderError):
            outcome = AttemptOutcome.FATAL
        else:
            outcome = AttemptOutcome.TRANSIENT_FAILURE

        attempts.append(ProviderAttempt(
            provider=spec.id,
            endpoint=url,
            outcome=outcome,
            status_code=status,
            elapsed_ms=(time.monotonic() - started) * 1000,
        ))
        logger.debug("%s %s %s -> %d", spec.id, method, url, status)
        return response

    @staticmethod
    def _get_spec(provider: str) -> ImageProviderSpec:
        spec = IMAGE_PROVIDERS.get(provider)
        if spec is None:
            raise FatalProviderError(f"Unknown provider {provider}", provider=provider)
        return spec


# ============================================================
# PROBE FAILURE CLASSIFICATION
# ============================================================

def _failure_rank(error: ProviderError) -> int:
    """Lower is more rotatable. A 404/405 on an alternate route never outranks a 429."""
    if isinstance(error, RateLimited):
        return 0
    if isinstance(error, AuthRejected):
        return 1
    if isinstance(error, PollTimeoutError):
        return 2
    if isinstance(error, InvalidResponse):
        return 4
    if isinstance(error, ProviderTransientError):
        return 3
    return 5


def _probe_failure(provider: str, failures: List[ProviderError]) -> ProviderError:
    """Collapse per-endpoint failures into the most rotatable one."""
    if not failures:
        return ProviderTransientError(f"{provider} probing failed: no endpoint answered", provider=provider)

    chosen = min(failures, key=_failure_rank)
    message = f"{provider} probing failed. {chosen}. Hint: check the subscription status on RapidAPI."
    if isinstance(chosen, InvalidResponse):
        message = f"Empty response format from {provider}: {message}"
    return type(chosen)(message, provider=provider, status_code=chosen.status_code, body=chosen.body)
