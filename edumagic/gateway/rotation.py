"""
Key-rotation executor.

Runs an operation parameterized by a single credential, trying each
credential of a family in discovery order until one succeeds:

    keys = resolver.resolve(prefix)       # [] -> NoCredentialsError
    for key in keys:
        try:   return await operation(key)
        except rotatable error: next key
    raise AllCredentialsExhaustedError(last_error)

The executor keeps no state between calls. Two concurrent callers may use
the same key at the same time; there is no cross-request coordination.
"""
import logging
import time
from typing import Awaitable, Callable, List, TypeVar

from .errors import (
    AllCredentialsExhaustedError,
    FatalProviderError,
    NoCredentialsError,
    ProviderError,
    is_rotatable,
)
from .key_pool import KeyPoolResolver, mask_key
from .models import AttemptOutcome, ProviderAttempt

T = TypeVar("T")

logger = logging.getLogger("edumagic.rotation")


class KeyRotationExecutor:
    """
    Tries each credential of a family once, in order.

    Args:
        resolver: Key pool resolver over the configuration snapshot
        rotate_on_fatal: Also rotate on FatalProviderError
    """

    def __init__(self, resolver: KeyPoolResolver, rotate_on_fatal: bool = False):
        self.resolver = resolver
        self.rotate_on_fatal = rotate_on_fatal

    async def with_rotation(self, prefix: str, operation: Callable[[str], Awaitable[T]]) -> T:
        """
        Execute `operation` with automatic key rotation.

        Args:
            prefix: Credential family prefix (e.g. "GEMINI_API_KEY")
            operation: Coroutine function receiving the current key

        Returns:
            The first successful result.

        Raises:
            NoCredentialsError: No key configured for `prefix` (operation never called)
            FatalProviderError: Non-rotatable failure (unless rotate_on_fatal)
            AllCredentialsExhaustedError: Every key failed; carries the last error
        """
        keys = self.resolver.resolve(prefix)
        if not keys:
            logger.error("No credentials configured for %s", prefix)
            raise NoCredentialsError(prefix)

        attempts: List[ProviderAttempt] = []
        last_error: BaseException = RuntimeError(f"All API keys for {prefix} failed.")

        for index, key in enumerate(keys):
            key_num = index + 1
            logger.info("Attempting %s key #%d/%d (%s)", prefix, key_num, len(keys), mask_key(key))
            started = time.monotonic()
            try:
                result = await operation(key)
            except Exception as e:
                last_error = e
                attempts.append(self._record(prefix, key_num, started, e))
                logger.warning(
                    "%s key #%d failed: %s",
                    prefix, key_num, _excerpt(str(e)),
                )

                if not is_rotatable(e, self.rotate_on_fatal):
                    logger.error("%s key #%d hit a non-rotatable error, aborting rotation", prefix, key_num)
                    raise

                if key_num < len(keys):
                    logger.warning("Rotating %s to key #%d...", prefix, key_num + 1)
                    continue
                break
            else:
                if key_num > 1:
                    logger.info("%s succeeded after rotating to key #%d", prefix, key_num)
                return result

        logger.error("All %d %s keys exhausted", len(keys), prefix)
        raise AllCredentialsExhaustedError(prefix, last_error, attempts) from last_error

    @staticmethod
    def _record(prefix: str, key_num: int, started: float, error: BaseException) -> ProviderAttempt:
        status_code = error.status_code if isinstance(error, ProviderError) else None
        provider = error.provider if isinstance(error, ProviderError) and error.provider else prefix
        return ProviderAttempt(
            provider=provider,
            endpoint=prefix,
            outcome=AttemptOutcome.FATAL if isinstance(error, FatalProviderError) else AttemptOutcome.TRANSIENT_FAILURE,
            status_code=status_code,
            elapsed_ms=(time.monotonic() - started) * 1000,
            key_index=key_num,
            detail=_excerpt(str(error)),
        )


def _excerpt(text: str, limit: int = 200) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[:limit] + "..."
