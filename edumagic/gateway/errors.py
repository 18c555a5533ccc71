"""
Error taxonomy for the AI-provider gateway.

Provider failures are tagged so that the rotation executor can decide
whether trying the next credential makes sense:

    ProviderTransientError (RateLimited, AuthRejected, InvalidResponse,
    PollTimeoutError)      -> rotate to the next key
    FatalProviderError     -> propagate immediately (the request itself is bad)

Exhaustion and "nothing configured" are separate, non-provider errors.
"""
from typing import Any, List, Optional


class GatewayError(Exception):
    """Base exception for all gateway errors."""
    pass


class NoCredentialsError(GatewayError):
    """Raised when a credential family has zero configured keys."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        super().__init__(f"No API keys found for prefix: {prefix}")


# ============================================================
# PROVIDER ERRORS
# ============================================================

class ProviderError(GatewayError):
    """A single call to an AI provider failed."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.body = body


class ProviderTransientError(ProviderError):
    """Failure that another credential (or a later retry) may not hit."""
    pass


class RateLimited(ProviderTransientError):
    """HTTP 429 / quota exceeded."""

    def __init__(self, message: str = "Rate limit exceeded", provider: Optional[str] = None,
                 status_code: Optional[int] = 429, body: Optional[str] = None):
        super().__init__(message, provider=provider, status_code=status_code, body=body)


class AuthRejected(ProviderTransientError):
    """Key was rejected (invalid, revoked, not subscribed)."""
    pass


class InvalidResponse(ProviderTransientError):
    """2xx response that is not JSON or has none of the recognized fields."""
    pass


class PollTimeoutError(InvalidResponse):
    """Asynchronous image job never produced a URL within the round budget."""
    pass


class FatalProviderError(ProviderError):
    """The request itself is malformed; other keys would fail the same way."""
    pass


# ============================================================
# AGGREGATE ERRORS
# ============================================================

class AllCredentialsExhaustedError(GatewayError):
    """Every credential of a family was tried and failed."""

    def __init__(self, prefix: str, last_error: BaseException, attempts: Optional[List[Any]] = None):
        self.prefix = prefix
        self.last_error = last_error
        self.attempts = attempts or []
        super().__init__(
            f"All {len(self.attempts) or 'configured'} API keys for {prefix} failed. "
            f"Last error: {last_error}"
        )


class LessonContentError(GatewayError):
    """Parsed lesson JSON does not have the required shape."""
    pass


class LessonGenerationError(GatewayError):
    """Every text provider family failed to produce a lesson."""

    def __init__(self, message: str, reasons: Optional[dict] = None):
        super().__init__(message)
        self.reasons = reasons or {}


# ============================================================
# CLASSIFICATION HELPERS
# ============================================================

_FATAL_STATUSES = {400, 405, 413, 422}
_AUTH_STATUSES = {401, 403}


def error_for_status(
    status_code: int,
    message: str,
    provider: Optional[str] = None,
    body: Optional[str] = None,
) -> ProviderError:
    """Map a non-2xx HTTP status to the matching tagged error."""
    if status_code == 429:
        return RateLimited(message, provider=provider, status_code=status_code, body=body)
    if status_code in _AUTH_STATUSES:
        return AuthRejected(message, provider=provider, status_code=status_code, body=body)
    if status_code in _FATAL_STATUSES:
        return FatalProviderError(message, provider=provider, status_code=status_code, body=body)
    return ProviderTransientError(message, provider=provider, status_code=status_code, body=body)


def is_rotatable(error: BaseException, rotate_on_fatal: bool = False) -> bool:
    """
    Decide whether the next credential should be tried after `error`.

    Unclassified exceptions rotate; only FatalProviderError (unless
    rotate_on_fatal) and NoCredentialsError stop the rotation.
    """
    if isinstance(error, NoCredentialsError):
        return False
    if isinstance(error, FatalProviderError):
        return rotate_on_fatal
    return isinstance(error, Exception)
