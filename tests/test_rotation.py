"""
Tests for the key-rotation executor.

No network: operations are plain coroutines that record the key they got.
"""

import pytest

from edumagic.gateway.errors import (
    AllCredentialsExhaustedError,
    AuthRejected,
    FatalProviderError,
    InvalidResponse,
    NoCredentialsError,
    ProviderTransientError,
    RateLimited,
    error_for_status,
    is_rotatable,
)
from edumagic.gateway.models import AttemptOutcome


def scripted(outcomes):
    """Operation that fails or succeeds per key, recording call order."""
    calls = []

    async def operation(key):
        calls.append(key)
        outcome = outcomes[key]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    operation.calls = calls
    return operation


# =============================================================================
# with_rotation
# =============================================================================

class TestWithRotation:

    @pytest.mark.asyncio
    async def test_empty_pool_never_calls_operation(self, make_executor):
        operation = scripted({})
        with pytest.raises(NoCredentialsError) as exc:
            await make_executor({}).with_rotation("RAPID_API_KEY", operation)
        assert operation.calls == []
        assert "RAPID_API_KEY" in str(exc.value)

    @pytest.mark.asyncio
    async def test_first_key_success_stops_immediately(self, make_executor):
        executor = make_executor({"GEMINI_API_KEY": "k1", "GEMINI_API_KEY1": "k2"})
        operation = scripted({"k1": "ok", "k2": "unused"})
        assert await executor.with_rotation("GEMINI_API_KEY", operation) == "ok"
        assert operation.calls == ["k1"]

    @pytest.mark.asyncio
    async def test_rate_limited_key_rotates_to_next(self, make_executor):
        executor = make_executor({"RAPID_API_KEY": "k1", "RAPID_API_KEY1": "k2"})
        operation = scripted({"k1": RateLimited(provider="hd-ai-image-gen"), "k2": "image"})
        assert await executor.with_rotation("RAPID_API_KEY", operation) == "image"
        assert operation.calls == ["k1", "k2"]

    @pytest.mark.asyncio
    async def test_auth_and_invalid_response_rotate(self, make_executor):
        executor = make_executor({"OPENAI_API_KEY": "k1", "OPENAI_API_KEY1": "k2", "OPENAI_API_KEY2": "k3"})
        operation = scripted({
            "k1": AuthRejected("bad key", status_code=401),
            "k2": InvalidResponse("not json"),
            "k3": "done",
        })
        assert await executor.with_rotation("OPENAI_API_KEY", operation) == "done"
        assert operation.calls == ["k1", "k2", "k3"]

    @pytest.mark.asyncio
    async def test_unclassified_exception_rotates(self, make_executor):
        executor = make_executor({"GPT_API_KEY": "k1", "GPT_API_KEY_1": "k2"})
        operation = scripted({"k1": RuntimeError("socket closed"), "k2": "ok"})
        assert await executor.with_rotation("GPT_API_KEY", operation) == "ok"

    @pytest.mark.asyncio
    async def test_fatal_error_stops_rotation(self, make_executor):
        executor = make_executor({"RAPID_API_KEY": "k1", "RAPID_API_KEY1": "k2"})
        operation = scripted({"k1": FatalProviderError("bad prompt", status_code=400), "k2": "never"})
        with pytest.raises(FatalProviderError):
            await executor.with_rotation("RAPID_API_KEY", operation)
        assert operation.calls == ["k1"]

    @pytest.mark.asyncio
    async def test_rotate_on_fatal_keeps_going(self, make_executor):
        executor = make_executor({"RAPID_API_KEY": "k1", "RAPID_API_KEY1": "k2"}, rotate_on_fatal=True)
        operation = scripted({"k1": FatalProviderError("bad prompt", status_code=400), "k2": "ok"})
        assert await executor.with_rotation("RAPID_API_KEY", operation) == "ok"
        assert operation.calls == ["k1", "k2"]

    @pytest.mark.asyncio
    async def test_exhaustion_carries_last_error(self, make_executor):
        executor = make_executor({"GEMINI_API_KEY": "k1", "GEMINI_API_KEY1": "k2", "GEMINI_API_KEY2": "k3"})
        last = ProviderTransientError("server error 503", provider="gemini", status_code=503)
        operation = scripted({
            "k1": RateLimited(provider="gemini"),
            "k2": AuthRejected("revoked", provider="gemini", status_code=403),
            "k3": last,
        })

        with pytest.raises(AllCredentialsExhaustedError) as exc:
            await executor.with_rotation("GEMINI_API_KEY", operation)

        error = exc.value
        assert operation.calls == ["k1", "k2", "k3"]
        assert error.last_error is last
        assert error.__cause__ is last
        assert "server error 503" in str(error)
        assert [a.key_index for a in error.attempts] == [1, 2, 3]
        assert [a.status_code for a in error.attempts] == [429, 403, 503]
        assert all(a.outcome is AttemptOutcome.TRANSIENT_FAILURE for a in error.attempts)

    @pytest.mark.asyncio
    async def test_each_key_tried_at_most_once(self, make_executor):
        executor = make_executor({"RAPID_API_KEY": "k1", "RAPID_API_KEY1": "k2"})
        operation = scripted({"k1": RateLimited(), "k2": RateLimited()})
        with pytest.raises(AllCredentialsExhaustedError):
            await executor.with_rotation("RAPID_API_KEY", operation)
        assert operation.calls == ["k1", "k2"]

    @pytest.mark.asyncio
    async def test_raw_key_never_logged(self, make_executor, caplog):
        secret = "sk-live-abcdefghijklmnop1234"
        executor = make_executor({"OPENAI_API_KEY": secret})
        operation = scripted({secret: RateLimited()})
        with caplog.at_level("DEBUG", logger="edumagic"):
            with pytest.raises(AllCredentialsExhaustedError):
                await executor.with_rotation("OPENAI_API_KEY", operation)
        assert secret not in caplog.text
        assert "sk-liv...1234" in caplog.text


# =============================================================================
# CLASSIFICATION
# =============================================================================

class TestClassification:

    @pytest.mark.parametrize("status,expected", [
        (429, RateLimited),
        (401, AuthRejected),
        (403, AuthRejected),
        (400, FatalProviderError),
        (422, FatalProviderError),
        (500, ProviderTransientError),
        (503, ProviderTransientError),
    ])
    def test_error_for_status(self, status, expected):
        error = error_for_status(status, "boom", provider="p")
        assert type(error) is expected
        assert error.status_code == status

    def test_is_rotatable(self):
        assert is_rotatable(RateLimited())
        assert is_rotatable(ValueError("anything"))
        assert not is_rotatable(FatalProviderError("x"))
        assert is_rotatable(FatalProviderError("x"), rotate_on_fatal=True)
        assert not is_rotatable(NoCredentialsError("X"))
