"""
Conftest for EduMagic gateway tests.

Ensures the project root is on sys.path so that 'edumagic' and 'configs'
resolve without installation, and provides fakes for the two outbound
seams: the LiteLLM completion function and the httpx transport.
"""

import copy
import json
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

# Add project root to sys.path
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import httpx  # noqa: E402

from edumagic.gateway import KeyPoolResolver, KeyRotationExecutor  # noqa: E402


# =============================================================================
# SAMPLE DATA
# =============================================================================

SAMPLE_LESSON = {
    "introduction": "Plants make their own food.",
    "introduction_visual": "A sunlit leaf",
    "key_concepts": ["chlorophyll", "light", "glucose"],
    "steps": [
        {
            "title": "What is photosynthesis?",
            "explanation": "Plants turn **light** into sugar.",
            "visual_description": "Diagram of a leaf absorbing sunlight",
            "real_world": "Why lawns need sun",
            "quiz": {
                "question": "What do plants need?",
                "options": ["Light", "Sand", "Plastic", "Noise"],
                "answer": "Light",
                "hint": "It comes from the sun",
            },
        },
        {
            "title": "Chlorophyll",
            "explanation": "The green pigment.",
            "quiz": {
                "question": "Which colour is chlorophyll?",
                "options": ["Red", "Green", "Blue", "Black"],
                "answer": "Green",
            },
        },
    ],
    "summary": "Light in, sugar out.",
    "final_motivation": "Go look at a tree!",
    "resources": [
        {"type": "article", "title": "Intro", "url": "https://www.google.com/search?q=photosynthesis"},
    ],
}


@pytest.fixture
def lesson_data():
    return copy.deepcopy(SAMPLE_LESSON)


@pytest.fixture
def lesson_json(lesson_data):
    return json.dumps(lesson_data)


# =============================================================================
# FAKES
# =============================================================================

def completion_response(content):
    """Shape of a LiteLLM ModelResponse, as far as the gateway reads it."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeCompletion:
    """
    Stand-in for litellm.acompletion.

    `outcomes` maps an api_key to either the text to return or an exception
    to raise; keys not listed get `default`.
    """

    def __init__(self, outcomes=None, default=None):
        self.outcomes = outcomes or {}
        self.default = default
        self.calls = []

    async def __call__(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.get(kwargs["api_key"], self.default)
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None:
            raise AssertionError(f"Unexpected completion call with key {kwargs['api_key']!r}")
        return completion_response(outcome)

    @property
    def keys_used(self):
        return [call["api_key"] for call in self.calls]

    @property
    def models_used(self):
        return [call["model"] for call in self.calls]


class RecordingSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)

    @property
    def total(self):
        return sum(self.delays)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that also keeps every request it served."""

    def __init__(self, handler):
        self.requests = []

        def _handler(request):
            self.requests.append(request)
            return handler(request)

        super().__init__(_handler)

    @property
    def paths(self):
        return [r.url.path for r in self.requests]

    @property
    def keys_used(self):
        return [r.headers.get("x-rapidapi-key") for r in self.requests]


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def make_executor():
    """Build an executor over an explicit configuration mapping."""
    def _make(config=None, rotate_on_fatal=False):
        return KeyRotationExecutor(KeyPoolResolver(config=config or {}), rotate_on_fatal=rotate_on_fatal)
    return _make


@pytest.fixture
def recording_sleep():
    return RecordingSleep()
