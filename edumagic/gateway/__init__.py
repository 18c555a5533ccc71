"""
AI-provider gateway.

- key_pool: credential discovery per provider family
- rotation: try each credential in order
- text_generation: lesson JSON with Gemini -> OpenAI fallback
- image_generation: probing, polling and fallback image
- assistant: single-call chat companion
"""

from .errors import (
    GatewayError,
    NoCredentialsError,
    ProviderError,
    ProviderTransientError,
    RateLimited,
    AuthRejected,
    InvalidResponse,
    PollTimeoutError,
    FatalProviderError,
    AllCredentialsExhaustedError,
    LessonContentError,
    LessonGenerationError,
)
from .key_pool import KeyPoolResolver, KeySlot, mask_key
from .rotation import KeyRotationExecutor
from .models import LessonContent, LessonLevel, ImageResult, ProviderAttempt, validate_lesson
from .text_generation import LessonGenerator, TEXT_PROVIDERS
from .image_generation import ImageGateway
from .image_providers import IMAGE_PROVIDERS, FALLBACK_PROVIDER_IDS, normalize_image_url
from .assistant import ConversationalAssistant, CANNED_APOLOGY

__all__ = [
    "GatewayError",
    "NoCredentialsError",
    "ProviderError",
    "ProviderTransientError",
    "RateLimited",
    "AuthRejected",
    "InvalidResponse",
    "PollTimeoutError",
    "FatalProviderError",
    "AllCredentialsExhaustedError",
    "LessonContentError",
    "LessonGenerationError",
    "KeyPoolResolver",
    "KeySlot",
    "mask_key",
    "KeyRotationExecutor",
    "LessonContent",
    "LessonLevel",
    "ImageResult",
    "ProviderAttempt",
    "validate_lesson",
    "LessonGenerator",
    "TEXT_PROVIDERS",
    "ImageGateway",
    "IMAGE_PROVIDERS",
    "FALLBACK_PROVIDER_IDS",
    "normalize_image_url",
    "ConversationalAssistant",
    "CANNED_APOLOGY",
]
