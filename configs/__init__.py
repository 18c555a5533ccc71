"""Config module initialization."""
from .settings import (
    # Credential families
    GEMINI_KEY_PREFIX,
    OPENAI_KEY_PREFIX,
    RAPID_KEY_PREFIX,
    GPT_KEY_PREFIX,
    KEY_PREFIXES,
    MAX_KEY_INDEX,
    # Text generation
    PRIMARY_TEXT_PROVIDER,
    SECONDARY_TEXT_PROVIDER,
    GEMINI_MODEL,
    OPENAI_MODEL,
    CHAT_PROVIDER,
    TEXT_TEMPERATURE,
    TEXT_REQUEST_TIMEOUT_SECONDS,
    ROTATE_ON_FATAL,
    # Image generation
    DEFAULT_IMAGE_PROVIDER,
    IMAGE_REQUEST_TIMEOUT_SECONDS,
    IMAGE_POLL_ROUNDS,
    IMAGE_POLL_INTERVAL_SECONDS,
    FALLBACK_IMAGE_URL,
    FALLBACK_IMAGE_PROVIDER,
    IMAGE_STYLE_SUFFIX,
    # System
    LOG_LEVEL,
    VERBOSE,
    ALLOWED_ORIGINS,
    ENABLE_KEY_DIAGNOSTICS,
    APP_VERSION,
    # Validation
    ConfigurationError,
    validate_configuration,
)

__all__ = [
    # Credential families
    "GEMINI_KEY_PREFIX",
    "OPENAI_KEY_PREFIX",
    "RAPID_KEY_PREFIX",
    "GPT_KEY_PREFIX",
    "KEY_PREFIXES",
    "MAX_KEY_INDEX",
    # Text generation
    "PRIMARY_TEXT_PROVIDER",
    "SECONDARY_TEXT_PROVIDER",
    "GEMINI_MODEL",
    "OPENAI_MODEL",
    "CHAT_PROVIDER",
    "TEXT_TEMPERATURE",
    "TEXT_REQUEST_TIMEOUT_SECONDS",
    "ROTATE_ON_FATAL",
    # Image generation
    "DEFAULT_IMAGE_PROVIDER",
    "IMAGE_REQUEST_TIMEOUT_SECONDS",
    "IMAGE_POLL_ROUNDS",
    "IMAGE_POLL_INTERVAL_SECONDS",
    "FALLBACK_IMAGE_URL",
    "FALLBACK_IMAGE_PROVIDER",
    "IMAGE_STYLE_SUFFIX",
    # System
    "LOG_LEVEL",
    "VERBOSE",
    "ALLOWED_ORIGINS",
    "ENABLE_KEY_DIAGNOSTICS",
    "APP_VERSION",
    # Validation
    "ConfigurationError",
    "validate_configuration",
]
