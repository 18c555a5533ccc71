"""
Configuration management for the EduMagic AI gateway.

This module handles all configuration loading and validation.
Values are read once from the environment (and an optional .env file)
and exposed as module-level constants. Credentials themselves are NOT
read here: they are discovered per provider family by the key pool
resolver, so that numbered variants (GEMINI_API_KEY1, GEMINI_API_KEY_2, ...)
are picked up without listing them one by one.
"""
import os
from typing import Dict, Mapping, Optional
from dotenv import load_dotenv

# Load environment variables from .env file
# interpolate=False prevents $VAR expansion in values (API keys may contain $)
load_dotenv(interpolate=False)


# =============================================================================
# CONFIGURATION VALIDATION
# =============================================================================

class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _get_bool(key: str, default: str = "false") -> bool:
    return os.getenv(key, default).strip().lower() == "true"


# =============================================================================
# CREDENTIAL FAMILIES
# =============================================================================

# Each prefix names a family of interchangeable keys:
#   PREFIX, PREFIX1..PREFIX10, PREFIX_1..PREFIX_10
GEMINI_KEY_PREFIX = "GEMINI_API_KEY"
OPENAI_KEY_PREFIX = "OPENAI_API_KEY"
RAPID_KEY_PREFIX = "RAPID_API_KEY"
GPT_KEY_PREFIX = "GPT_API_KEY"

KEY_PREFIXES = [OPENAI_KEY_PREFIX, GEMINI_KEY_PREFIX, GPT_KEY_PREFIX, RAPID_KEY_PREFIX]

# Highest numbered slot scanned per family
MAX_KEY_INDEX = int(os.getenv("MAX_KEY_INDEX", "10"))

# =============================================================================
# TEXT GENERATION
# =============================================================================

# Fallback chain: primary -> secondary -> LessonGenerationError
PRIMARY_TEXT_PROVIDER = os.getenv("PRIMARY_TEXT_PROVIDER", "gemini").lower()
SECONDARY_TEXT_PROVIDER = os.getenv("SECONDARY_TEXT_PROVIDER", "openai").lower()

# LiteLLM model identifiers (provider-prefixed)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini/gemini-2.0-flash")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "openai/gpt-4o-mini")
CHAT_PROVIDER = os.getenv("CHAT_PROVIDER", "gemini").lower()

TEXT_TEMPERATURE = float(os.getenv("TEXT_TEMPERATURE", "0.7"))
TEXT_REQUEST_TIMEOUT_SECONDS = float(os.getenv("TEXT_REQUEST_TIMEOUT_SECONDS", "90"))

# When true, FatalProviderError also rotates to the next key (legacy behaviour)
ROTATE_ON_FATAL = _get_bool("ROTATE_ON_FATAL")

# =============================================================================
# IMAGE GENERATION
# =============================================================================

DEFAULT_IMAGE_PROVIDER = os.getenv("DEFAULT_IMAGE_PROVIDER", "midjourney-imaginecraft")
IMAGE_REQUEST_TIMEOUT_SECONDS = float(os.getenv("IMAGE_REQUEST_TIMEOUT_SECONDS", "60"))

# Async job polling: IMAGE_POLL_ROUNDS x IMAGE_POLL_INTERVAL_SECONDS ceiling per job
IMAGE_POLL_ROUNDS = int(os.getenv("IMAGE_POLL_ROUNDS", "10"))
IMAGE_POLL_INTERVAL_SECONDS = float(os.getenv("IMAGE_POLL_INTERVAL_SECONDS", "3"))

FALLBACK_IMAGE_URL = os.getenv(
    "FALLBACK_IMAGE_URL",
    "https://images.unsplash.com/photo-1503676260728-1c00da094a0b?w=1200&q=80",
)
FALLBACK_IMAGE_PROVIDER = "default-educational"

IMAGE_STYLE_SUFFIX = os.getenv(
    "IMAGE_STYLE_SUFFIX",
    "Educational illustration, clean vector style, soft lighting, vibrant colors, high detail, no text.",
)

# =============================================================================
# SYSTEM SETTINGS
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VERBOSE = _get_bool("VERBOSE")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

# Key listing/testing endpoints (disabled by default in production)
ENABLE_KEY_DIAGNOSTICS = _get_bool("ENABLE_KEY_DIAGNOSTICS")

APP_VERSION = "1.0.0"


# =============================================================================
# VALIDATION
# =============================================================================

def validate_configuration(environ: Optional[Mapping[str, str]] = None) -> Dict[str, int]:
    """
    Count configured credentials per family and fail fast if text generation
    has nothing to work with.

    Args:
        environ: Configuration snapshot (defaults to os.environ)

    Returns:
        Mapping of key prefix -> number of distinct credentials

    Raises:
        ConfigurationError: If neither text provider family has a credential
    """
    # Lazy: edumagic.gateway imports configs
    from edumagic.gateway.key_pool import KeyPoolResolver

    resolver = KeyPoolResolver(environ, max_index=MAX_KEY_INDEX)
    counts = {prefix: len(resolver.resolve(prefix)) for prefix in KEY_PREFIXES}

    if counts[GEMINI_KEY_PREFIX] == 0 and counts[OPENAI_KEY_PREFIX] == 0:
        raise ConfigurationError(
            "No text generation credentials configured.\n"
            f"   Set {GEMINI_KEY_PREFIX} (or {GEMINI_KEY_PREFIX}1..{MAX_KEY_INDEX}) "
            f"and/or {OPENAI_KEY_PREFIX} in your .env file."
        )

    return counts
