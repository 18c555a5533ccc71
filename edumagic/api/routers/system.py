"""
System router: health check.

Endpoints:
- GET /health    Health check (always available, no auth)
"""

from fastapi import APIRouter

from configs import (
    APP_VERSION,
    GEMINI_KEY_PREFIX,
    KEY_PREFIXES,
    OPENAI_KEY_PREFIX,
    PRIMARY_TEXT_PROVIDER,
    SECONDARY_TEXT_PROVIDER,
)

from ..schemas import HealthResponse
from ..deps import get_key_resolver


router = APIRouter(tags=["System"])


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Report version, text fallback order and how many keys each family has."""
    resolver = get_key_resolver()
    counts = {prefix: resolver.count(prefix) for prefix in KEY_PREFIXES}

    has_text_keys = counts[GEMINI_KEY_PREFIX] > 0 or counts[OPENAI_KEY_PREFIX] > 0

    return HealthResponse(
        status="healthy" if has_text_keys else "degraded",
        version=APP_VERSION,
        text_providers=[PRIMARY_TEXT_PROVIDER, SECONDARY_TEXT_PROVIDER],
        credential_counts=counts,
    )
