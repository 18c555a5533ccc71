"""
Images router.

Endpoints:
- POST /generate-image    Resolve an image URL for a prompt (never fails on provider outage)
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from edumagic.gateway import GatewayError, ImageGateway

from ..schemas import ImageRequest, ImageResponse
from ..deps import get_current_user_id, get_image_gateway, logger


router = APIRouter(tags=["Images"])


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/generate-image", response_model=ImageResponse, response_model_exclude_none=True)
async def generate_image(
    request: ImageRequest,
    user_id: str = Depends(get_current_user_id),
    gateway: ImageGateway = Depends(get_image_gateway),
):
    """
    Generate an image for the prompt.

    With rotation (no apiKey) the response is always 200: on outage the
    default educational image comes back with a `warning`. A caller-supplied
    apiKey is used once and its failure is reported as 500 {error}.
    """
    if not request.prompt or not request.prompt.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Prompt is required")

    try:
        result = await gateway.generate_image(request.prompt, request.provider, request.api_key)
    except GatewayError as e:
        logger.error("Image generation with caller key failed: %s", e)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e), "provider": request.provider},
        )

    if result.is_fallback:
        logger.warning("Served fallback image to %s: %s", user_id, result.warning)

    return ImageResponse.model_validate(result.to_dict())
