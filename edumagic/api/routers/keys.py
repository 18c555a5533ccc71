"""
Keys router: credential diagnostics.

Endpoints:
- GET  /keys         Masked list of every discovered key
- POST /keys/test    Validate one key against its provider

Both are gated behind ENABLE_KEY_DIAGNOSTICS and return 404 otherwise.
Raw key values never leave the process.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from configs import ENABLE_KEY_DIAGNOSTICS, KEY_PREFIXES
from edumagic.gateway.key_check import check_key

from ..schemas import KeyListResponse, KeySlotResponse, KeyTestRequest, KeyTestResponse
from ..deps import get_current_user_id, get_key_resolver, logger


router = APIRouter(prefix="/keys", tags=["Keys"])


def _require_diagnostics():
    if not ENABLE_KEY_DIAGNOSTICS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("", response_model=KeyListResponse, dependencies=[Depends(_require_diagnostics)])
async def list_keys(user_id: str = Depends(get_current_user_id)):
    """List discovered keys per family, masked."""
    resolver = get_key_resolver()
    slots = [slot for prefix in KEY_PREFIXES for slot in resolver.describe(prefix)]
    return KeyListResponse(keys=[
        KeySlotResponse(name=s.name, prefix=s.prefix, masked_key=s.masked_key) for s in slots
    ])


@router.post("/test", response_model=KeyTestResponse, dependencies=[Depends(_require_diagnostics)])
async def test_key(request: KeyTestRequest, user_id: str = Depends(get_current_user_id)):
    """Run the cheapest possible call with the given key."""
    result = await check_key(request.prefix, request.key)
    logger.info("Key test for %s by %s: %s", request.prefix, user_id, "ok" if result.success else "failed")
    return KeyTestResponse(success=result.success, message=result.message)
