"""
Assistant router.

Endpoints:
- POST /ai/darija    Short explanation from the chat companion
"""

from fastapi import APIRouter, Depends, HTTPException, status

from edumagic.gateway import ConversationalAssistant

from ..schemas import ExplainRequest, ExplainResponse
from ..deps import get_assistant, get_current_user_id


router = APIRouter(prefix="/ai", tags=["Assistant"])


@router.post("/darija", response_model=ExplainResponse)
async def explain(
    request: ExplainRequest,
    user_id: str = Depends(get_current_user_id),
    assistant: ConversationalAssistant = Depends(get_assistant),
):
    if not request.text or not request.text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No text provided")

    explanation = await assistant.explain(request.text)
    return ExplainResponse(explanation=explanation)
