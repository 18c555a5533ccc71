"""
Pydantic schemas for the EduMagic API.

These models define the request/response structure for all API endpoints.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================
# REQUEST MODELS
# ============================================================

class LessonCreateRequest(BaseModel):
    """Request body for POST /lessons."""
    topic: str = Field(..., description="What the lesson is about", min_length=1, max_length=300)
    level: str = Field(..., description="beginner / intermediate / advanced (free-form)", min_length=1)
    language: str = Field(default="en", description="Language of the lesson text")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"topic": "Photosynthesis", "level": "beginner", "language": "en"},
                {"topic": "Rust lifetimes", "level": "expert", "language": "fr"},
            ]
        }
    }


class UpdateImageRequest(BaseModel):
    """Request body for POST /lessons/{id}/update-image."""
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(..., alias="imageUrl", min_length=1)
    step_index: int = Field(..., alias="stepIndex", description="-1 targets the introduction image")


class ImageRequest(BaseModel):
    """Request body for POST /generate-image."""
    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(default="", description="English image description")
    provider: Optional[str] = Field(default=None, description="Image provider id")
    api_key: Optional[str] = Field(default=None, alias="apiKey", description="Bypass rotation with this key")


class ExplainRequest(BaseModel):
    """Request body for POST /ai/darija."""
    text: str = Field(default="")


class KeyTestRequest(BaseModel):
    """Request body for POST /keys/test."""
    prefix: str
    key: str


# ============================================================
# RESPONSE MODELS
# ============================================================

class LessonResponse(BaseModel):
    id: str
    user_id: str
    topic: str
    level: str
    language: str
    content: Dict[str, Any]
    created_at: datetime


class LessonListResponse(BaseModel):
    lessons: List[LessonResponse]


class SuccessResponse(BaseModel):
    success: bool = True


class ImageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(..., alias="imageUrl")
    provider: str
    raw_data: Any = Field(default=None, alias="rawData")
    warning: Optional[str] = None


class ExplainResponse(BaseModel):
    explanation: str


class KeySlotResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    prefix: str
    masked_key: str = Field(..., alias="maskedKey")


class KeyListResponse(BaseModel):
    keys: List[KeySlotResponse]


class KeyTestResponse(BaseModel):
    success: bool
    message: str


class HealthResponse(BaseModel):
    status: str
    version: str
    text_providers: List[str]
    credential_counts: Dict[str, int]
