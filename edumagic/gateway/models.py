"""
Data models for the AI-provider gateway.

Lesson content is validated with Pydantic (the LLM output is untrusted);
internal bookkeeping records are plain dataclasses.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import LessonContentError


# ============================================================
# ENUMS
# ============================================================

class LessonLevel(str, Enum):
    """Difficulty levels a lesson can be calibrated to."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class AttemptOutcome(str, Enum):
    """Outcome of a single provider call."""
    SUCCESS = "success"
    TRANSIENT_FAILURE = "transient_failure"
    FATAL = "fatal"


# ============================================================
# LESSON CONTENT (LLM OUTPUT)
# ============================================================

class Resource(BaseModel):
    """External learning resource (video, article, book...)."""
    model_config = ConfigDict(extra="allow")

    type: str = "article"
    title: str
    description: Optional[str] = None
    url: str
    difficulty: Optional[str] = None


class Quiz(BaseModel):
    """Single multiple-choice question attached to a step."""
    model_config = ConfigDict(extra="allow")

    question: str
    options: List[str] = Field(..., min_length=1)
    answer: str
    hint: str = ""
    explanation: Optional[str] = None

    @model_validator(mode="after")
    def answer_must_be_an_option(self) -> "Quiz":
        if self.answer not in self.options:
            raise ValueError(f"Quiz answer {self.answer!r} is not one of its options")
        return self


class LessonStep(BaseModel):
    """One concept in the guided learning journey."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title: str
    explanation: str
    visual_description: str = ""
    real_world: Optional[str] = None
    quiz: Quiz
    resources: List[Resource] = Field(default_factory=list)
    image_url: Optional[str] = Field(default=None, alias="imageUrl")


class LessonContent(BaseModel):
    """Complete lesson as produced by the text generation service."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    introduction: str
    introduction_visual: Optional[str] = None
    key_concepts: List[str] = Field(default_factory=list)
    steps: List[LessonStep] = Field(..., min_length=1)
    summary: str
    final_motivation: str = ""
    resources: List[Resource] = Field(default_factory=list)
    introduction_image_url: Optional[str] = Field(default=None, alias="introductionImageUrl")

    @field_validator("key_concepts", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return value or []

    def to_storage(self) -> Dict[str, Any]:
        """Serialize in the persisted shape (camelCase image fields)."""
        return self.model_dump(by_alias=True, exclude_none=True)


def validate_lesson(data: Any) -> LessonContent:
    """
    Validate parsed lesson JSON.

    Raises:
        LessonContentError: If the shape is wrong (no steps, answer not in
            options, missing required fields...)
    """
    if not isinstance(data, dict):
        raise LessonContentError(f"Expected lesson object, got {type(data).__name__}")
    try:
        return LessonContent.model_validate(data)
    except ValidationError as e:
        raise LessonContentError(f"Invalid lesson content: {e.error_count()} error(s): {e}") from e


# ============================================================
# GATEWAY RECORDS
# ============================================================

@dataclass(frozen=True)
class GenerationRequest:
    """A lesson generation request; immutable once issued."""
    topic: str
    level: LessonLevel
    language: str = "en"


@dataclass
class ProviderAttempt:
    """Ephemeral record of one provider call, used for diagnostics only."""
    provider: str
    endpoint: str
    outcome: AttemptOutcome
    status_code: Optional[int] = None
    elapsed_ms: float = 0.0
    key_index: Optional[int] = None
    detail: Optional[str] = None


@dataclass
class ImageResult:
    """Image locator returned by the image gateway."""
    image_url: str
    provider: str
    raw: Any = None
    warning: Optional[str] = None
    attempts: List[ProviderAttempt] = field(default_factory=list)

    @property
    def is_fallback(self) -> bool:
        return self.warning is not None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "imageUrl": self.image_url,
            "provider": self.provider,
            "rawData": self.raw,
        }
        if self.warning:
            payload["warning"] = self.warning
        return payload
