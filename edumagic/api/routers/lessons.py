"""
Lessons router: generation and storage of lessons.

Endpoints:
- POST /lessons                      : Generate a lesson and store it
- GET  /lessons                      : Lessons of the current user (newest first)
- GET  /lessons/{id}                 : One lesson
- POST /lessons/{id}/update-image    : Attach a generated image URL
"""

from fastapi import APIRouter, Depends, HTTPException, status

from edumagic.gateway import LessonGenerationError, LessonGenerator
from edumagic.gateway.prompts import normalize_level
from edumagic.store import LessonRecord, LessonStore, apply_image_url

from ..schemas import (
    LessonCreateRequest, LessonResponse, LessonListResponse,
    UpdateImageRequest, SuccessResponse,
)
from ..deps import get_current_user_id, get_lesson_generator, get_lesson_store, logger


router = APIRouter(prefix="/lessons", tags=["Lessons"])


# =============================================================================
# HELPERS
# =============================================================================

def _to_response(record: LessonRecord) -> LessonResponse:
    return LessonResponse(
        id=record.id,
        user_id=record.user_id,
        topic=record.topic,
        level=record.level,
        language=record.language,
        content=record.content,
        created_at=record.created_at,
    )


def _get_owned(lesson_id: str, user_id: str, store: LessonStore) -> LessonRecord:
    record = store.get(lesson_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found")
    if record.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your lesson")
    return record


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("", response_model=LessonResponse, status_code=status.HTTP_201_CREATED)
async def create_lesson(
    request: LessonCreateRequest,
    user_id: str = Depends(get_current_user_id),
    generator: LessonGenerator = Depends(get_lesson_generator),
    store: LessonStore = Depends(get_lesson_store),
):
    """
    Generate a lesson for topic/level/language and store it for the user.

    Returns 502 when every text provider and key failed; no partial lesson
    is ever stored.
    """
    try:
        lesson = await generator.generate_lesson(request.topic, request.level, request.language)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LessonGenerationError as e:
        logger.error("Lesson generation failed for %r: %s", request.topic[:100], e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to generate lesson: {e}",
        )

    record = store.put(LessonRecord(
        user_id=user_id,
        topic=request.topic.strip(),
        level=normalize_level(request.level).value,
        language=request.language,
        content=lesson.to_storage(),
    ))
    logger.info("Stored lesson %s for user %s", record.id, user_id)
    return _to_response(record)


@router.get("", response_model=LessonListResponse)
async def list_lessons(
    user_id: str = Depends(get_current_user_id),
    store: LessonStore = Depends(get_lesson_store),
):
    """List the current user's lessons, newest first."""
    records = store.list_for_user(user_id)
    logger.debug("Found %d lessons for user %s", len(records), user_id)
    return LessonListResponse(lessons=[_to_response(r) for r in records])


@router.get("/{lesson_id}", response_model=LessonResponse)
async def get_lesson(
    lesson_id: str,
    user_id: str = Depends(get_current_user_id),
    store: LessonStore = Depends(get_lesson_store),
):
    return _to_response(_get_owned(lesson_id, user_id, store))


@router.post("/{lesson_id}/update-image", response_model=SuccessResponse)
async def update_lesson_image(
    lesson_id: str,
    request: UpdateImageRequest,
    user_id: str = Depends(get_current_user_id),
    store: LessonStore = Depends(get_lesson_store),
):
    """
    Persist an image URL produced by /generate-image.

    stepIndex >= 0 targets steps[i] (or legacy quizzes[i]); -1 targets the
    introduction image.
    """
    record = _get_owned(lesson_id, user_id, store)

    if not apply_image_url(record.content, request.step_index, request.image_url):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"No step or quiz at index {request.step_index}",
        )

    store.put(record)
    return SuccessResponse()
