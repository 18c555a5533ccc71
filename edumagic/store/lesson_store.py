"""
Lesson persistence collaborator.

The gateway never writes anything itself; route handlers hand generated
content and image URLs to a LessonStore. The in-memory store is the default
for local development and tests; a relational store only needs to satisfy
the same protocol.
"""
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol


@dataclass
class LessonRecord:
    """A stored lesson. `content` is the persisted (camelCase) JSON shape."""
    user_id: str
    topic: str
    level: str
    content: Dict[str, Any]
    language: str = "en"
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class LessonStore(Protocol):
    def put(self, record: LessonRecord) -> LessonRecord: ...

    def get(self, lesson_id: str) -> Optional[LessonRecord]: ...

    def list_for_user(self, user_id: str) -> List[LessonRecord]: ...


class InMemoryLessonStore:
    """Process-local LessonStore (lost on restart)."""

    def __init__(self):
        self._records: Dict[str, LessonRecord] = {}
        self._lock = threading.Lock()

    def put(self, record: LessonRecord) -> LessonRecord:
        with self._lock:
            self._records[record.id] = record
        return record

    def get(self, lesson_id: str) -> Optional[LessonRecord]:
        with self._lock:
            return self._records.get(lesson_id)

    def list_for_user(self, user_id: str) -> List[LessonRecord]:
        with self._lock:
            records = [r for r in self._records.values() if r.user_id == user_id]
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


def apply_image_url(content: Dict[str, Any], step_index: int, image_url: str) -> bool:
    """
    Attach a generated image URL to lesson content in place.

    - steps format: content["steps"][i]["imageUrl"]
    - step_index == -1: content["introductionImageUrl"]
    - legacy format: content["quizzes"][i]["imageUrl"]

    Returns:
        False if no slot matched (content is left untouched)
    """
    if step_index == -1:
        content["introductionImageUrl"] = image_url
        return True

    for collection in ("steps", "quizzes"):
        items = content.get(collection)
        if isinstance(items, list) and 0 <= step_index < len(items) and isinstance(items[step_index], dict):
            items[step_index]["imageUrl"] = image_url
            return True

    return False
