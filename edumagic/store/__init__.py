"""Lesson persistence collaborator."""

from .lesson_store import LessonRecord, LessonStore, InMemoryLessonStore, apply_image_url

__all__ = ["LessonRecord", "LessonStore", "InMemoryLessonStore", "apply_image_url"]
