"""
Tests for lesson content validation and level normalization.
"""

import pytest

from edumagic.gateway.errors import LessonContentError
from edumagic.gateway.models import ImageResult, LessonLevel, validate_lesson
from edumagic.gateway.prompts import build_image_prompt, build_lesson_prompt, normalize_level


class TestValidateLesson:

    def test_valid_lesson(self, lesson_data):
        lesson = validate_lesson(lesson_data)
        assert len(lesson.steps) == 2
        assert lesson.steps[0].quiz.answer in lesson.steps[0].quiz.options

    def test_answer_must_be_one_of_the_options(self, lesson_data):
        lesson_data["steps"][1]["quiz"]["answer"] = "Purple"
        with pytest.raises(LessonContentError):
            validate_lesson(lesson_data)

    def test_steps_required(self, lesson_data):
        lesson_data["steps"] = []
        with pytest.raises(LessonContentError):
            validate_lesson(lesson_data)

    def test_missing_introduction(self, lesson_data):
        del lesson_data["introduction"]
        with pytest.raises(LessonContentError):
            validate_lesson(lesson_data)

    def test_non_object_rejected(self):
        with pytest.raises(LessonContentError):
            validate_lesson(["not", "a", "lesson"])

    def test_storage_shape_uses_camel_case_image_fields(self, lesson_data):
        lesson_data["steps"][0]["imageUrl"] = "https://cdn.example.com/a.png"
        stored = validate_lesson(lesson_data).to_storage()
        assert stored["steps"][0]["imageUrl"] == "https://cdn.example.com/a.png"
        assert "image_url" not in stored["steps"][0]
        assert "introductionImageUrl" not in stored

    def test_extra_fields_are_kept(self, lesson_data):
        lesson_data["estimated_minutes"] = 15
        assert validate_lesson(lesson_data).to_storage()["estimated_minutes"] == 15


class TestNormalizeLevel:

    @pytest.mark.parametrize("raw,expected", [
        ("beginner", LessonLevel.BEGINNER),
        ("Easy", LessonLevel.BEGINNER),
        ("medium", LessonLevel.INTERMEDIATE),
        ("Intermediate level", LessonLevel.INTERMEDIATE),
        ("HARD mode", LessonLevel.ADVANCED),
        ("expert", LessonLevel.ADVANCED),
        ("", LessonLevel.BEGINNER),
        ("whatever", LessonLevel.BEGINNER),
    ])
    def test_synonyms(self, raw, expected):
        assert normalize_level(raw) is expected


class TestPrompts:

    def test_lesson_prompt_carries_topic_level_language(self):
        prompt = build_lesson_prompt("Black holes", LessonLevel.ADVANCED, "fr")
        assert '"Black holes"' in prompt
        assert '"advanced"' in prompt
        assert "fr" in prompt
        assert "7-8 steps" in prompt

    def test_image_prompt_appends_style(self):
        assert build_image_prompt("a volcano", "flat style").startswith("a volcano")
        assert build_image_prompt("a volcano", "flat style").endswith("flat style")


class TestImageResult:

    def test_fallback_payload_has_warning(self):
        result = ImageResult(image_url="https://x/y.png", provider="default-educational", warning="down")
        assert result.is_fallback
        assert result.to_dict() == {
            "imageUrl": "https://x/y.png",
            "provider": "default-educational",
            "rawData": None,
            "warning": "down",
        }
