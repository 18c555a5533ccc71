"""
Shared dependencies for the EduMagic API.

Provides:
- Structured logging for the whole `edumagic` logger tree
- Singleton gateway services (created once, reused per request)
- Lesson store singleton
- Current-user dependency (auth itself is handled upstream)
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from configs import LOG_LEVEL, MAX_KEY_INDEX, ROTATE_ON_FATAL
from edumagic.gateway import (
    ConversationalAssistant,
    ImageGateway,
    KeyPoolResolver,
    KeyRotationExecutor,
    LessonGenerator,
)
from edumagic.store import InMemoryLessonStore, LessonStore


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

def setup_logging() -> logging.Logger:
    """Configure structured logging for the API and the gateway."""
    logger = logging.getLogger("edumagic")

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    return logger


logger = setup_logging()


# =============================================================================
# SINGLETON SERVICES
# =============================================================================

_resolver: Optional[KeyPoolResolver] = None
_executor: Optional[KeyRotationExecutor] = None
_lesson_generator: Optional[LessonGenerator] = None
_image_gateway: Optional[ImageGateway] = None
_assistant: Optional[ConversationalAssistant] = None
_lesson_store: Optional[LessonStore] = None


def get_key_resolver() -> KeyPoolResolver:
    """Key resolver over the environment snapshot taken at first use."""
    global _resolver
    if _resolver is None:
        _resolver = KeyPoolResolver(max_index=MAX_KEY_INDEX)
    return _resolver


def get_executor() -> KeyRotationExecutor:
    global _executor
    if _executor is None:
        _executor = KeyRotationExecutor(get_key_resolver(), rotate_on_fatal=ROTATE_ON_FATAL)
    return _executor


def get_lesson_generator() -> LessonGenerator:
    global _lesson_generator
    if _lesson_generator is None:
        logger.info("Creating singleton LessonGenerator")
        _lesson_generator = LessonGenerator(get_executor())
    return _lesson_generator


def get_image_gateway() -> ImageGateway:
    global _image_gateway
    if _image_gateway is None:
        logger.info("Creating singleton ImageGateway")
        _image_gateway = ImageGateway(get_executor())
    return _image_gateway


def get_assistant() -> ConversationalAssistant:
    global _assistant
    if _assistant is None:
        _assistant = ConversationalAssistant(get_executor())
    return _assistant


def get_lesson_store() -> LessonStore:
    global _lesson_store
    if _lesson_store is None:
        _lesson_store = InMemoryLessonStore()
    return _lesson_store


def reset_services() -> None:
    """Drop all singletons (useful for testing)."""
    global _resolver, _executor, _lesson_generator, _image_gateway, _assistant, _lesson_store
    _resolver = None
    _executor = None
    _lesson_generator = None
    _image_gateway = None
    _assistant = None
    _lesson_store = None


# =============================================================================
# CURRENT USER
# =============================================================================

def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """
    Opaque id of the authenticated user.

    Authentication happens in front of this service; the verified id is
    forwarded in the X-User-Id header.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return x_user_id.strip()
