"""API routers, one per concern."""

from . import assistant, images, keys, lessons, system

__all__ = ["assistant", "images", "keys", "lessons", "system"]
