"""FastAPI layer for EduMagic. Route handlers only; provider logic lives in edumagic.gateway."""
