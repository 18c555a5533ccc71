"""
EduMagic FastAPI Application.

This module wires the routers onto the app. All provider logic is delegated
to edumagic.gateway; no prompt building or HTTP calls to providers here.

Endpoints:
- GET  /health
- POST /lessons, GET /lessons, GET /lessons/{id}, POST /lessons/{id}/update-image
- POST /generate-image
- POST /ai/darija
- GET  /keys, POST /keys/test (diagnostics, off by default)
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from configs import ALLOWED_ORIGINS, APP_VERSION, ConfigurationError, validate_configuration

from .deps import logger
from .routers import assistant, images, keys, lessons, system


# ============================================================
# APP LIFECYCLE
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        counts = validate_configuration()
        summary = ", ".join(f"{prefix}={count}" for prefix, count in counts.items())
        logger.info("EduMagic API %s started. Keys: %s", APP_VERSION, summary)
    except ConfigurationError as e:
        logger.warning("EduMagic API %s started without text credentials: %s", APP_VERSION, e)
    yield
    logger.info("EduMagic API shutting down.")


# ============================================================
# FASTAPI APP
# ============================================================

app = FastAPI(
    title="EduMagic API",
    description="Lesson generation with rotating AI-provider keys",
    version=APP_VERSION,
    lifespan=lifespan,
)

# CORS for frontend - configurable via environment
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system.router)
app.include_router(lessons.router)
app.include_router(images.router)
app.include_router(assistant.router)
app.include_router(keys.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("edumagic.api.main:app", host="0.0.0.0", port=8000, reload=True)
