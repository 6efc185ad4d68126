"""FastAPI application entry point."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from rich.logging import RichHandler

from consult_assistant.config import settings
from consult_assistant.database import engine, init_models
from consult_assistant.routers.assistant import router as assistant_router
from consult_assistant.services.assistant_service import build_models

logging.basicConfig(
    level=logging.INFO,
    format="%(name)s - %(message)s",
    datefmt="%H:%M:%S",
    handlers=[RichHandler(rich_tracebacks=True, markup=False)],
    force=True,
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("google_genai").setLevel(logging.WARNING)
# Our app loggers: show DEBUG when debug=True, keep third-party libs at INFO
if settings.debug:
    for name in ("consult_assistant.services", "consult_assistant.routers"):
        logging.getLogger(name).setLevel(logging.DEBUG)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await init_models()
    app.state.assistant_models = build_models(settings)
    yield
    if app.state.assistant_models is not None:
        await app.state.assistant_models.aclose()
    await engine.dispose()


app = FastAPI(
    title="Consultation Assistant",
    description="Answers patient questions about their past consultations",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(assistant_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "assistant": "available" if settings.google_api_key else "unavailable",
    }
