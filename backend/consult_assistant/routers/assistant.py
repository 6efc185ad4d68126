"""Consultation assistant API endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from consult_assistant.config import settings
from consult_assistant.database import async_session
from consult_assistant.errors import StorageError
from consult_assistant.models.rag import IndexReport, IndexStats, QueryResult
from consult_assistant.models.schemas import ErrorDetail, IndexRequest, QuestionRequest
from consult_assistant.services.assistant_service import (
    AssistantModels,
    ConsultationAssistant,
    build_assistant,
    build_models,
)
from consult_assistant.services.kv_store import KeyValueStore, SqlKeyValueStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users/{user_id}/assistant", tags=["assistant"])


def get_kv_store() -> KeyValueStore:
    """Dependency for the durable passage cache backend."""
    return SqlKeyValueStore(async_session)


def get_models(request: Request) -> AssistantModels | None:
    """Dependency for the model clients shared across requests.

    Normally set by the app lifespan; built on first use otherwise.
    """
    state = request.app.state
    if not hasattr(state, "assistant_models"):
        state.assistant_models = build_models(settings)
    return state.assistant_models


def get_assistant(
    user_id: str,
    kv: KeyValueStore = Depends(get_kv_store),
    models: AssistantModels | None = Depends(get_models),
) -> ConsultationAssistant:
    return build_assistant(user_id, kv, settings, models)


def _storage_unavailable(e: StorageError) -> HTTPException:
    return HTTPException(
        status_code=503,
        detail=ErrorDetail(code=e.code, message=e.message).model_dump(),
    )


@router.post("/index", response_model=IndexReport)
async def index_consultations(
    user_id: str,
    body: IndexRequest,
    assistant: ConsultationAssistant = Depends(get_assistant),
) -> IndexReport:
    logger.info("Indexing %d consultations for user %s", len(body.consultations), user_id)
    return await assistant.index_batch(body.consultations)


@router.post("/questions", response_model=QueryResult)
async def ask_question(
    user_id: str,
    body: QuestionRequest,
    assistant: ConsultationAssistant = Depends(get_assistant),
) -> QueryResult:
    return await assistant.answer_question(body.question, body.user_display_name)


@router.get("/stats", response_model=IndexStats)
async def get_index_stats(
    user_id: str,
    assistant: ConsultationAssistant = Depends(get_assistant),
) -> IndexStats:
    try:
        return await assistant.index_stats()
    except StorageError as e:
        logger.exception("Reading index stats failed for user %s", user_id)
        raise _storage_unavailable(e)


@router.delete("/index", status_code=204)
async def clear_index(
    user_id: str,
    assistant: ConsultationAssistant = Depends(get_assistant),
) -> Response:
    try:
        await assistant.clear_index()
    except StorageError as e:
        logger.exception("Clearing index failed for user %s", user_id)
        raise _storage_unavailable(e)
    logger.info("Cleared passage cache for user %s", user_id)
    return Response(status_code=204)
