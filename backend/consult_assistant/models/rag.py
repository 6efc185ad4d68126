"""Pydantic models for RAG: indexed passages, retrieval and query results."""

from __future__ import annotations

import datetime
from typing import Literal

from pydantic import BaseModel


class IndexedPassage(BaseModel):
    """A consultation rendered as text plus its embedding vector."""

    record_id: str
    passage_text: str
    vector: list[float]
    indexed_at: datetime.datetime
    model_tag: str


class RetrievalResult(BaseModel):
    """A passage ranked against a query vector."""

    passage: IndexedPassage
    score: float
    source_id: int


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ComposedAnswer(BaseModel):
    text: str
    is_fallback: bool = False


class QueryResult(BaseModel):
    """Answer returned to the presentation layer. Never cached."""

    answer_text: str
    needs_escalation: bool


class IndexStats(BaseModel):
    count: int
    last_indexed_at: datetime.datetime | None = None


class IndexFailure(BaseModel):
    record_id: str
    reason: str


class IndexReport(BaseModel):
    """Outcome of a best-effort indexing run."""

    indexed: list[str] = []
    failed: list[IndexFailure] = []
