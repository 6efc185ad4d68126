"""Pydantic request/response/error schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from consult_assistant.models.consultation import ConsultationRecord


# --- Assistant API schemas ---


class IndexRequest(BaseModel):
    consultations: list[ConsultationRecord]


class QuestionRequest(BaseModel):
    question: str = Field(max_length=2000)
    user_display_name: str | None = None


# --- Error schema ---


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: dict = {}
