"""Test fixtures and configuration."""

from __future__ import annotations

import datetime
from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from consult_assistant.errors import RemoteServiceError
from consult_assistant.main import app
from consult_assistant.models.consultation import ConsultationRecord
from consult_assistant.models.rag import ChatMessage
from consult_assistant.routers.assistant import get_assistant, get_kv_store
from consult_assistant.services.answer_composer import AnswerComposer
from consult_assistant.services.assistant_service import ConsultationAssistant
from consult_assistant.services.kv_store import InMemoryKeyValueStore
from consult_assistant.services.vector_store import VectorStore

# Each term is one dimension of the fake embedding; the trailing constant
# keeps every vector non-zero.
FAKE_VOCABULARY = ("fever", "rash", "headache", "payment")


class FakeVectorizer:
    """Keyword-count embedder. Raises for texts containing a ``fail_on`` term."""

    def __init__(self, fail_on: tuple[str, ...] = (), model: str = "fake-embed") -> None:
        self.model = model
        self.dimensions = len(FAKE_VOCABULARY) + 1
        self.fail_on = fail_on
        self.calls: list[tuple[str, str]] = []

    @property
    def model_tag(self) -> str:
        return f"{self.model}:{self.dimensions}"

    def vector_for(self, text: str) -> list[float]:
        lowered = text.lower()
        return [float(lowered.count(term)) for term in FAKE_VOCABULARY] + [0.1]

    async def embed_passage(self, text: str) -> list[float]:
        self.calls.append(("passage", text))
        return self._embed(text)

    async def embed_query(self, text: str) -> list[float]:
        self.calls.append(("query", text))
        return self._embed(text)

    def _embed(self, text: str) -> list[float]:
        if any(term in text for term in self.fail_on):
            raise RemoteServiceError("Embedding request failed: quota exceeded", status=429)
        return self.vector_for(text)


class FakeGenerator:
    """Returns a canned reply (or raises ``error``) and records the prompts."""

    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[list[ChatMessage]] = []

    async def generate(self, messages: list[ChatMessage]) -> str:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.reply


DETAILED_REPLY = (
    "### Your last visit\n"
    "- **Doctor:** Dr. Rajesh Kumar\n"
    "- **Diagnosis:** Viral pharyngitis, treated with paracetamol and gargles"
)


def make_record(record_id: str = "c-1", **overrides) -> ConsultationRecord:
    fields = {
        "id": record_id,
        "doctor_name": "Dr. Rajesh Kumar",
        "doctor_specialization": "General Physician",
        "scheduled_time": datetime.datetime(2025, 12, 24, 16, 0),
        "status": "completed",
        "consultation_fee": 500,
        "symptoms": "Fever and sore throat",
        "diagnosis": "Viral pharyngitis",
    }
    fields.update(overrides)
    return ConsultationRecord(**fields)


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv: InMemoryKeyValueStore) -> VectorStore:
    return VectorStore(kv, namespace="patient-1")


@pytest.fixture
def vectorizer() -> FakeVectorizer:
    return FakeVectorizer()


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator(reply=DETAILED_REPLY)


@pytest.fixture
def assistant(
    store: VectorStore, vectorizer: FakeVectorizer, generator: FakeGenerator
) -> ConsultationAssistant:
    return ConsultationAssistant(
        store,
        vectorizer,
        AnswerComposer(generator, max_context_chars=4000),
        index_concurrency=1,
        support_email="help@example.com",
    )


@pytest.fixture
async def client(
    kv: InMemoryKeyValueStore, vectorizer: FakeVectorizer, generator: FakeGenerator
) -> AsyncIterator[AsyncClient]:
    def override_get_assistant(user_id: str) -> ConsultationAssistant:
        return ConsultationAssistant(
            VectorStore(kv, namespace=user_id),
            vectorizer,
            AnswerComposer(generator),
            support_email="help@example.com",
        )

    app.dependency_overrides[get_kv_store] = lambda: kv
    app.dependency_overrides[get_assistant] = override_get_assistant
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
