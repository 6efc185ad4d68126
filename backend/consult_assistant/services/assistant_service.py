"""Consultation assistant: index records and answer questions about them."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from google import genai

from consult_assistant.config import Settings
from consult_assistant.errors import ConsultAssistantError
from consult_assistant.models.consultation import ConsultationRecord
from consult_assistant.models.rag import IndexReport, IndexStats, QueryResult
from consult_assistant.services.answer_composer import AnswerComposer
from consult_assistant.services.escalation import should_escalate
from consult_assistant.services.generator import TextGenerator
from consult_assistant.services.indexer import Indexer
from consult_assistant.services.kv_store import KeyValueStore
from consult_assistant.services.retriever import retrieve
from consult_assistant.services.vector_store import VectorStore
from consult_assistant.services.vectorizer import Vectorizer, create_genai_client

logger = logging.getLogger(__name__)

UNAVAILABLE_ANSWER = (
    "I apologize, but the AI assistant is not available right now. "
    "For further assistance, please contact our support team at {support_email}."
)
NOTHING_FOUND_ANSWER = (
    "I couldn't find any consultations related to your question. Please make "
    "sure you have consultations in your history, or try rephrasing your "
    "question. If you need further assistance, please contact our support team "
    "at {support_email}."
)
ERROR_ANSWER = (
    "I apologize, but I ran into a problem while processing your question. "
    "Please contact our support team at {support_email} for assistance."
)
SUPPORT_SUFFIX = (
    "\n\nIf this doesn't resolve your issue, please contact our support team "
    "at {support_email} for further assistance."
)


class ConsultationAssistant:
    """Entry point for the presentation layer, one instance per user.

    Without a vectorizer/composer (no API key configured) the assistant is
    "unavailable": questions get a fixed answer and indexing is skipped, with
    no network call attempted.
    """

    def __init__(
        self,
        store: VectorStore,
        vectorizer: Vectorizer | None = None,
        composer: AnswerComposer | None = None,
        *,
        top_k: int = 5,
        index_concurrency: int = 4,
        currency_symbol: str = "₹",
        support_email: str = "support@sa-privatelimited.com",
    ) -> None:
        self.store = store
        self.vectorizer = vectorizer
        self.composer = composer
        self.top_k = top_k
        self.support_email = support_email
        self.indexer = (
            Indexer(vectorizer, store, index_concurrency, currency_symbol)
            if vectorizer is not None
            else None
        )

    @property
    def available(self) -> bool:
        return self.vectorizer is not None and self.composer is not None

    def _result(self, template: str, needs_escalation: bool = True) -> QueryResult:
        return QueryResult(
            answer_text=template.format(support_email=self.support_email),
            needs_escalation=needs_escalation,
        )

    async def answer_question(
        self, question: str, user_display_name: str | None = None
    ) -> QueryResult:
        """Answer ``question`` from the user's indexed consultations.

        Never raises for remote, storage or validation failures: every path
        returns readable text, escalated when the answer can't be trusted.
        """
        question = (question or "").strip()
        vectorizer, composer = self.vectorizer, self.composer
        if not question or vectorizer is None or composer is None:
            logger.info(
                "Assistant unavailable (question=%s, credentials=%s)",
                bool(question),
                self.available,
            )
            return self._result(UNAVAILABLE_ANSWER)

        logger.info(
            "=== Question (namespace=%s): %r ===",
            self.store.namespace,
            question[:100] + ("..." if len(question) > 100 else ""),
        )
        try:
            return await self._answer(question, user_display_name, vectorizer, composer)
        except ConsultAssistantError as e:
            logger.warning("Question failed (%s): %s", e.code, e.message)
        except Exception:
            logger.exception("Unexpected failure while answering question")
        return self._result(ERROR_ANSWER)

    async def _answer(
        self,
        question: str,
        user_display_name: str | None,
        vectorizer: Vectorizer,
        composer: AnswerComposer,
    ) -> QueryResult:
        query_vector = await vectorizer.embed_query(question)
        passages = await self.store.get_all()
        compatible = [p for p in passages if p.model_tag == vectorizer.model_tag]
        if len(compatible) < len(passages):
            logger.warning(
                "Ignoring %d passages indexed with a different embedding model",
                len(passages) - len(compatible),
            )

        results = retrieve(query_vector, compatible, self.top_k)
        logger.info(
            "Retrieved %d/%d passages (top_k=%d)",
            len(results),
            len(compatible),
            self.top_k,
        )
        if not results:
            return self._result(NOTHING_FOUND_ANSWER)

        composed = await composer.compose(question, results, user_display_name)
        needs_escalation = composed.is_fallback or should_escalate(
            question, composed.text, len(results)
        )
        answer = composed.text
        if needs_escalation:
            answer += SUPPORT_SUFFIX.format(support_email=self.support_email)
        logger.info(
            "Answered with %d chars (escalate=%s)", len(answer), needs_escalation
        )
        return QueryResult(answer_text=answer, needs_escalation=needs_escalation)

    async def index_batch(self, records: Sequence[ConsultationRecord]) -> IndexReport:
        if self.indexer is None:
            logger.info("Assistant unavailable, skipping indexing of %d records", len(records))
            return IndexReport()
        return await self.indexer.index_batch(records)

    async def index_stats(self) -> IndexStats:
        return await self.store.stats()

    async def clear_index(self) -> None:
        """Drop every cached passage for this user (e.g. on sign-out)."""
        await self.store.clear()


class AssistantModels:
    """Hosted-model clients shared by every user's assistant.

    Built once per process from the API key; only the per-user vector store
    is created per request.
    """

    def __init__(
        self,
        client: genai.Client,
        vectorizer: Vectorizer,
        composer: AnswerComposer,
    ) -> None:
        self.client = client
        self.vectorizer = vectorizer
        self.composer = composer

    async def aclose(self) -> None:
        """Release the client's HTTP connections."""
        await self.client.aio.aclose()
        self.client.close()


def build_models(settings: Settings) -> AssistantModels | None:
    """Create the shared model clients, or ``None`` without an API key."""
    if not settings.google_api_key:
        logger.info("GOOGLE_API_KEY not set, assistant will be unavailable")
        return None
    client = create_genai_client(settings.google_api_key)
    vectorizer = Vectorizer(
        client,
        model=settings.embedding_model,
        dimensions=settings.embedding_dimensions,
        timeout=settings.request_timeout_seconds,
    )
    generator = TextGenerator(
        client,
        model=settings.generation_model,
        temperature=settings.generation_temperature,
        max_output_tokens=settings.generation_max_output_tokens,
        timeout=settings.request_timeout_seconds,
    )
    composer = AnswerComposer(generator, settings.max_context_chars)
    logger.info(
        "Model clients ready (embedding=%s, generation=%s)",
        vectorizer.model_tag,
        settings.generation_model,
    )
    return AssistantModels(client, vectorizer, composer)


def build_assistant(
    user_id: str,
    kv: KeyValueStore,
    settings: Settings,
    models: AssistantModels | None,
) -> ConsultationAssistant:
    """Wire a ``ConsultationAssistant`` for ``user_id``.

    ``models`` of ``None`` yields an unavailable assistant.
    """
    return ConsultationAssistant(
        VectorStore(kv, namespace=user_id),
        models.vectorizer if models is not None else None,
        models.composer if models is not None else None,
        top_k=settings.retrieval_top_k,
        index_concurrency=settings.index_concurrency,
        currency_symbol=settings.currency_symbol,
        support_email=settings.support_email,
    )
