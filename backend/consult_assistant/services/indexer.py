"""Best-effort indexing of consultation records into the vector store."""

from __future__ import annotations

import asyncio
import datetime
import logging
from collections.abc import Sequence

from consult_assistant.errors import ConsultAssistantError
from consult_assistant.models.consultation import ConsultationRecord
from consult_assistant.models.rag import IndexedPassage, IndexFailure, IndexReport
from consult_assistant.services.record_serializer import serialize_record
from consult_assistant.services.vector_store import VectorStore
from consult_assistant.services.vectorizer import Vectorizer

logger = logging.getLogger(__name__)


class Indexer:
    """Serialize -> embed -> upsert, one record at a time.

    A failing record is logged and reported, never raised: the rest of the
    batch still gets indexed. ``concurrency`` bounds how many embedding calls
    are in flight at once (1 = sequential).
    """

    def __init__(
        self,
        vectorizer: Vectorizer,
        store: VectorStore,
        concurrency: int = 4,
        currency_symbol: str = "₹",
    ) -> None:
        self.vectorizer = vectorizer
        self.store = store
        self.concurrency = max(1, concurrency)
        self.currency_symbol = currency_symbol

    async def index_record(self, record: ConsultationRecord) -> IndexedPassage:
        text = serialize_record(record, self.currency_symbol)
        vector = await self.vectorizer.embed_passage(text)
        passage = IndexedPassage(
            record_id=record.id,
            passage_text=text,
            vector=vector,
            indexed_at=datetime.datetime.now(datetime.UTC),
            model_tag=self.vectorizer.model_tag,
        )
        await self.store.upsert(passage)
        return passage

    async def index_batch(self, records: Sequence[ConsultationRecord]) -> IndexReport:
        logger.info(
            "Indexing batch of %d consultations (concurrency=%d)",
            len(records),
            self.concurrency,
        )
        semaphore = asyncio.Semaphore(self.concurrency)
        report = IndexReport()

        async def _run(position: int, record: ConsultationRecord) -> None:
            async with semaphore:
                logger.debug(
                    "Indexing [%d/%d] %s", position, len(records), record.id
                )
                try:
                    await self.index_record(record)
                except ConsultAssistantError as e:
                    logger.warning(
                        "Skipping consultation %s: %s (%s)", record.id, e.message, e.code
                    )
                    report.failed.append(
                        IndexFailure(record_id=record.id, reason=e.message)
                    )
                    return
                except Exception as e:
                    logger.exception("Unexpected failure indexing consultation %s", record.id)
                    report.failed.append(
                        IndexFailure(record_id=record.id, reason=f"Unexpected error: {e}")
                    )
                    return
                report.indexed.append(record.id)

        await asyncio.gather(
            *(_run(i, record) for i, record in enumerate(records, start=1))
        )
        logger.info(
            "Indexed %d/%d consultations (%d failed)",
            len(report.indexed),
            len(records),
            len(report.failed),
        )
        return report
