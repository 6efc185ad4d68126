"""Per-user cache of indexed consultation passages."""

from __future__ import annotations

import logging
from urllib.parse import quote

from pydantic import ValidationError as PydanticValidationError

from consult_assistant.models.rag import IndexedPassage, IndexStats
from consult_assistant.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class VectorStore:
    """Maps ``record_id`` -> ``IndexedPassage`` for one user.

    Each passage is its own key (``"{namespace}:passage:{record_id}"``), so
    upserts of different records never touch each other's entries and
    re-indexing a record overwrites rather than appends. The namespace is
    percent-encoded so it never contains ``:`` and one user's prefix can't
    be a prefix of another user's keys.
    """

    def __init__(self, kv: KeyValueStore, namespace: str) -> None:
        self._kv = kv
        self.namespace = namespace

    @property
    def _prefix(self) -> str:
        return f"{quote(self.namespace, safe='')}:passage:"

    def _key(self, record_id: str) -> str:
        return f"{self._prefix}{record_id}"

    async def upsert(self, passage: IndexedPassage) -> None:
        await self._kv.set(self._key(passage.record_id), passage.model_dump_json())
        logger.debug(
            "Upserted passage %s (namespace=%s)", passage.record_id, self.namespace
        )

    async def get_all(self) -> list[IndexedPassage]:
        """Snapshot of every passage; writes still in flight may be missing."""
        passages = []
        for key, raw in await self._kv.items(self._prefix):
            try:
                passages.append(IndexedPassage.model_validate_json(raw))
            except PydanticValidationError:
                logger.warning("Skipping undecodable cache entry %r", key)
        return passages

    async def clear(self) -> None:
        entries = await self._kv.items(self._prefix)
        for key, _ in entries:
            await self._kv.remove(key)
        logger.info(
            "Cleared %d passages (namespace=%s)", len(entries), self.namespace
        )

    async def stats(self) -> IndexStats:
        passages = await self.get_all()
        if not passages:
            return IndexStats(count=0)
        return IndexStats(
            count=len(passages),
            last_indexed_at=max(p.indexed_at for p in passages),
        )
