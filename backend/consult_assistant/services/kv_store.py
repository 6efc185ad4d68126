"""Key-value backends for the local passage cache.

The vector store only needs ``get``/``set``/``remove`` plus a prefix scan,
so any embedded key-value database can sit behind it. ``SqlKeyValueStore``
is the durable backend; ``InMemoryKeyValueStore`` is a drop-in fake.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from consult_assistant.errors import StorageError
from consult_assistant.models.orm import KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def items(self, prefix: str = "") -> list[tuple[str, str]]: ...


class InMemoryKeyValueStore:
    """Process-local store. Not durable."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def items(self, prefix: str = "") -> list[tuple[str, str]]:
        return [(k, v) for k, v in self._data.items() if k.startswith(prefix)]


_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class SqlKeyValueStore:
    """Durable store with one ``kv_entries`` row per key.

    Every operation runs in its own session, so a write to one key never
    holds up reads or writes of another. ``set`` is a single atomic upsert;
    concurrent writes to the same key are last-write-wins.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        try:
            async with self._session_factory() as session:
                entry = await session.get(KeyValueEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read {key!r}: {e}")

    async def set(self, key: str, value: str) -> None:
        try:
            async with self._session_factory() as session:
                dialect = session.get_bind().dialect.name
                insert = _UPSERT_DIALECTS.get(dialect)
                if insert is None:
                    await session.merge(KeyValueEntry(key=key, value=value))
                else:
                    stmt = insert(KeyValueEntry).values(key=key, value=value)
                    stmt = stmt.on_conflict_do_update(
                        index_elements=[KeyValueEntry.key],
                        set_={"value": stmt.excluded.value, "updated_at": func.now()},
                    )
                    await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write {key!r}: {e}")

    async def remove(self, key: str) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(
                    delete(KeyValueEntry).where(KeyValueEntry.key == key)
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to remove {key!r}: {e}")

    async def items(self, prefix: str = "") -> list[tuple[str, str]]:
        stmt = select(KeyValueEntry.key, KeyValueEntry.value).order_by(
            KeyValueEntry.key
        )
        if prefix:
            stmt = stmt.where(KeyValueEntry.key.startswith(prefix, autoescape=True))
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = [(k, v) for k, v in result.all()]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to scan prefix {prefix!r}: {e}")
        logger.debug("Scanned %d entries with prefix %r", len(rows), prefix)
        return rows
