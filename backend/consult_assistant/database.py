"""SQLAlchemy async database setup for the local passage cache."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from consult_assistant.config import settings
from consult_assistant.models.orm import Base

engine = create_async_engine(settings.database_url, echo=settings.debug)
async_session = async_sessionmaker(engine, expire_on_commit=False)


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create the cache tables if they don't exist."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
