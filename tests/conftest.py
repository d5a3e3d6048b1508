from __future__ import annotations

from pathlib import Path
from typing import AsyncIterator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from fakes import LOWEST_HEIGHT
from proposer_indexer.app.infrastructure.adapters.proposer_heights_store import (
    SqlAlchemyProposerHeightsStore,
)
from proposer_indexer.app.infrastructure.db.db_base import BaseDB
from proposer_indexer.app.infrastructure.db.engine import create_app_async_engine
from proposer_indexer.app.infrastructure.db.models.proposer_to_height import (  # noqa: F401
    ProposerToHeightDB,
)


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = create_app_async_engine(database_url=sqlite_url(tmp_path / "store.db"))
    async with engine.begin() as conn:
        await conn.run_sync(BaseDB.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def sqlite_store(sqlite_engine: AsyncEngine) -> SqlAlchemyProposerHeightsStore:
    return SqlAlchemyProposerHeightsStore(sqlite_engine, lowest_height=LOWEST_HEIGHT)
