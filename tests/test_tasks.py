"""
Wiring of the CLI tasks: store connection, factories, settings.
"""
import pytest
from sqlalchemy import text

from fakes import FakeBlockSource
from proposer_indexer.app.config import settings
from proposer_indexer.app.domain.errors import StoreUnavailableError
from proposer_indexer.app.infrastructure.adapters.proposer_heights_store import (
    SqlAlchemyProposerHeightsStore,
)
from proposer_indexer.app.infrastructure.factories.block_source_factory import (
    block_source_factory,
)
from proposer_indexer.app.infrastructure.factories.proposer_heights_store_factory import (
    proposer_heights_store_factory,
)
from proposer_indexer.app.infrastructure.fetchers.tendermint_block_source import (
    TendermintBlockSource,
)
from proposer_indexer.app.interface.tasks import TASKS
from proposer_indexer.app.interface.tasks import height_gaps_task as gaps_module
from proposer_indexer.app.interface.tasks import index_proposers_task


@pytest.fixture
def wired(monkeypatch, sqlite_engine):
    source = FakeBlockSource(latest=112)

    async def connect_store():
        return sqlite_engine

    monkeypatch.setattr(settings, "lowest_height", 100)
    monkeypatch.setattr(settings, "batch_size", 5)
    monkeypatch.setattr(index_proposers_task, "connect_store", connect_store)
    monkeypatch.setattr(gaps_module, "connect_store", connect_store)
    monkeypatch.setattr(
        index_proposers_task,
        "block_source_factory",
        lambda *, backend: source,
    )
    return source


@pytest.mark.asyncio
async def test_once_task_runs_one_cycle(wired, sqlite_engine):
    report = await index_proposers_task.index_proposers_once_task()

    assert (report.first_height, report.latest_height) == (100, 112)
    assert report.batches == 3
    assert wired.closed
    async with sqlite_engine.connect() as conn:
        count = (await conn.execute(text("SELECT COUNT(*) FROM proposer_to_height"))).scalar_one()
    assert count == 12


@pytest.mark.asyncio
async def test_gaps_task_reports_missing_heights(wired, sqlite_engine):
    async with sqlite_engine.begin() as conn:
        await conn.execute(
            text("INSERT INTO proposer_to_height (height, proposer) VALUES (100, 'A'), (104, 'B')")
        )

    gaps = await gaps_module.height_gaps_task()

    assert [(g.start, g.end) for g in gaps] == [(101, 103)]


@pytest.mark.asyncio
async def test_once_task_fails_when_store_never_comes_up(monkeypatch):
    async def connect_store():
        raise StoreUnavailableError(attempts=10)

    monkeypatch.setattr(index_proposers_task, "connect_store", connect_store)

    with pytest.raises(StoreUnavailableError):
        await index_proposers_task.index_proposers_once_task()


def test_task_registry_exposes_every_entry_point():
    assert set(TASKS) == {
        "indexer__index_proposers_forever_task",
        "indexer__index_proposers_once_task",
        "indexer__height_gaps_task",
        "statistics__serve_statistics_task",
    }


@pytest.mark.asyncio
async def test_factories_build_default_backends(sqlite_engine):
    store = proposer_heights_store_factory(backend="sqlalchemy", engine=sqlite_engine, lowest_height=7)
    source = block_source_factory(backend="tendermint_rpc", base_url="https://rpc.example.org")
    await source.aclose()

    assert isinstance(store, SqlAlchemyProposerHeightsStore)
    assert store.lowest_height == 7
    assert isinstance(source, TendermintBlockSource)


@pytest.mark.asyncio
async def test_factories_reject_unknown_backends(sqlite_engine):
    with pytest.raises(ValueError):
        proposer_heights_store_factory(backend="mongo", engine=sqlite_engine, lowest_height=0)
    with pytest.raises(ValueError):
        block_source_factory(backend="grpc")
