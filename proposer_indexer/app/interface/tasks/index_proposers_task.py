from __future__ import annotations

import functools

from proposer_indexer.app.application.services.index_proposers_cycle import (
    index_proposers_cycle,
)
from proposer_indexer.app.application.services.periodic_driver import PeriodicDriver
from proposer_indexer.app.config import settings
from proposer_indexer.app.domain.models import CycleReport
from proposer_indexer.app.infrastructure.factories.block_source_factory import (
    block_source_factory,
)
from proposer_indexer.app.infrastructure.factories.proposer_heights_store_factory import (
    proposer_heights_store_factory,
)
from proposer_indexer.app.interface.tasks.connect import connect_store


async def index_proposers_forever_task(
    *,
    backend: str = "sqlalchemy",
    source_backend: str = "tendermint_rpc",
) -> None:
    """
    Task: keep proposer_to_height in sync with the chain.

    - waits for the store (bounded retry, fails with StoreUnavailableError),
    - runs one indexing cycle every INDEXER_INTERVAL_SECONDS, forever,
    - a failed cycle is logged and retried on the next tick.
    """
    engine = await connect_store()
    try:
        store = proposer_heights_store_factory(
            backend=backend,
            engine=engine,
            lowest_height=settings.lowest_height,
        )
        async with block_source_factory(backend=source_backend) as source:
            driver = PeriodicDriver(
                cycle=functools.partial(
                    index_proposers_cycle,
                    source=source,
                    store=store,
                    batch_size=settings.batch_size,
                ),
                interval_seconds=settings.indexer_interval_seconds,
            )
            await driver.run()
    finally:
        await engine.dispose()


async def index_proposers_once_task(
    *,
    backend: str = "sqlalchemy",
    source_backend: str = "tendermint_rpc",
) -> CycleReport:
    """
    Task: run a single indexing cycle and return its report.

    Unlike the periodic task, errors propagate to the caller.
    """
    engine = await connect_store()
    try:
        store = proposer_heights_store_factory(
            backend=backend,
            engine=engine,
            lowest_height=settings.lowest_height,
        )
        async with block_source_factory(backend=source_backend) as source:
            return await index_proposers_cycle(
                source=source,
                store=store,
                batch_size=settings.batch_size,
            )
    finally:
        await engine.dispose()
