from __future__ import annotations

import asyncio
import logging

from proposer_indexer.app.application.services.height_batches import (
    HeightBatch,
    iter_height_batches,
)
from proposer_indexer.app.domain.errors import BatchFetchError
from proposer_indexer.app.domain.models import CycleReport, IndexedRecord
from proposer_indexer.app.domain.ports.out import BlockSource, CheckpointStore


logger = logging.getLogger(__name__)


async def fetch_batch(*, source: BlockSource, batch: HeightBatch) -> list[IndexedRecord]:
    """
    Fetch every height of the batch concurrently (one request per height).

    All fetches are awaited even when some fail; any failure discards the
    whole batch with BatchFetchError. Records are returned in height order,
    regardless of the order in which responses arrived.
    """
    batch.validate()
    heights = list(batch.heights)

    results = await asyncio.gather(
        *(source.fetch_block_at(h) for h in heights),
        return_exceptions=True,
    )

    records: list[IndexedRecord] = []
    failures: dict[int, Exception] = {}
    for height, result in zip(heights, results):
        if isinstance(result, Exception):
            failures[height] = result
        elif isinstance(result, BaseException):
            # CancelledError and friends must not be folded into a batch error
            raise result
        else:
            records.append(result)

    if failures:
        first_failure = failures[min(failures)]
        raise BatchFetchError(
            start=batch.start,
            end=batch.end,
            failures=failures,
        ) from first_failure

    return records


async def index_proposers_cycle(
    *,
    source: BlockSource,
    store: CheckpointStore,
    batch_size: int,
) -> CycleReport:
    """
    Application-level use case: one indexing cycle.

    - next height = checkpoint read from the store + 1,
    - latest height = reported by the upstream RPC,
    - heights [next, latest) are fetched in batches of batch_size and each
      batch is written with a single all-or-nothing insert.

    The first error aborts the cycle; the next cycle resumes from whatever
    was committed, so at most one batch is ever redone.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")

    next_height = await store.last_indexed_height() + 1
    latest_height = await source.fetch_latest_height()

    logger.info(
        "Indexing cycle: next_height=%s, latest_height=%s, batch_size=%s",
        next_height,
        latest_height,
        batch_size,
    )

    if next_height > latest_height:
        logger.info("Nothing to index")
        return CycleReport(first_height=next_height, latest_height=latest_height)

    batches = 0
    indexed = 0
    for batch in iter_height_batches(
        start=next_height,
        latest=latest_height,
        batch_size=batch_size,
    ):
        records = await fetch_batch(source=source, batch=batch)
        await store.insert_batch(records)

        batches += 1
        indexed += len(records)

        logger.debug(
            "Batch indexed: heights=[%s, %s), records=%s",
            batch.start,
            batch.end,
            len(records),
        )

    logger.info(
        "Finished indexing cycle: heights=[%s, %s), batches=%s, records=%s",
        next_height,
        latest_height,
        batches,
        indexed,
    )

    return CycleReport(
        first_height=next_height,
        latest_height=latest_height,
        batches=batches,
        records=indexed,
    )
