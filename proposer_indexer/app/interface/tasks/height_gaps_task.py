from __future__ import annotations

import logging

from proposer_indexer.app.config import settings
from proposer_indexer.app.domain.models import HeightGap
from proposer_indexer.app.infrastructure.factories.proposer_heights_store_factory import (
    proposer_heights_store_factory,
)
from proposer_indexer.app.interface.tasks.connect import connect_store


logger = logging.getLogger(__name__)


async def height_gaps_task(*, backend: str = "sqlalchemy") -> list[HeightGap]:
    """
    Task: report heights missing from proposer_to_height below the checkpoint.

    The indexer only ever writes contiguous batches, so any gap points to
    manual edits or a concurrent writer.
    """
    engine = await connect_store()
    try:
        store = proposer_heights_store_factory(
            backend=backend,
            engine=engine,
            lowest_height=settings.lowest_height,
        )
        gaps = await store.find_gaps()
    finally:
        await engine.dispose()

    if not gaps:
        logger.info("No height gaps found (lowest_height=%s)", settings.lowest_height)
    for gap in gaps:
        logger.warning("Missing heights [%s, %s] (%s blocks)", gap.start, gap.end, gap.size)

    return gaps
