from __future__ import annotations

from typing import Callable, Dict

from sqlalchemy.ext.asyncio import AsyncEngine

from proposer_indexer.app.infrastructure.adapters.proposer_heights_store import (
    SqlAlchemyProposerHeightsStore,
)


ProposerHeightsStoreFactory = Callable[[AsyncEngine, int], SqlAlchemyProposerHeightsStore]

_PROPOSER_HEIGHTS_STORE_REGISTRY: Dict[str, ProposerHeightsStoreFactory] = {
    "sqlalchemy": lambda engine, lowest_height: SqlAlchemyProposerHeightsStore(
        engine,
        lowest_height=lowest_height,
    ),
}


def proposer_heights_store_factory(
    *,
    backend: str,
    engine: AsyncEngine,
    lowest_height: int,
) -> SqlAlchemyProposerHeightsStore:
    """
    Create the proposer_to_height store adapter for the given backend.

    The returned object serves as CheckpointStore for the indexer,
    ProposerHeightsReader for the statistics API and HeightGapsFinder
    for the gaps task.
    """
    try:
        factory = _PROPOSER_HEIGHTS_STORE_REGISTRY[backend]
    except KeyError:
        raise ValueError(f"Unsupported proposer heights store backend: {backend!r}")
    return factory(engine, lowest_height)
