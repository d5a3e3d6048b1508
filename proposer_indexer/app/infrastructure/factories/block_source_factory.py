from __future__ import annotations

from typing import Callable, Dict

from proposer_indexer.app.config import settings
from proposer_indexer.app.infrastructure.fetchers.tendermint_block_source import (
    TendermintBlockSource,
)


BlockSourceFactory = Callable[[str], TendermintBlockSource]


def _make_tendermint_source(base_url: str) -> TendermintBlockSource:
    return TendermintBlockSource.from_base_url(
        base_url,
        timeout_seconds=settings.rpc_timeout_seconds,
    )


_BLOCK_SOURCE_REGISTRY: Dict[str, BlockSourceFactory] = {
    "tendermint_rpc": _make_tendermint_source,
}


def block_source_factory(
    *,
    backend: str,
    base_url: str | None = None,
) -> TendermintBlockSource:
    """
    Create a block source for the given backend.

    The caller owns the returned source and must close it
    (it is an async context manager).
    """
    try:
        factory = _BLOCK_SOURCE_REGISTRY[backend]
    except KeyError:
        raise ValueError(f"Unsupported block source backend: {backend!r}")
    return factory(base_url or settings.rpc_base_url_str)
