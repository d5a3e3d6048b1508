from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from proposer_indexer.app.domain.models import HeightGap, IndexedRecord


class BlockSource(Protocol):
    """
    Port for reading block headers from the upstream chain RPC.

    Implementations raise RequestBuildError / TransportError / DecodeError
    (see proposer_indexer.app.domain.errors) and never return partial data.
    """

    async def fetch_block_at(self, height: int) -> IndexedRecord:
        ...

    async def fetch_latest_height(self) -> int:
        ...


class CheckpointStore(Protocol):
    """
    Port for the persisted proposer_to_height table as seen by the indexer.

    The checkpoint is never cached: every call to last_indexed_height()
    reflects what is committed in the store.
    """

    async def last_indexed_height(self) -> int:
        """
        Highest committed height, or lowest_height - 1 when nothing is stored.
        """
        ...

    async def insert_batch(self, records: Sequence[IndexedRecord]) -> None:
        """
        Persist all records in a single statement, all or nothing.

        Raises InsertedIncorrectNumberOfRowsError when the store accepted
        fewer rows than requested (e.g. a height is already present).
        """
        ...


class ProposerHeightsReader(Protocol):
    """
    Read-side port used by the statistics API.
    """

    async def heights_for_proposer(self, proposer: str) -> list[int]:
        ...


class HeightGapsFinder(Protocol):
    """
    Port for detecting holes in the committed height sequence.
    """

    async def find_gaps(self) -> list[HeightGap]:
        ...
