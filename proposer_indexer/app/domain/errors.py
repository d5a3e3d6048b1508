"""
Exception hierarchy for the proposer indexer.

Every error raised by the block source, the store adapter, the batch indexer
and the startup connector derives from ProposerIndexerError, so the periodic
driver can tell an expected cycle failure from a programming error.
"""
from __future__ import annotations

from collections.abc import Mapping


class ProposerIndexerError(Exception):
    """Base class for all proposer indexer errors."""


# -----------------------------------------------------------------------------
# Block source
# -----------------------------------------------------------------------------
class BlockSourceError(ProposerIndexerError):
    """Upstream RPC could not deliver a usable response."""


class RequestBuildError(BlockSourceError):
    """The HTTP request could not be constructed (e.g. invalid URL)."""


class TransportError(BlockSourceError):
    """The network call failed or the upstream answered with an error status."""


class DecodeError(BlockSourceError):
    """The response body does not have the expected shape."""


class BatchFetchError(ProposerIndexerError):
    """
    One or more fetches of a batch failed.

    The whole batch is discarded; `failures` maps every failed height to the
    error it raised.
    """

    def __init__(self, *, start: int, end: int, failures: Mapping[int, Exception]) -> None:
        self.start = start
        self.end = end
        self.failures = dict(failures)
        heights = ", ".join(str(h) for h in sorted(self.failures))
        super().__init__(
            f"Could not fetch batch [{start}, {end}): "
            f"{len(self.failures)} failed height(s): {heights}"
        )


# -----------------------------------------------------------------------------
# Store
# -----------------------------------------------------------------------------
class StoreError(ProposerIndexerError):
    """Relational store failure."""


class StoreQueryError(StoreError):
    """A read query against the store failed."""


class StoreWriteError(StoreError):
    """The batch insert statement failed."""


class InsertedIncorrectNumberOfRowsError(StoreError):
    """The batch insert wrote a different number of rows than requested."""

    def __init__(self, *, expected: int, inserted: int) -> None:
        self.expected = expected
        self.inserted = inserted
        super().__init__(
            f"Inserted incorrect number of rows: expected={expected}, inserted={inserted}"
        )


class StoreUnavailableError(ProposerIndexerError):
    """The store could not be reached within the startup attempt ceiling."""

    def __init__(self, *, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"Store unavailable after {attempts} attempt(s)")
