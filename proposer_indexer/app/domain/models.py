from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class IndexedRecord:
    """A single observed block: its height and the address of its proposer."""

    height: int
    proposer: str


@dataclass(frozen=True)
class HeightGap:
    """Inclusive range of heights missing from the store."""

    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class CycleReport:
    first_height: int
    latest_height: int
    batches: int = 0
    records: int = 0

    @property
    def caught_up(self) -> bool:
        return self.batches == 0
