from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class HeightBatch:
    """Half-open range of heights [start, end) fetched and written together."""

    start: int
    end: int

    def validate(self) -> None:
        if self.start < 0 or self.end < 0:
            raise ValueError("Heights must be non-negative")
        if self.start >= self.end:
            raise ValueError("start must be < end")

    @property
    def heights(self) -> range:
        return range(self.start, self.end)

    def __len__(self) -> int:
        return self.end - self.start


def iter_height_batches(*, start: int, latest: int, batch_size: int) -> Iterator[HeightBatch]:
    """
    Split [start, latest) into consecutive batches of at most batch_size heights.

    The reported latest height itself is not included, and no batch
    extends past it. Nothing is yielded when start >= latest.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")

    current = start
    while current < latest:
        batch_end = min(current + batch_size, latest)
        yield HeightBatch(start=current, end=batch_end)
        current = batch_end
