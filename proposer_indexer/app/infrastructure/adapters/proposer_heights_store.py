from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Callable

from sqlalchemy import text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from proposer_indexer.app.domain.errors import (
    InsertedIncorrectNumberOfRowsError,
    StoreQueryError,
    StoreWriteError,
)
from proposer_indexer.app.domain.models import HeightGap, IndexedRecord
from proposer_indexer.app.infrastructure.db.models.proposer_to_height import (
    ProposerToHeightDB,
)


logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO NOTHING ... RETURNING
_INSERT_BY_DIALECT: dict[str, Callable[..., Any]] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


_SELECT_MAX_HEIGHT_SQL = text(
    """
    SELECT MAX(height) AS max_height
    FROM proposer_to_height
    """
)

_SELECT_HEIGHTS_FOR_PROPOSER_SQL = text(
    """
    SELECT height
    FROM proposer_to_height
    WHERE proposer = :proposer
    ORDER BY height
    """
)

_SELECT_MIN_HEIGHT_SQL = text(
    """
    SELECT MIN(height) AS min_height
    FROM proposer_to_height
    WHERE height >= :lowest_height
    """
)

_SELECT_INTERIOR_GAPS_SQL = text(
    """
    SELECT
        g.prev_height + 1 AS gap_start,
        g.height - 1      AS gap_end
    FROM (
        SELECT
            height,
            LAG(height) OVER (ORDER BY height) AS prev_height
        FROM proposer_to_height
        WHERE height >= :lowest_height
    ) AS g
    WHERE g.prev_height IS NOT NULL
      AND g.height - g.prev_height > 1
    ORDER BY g.height
    """
)


class SqlAlchemyProposerHeightsStore:
    """
    PostgreSQL/SQLAlchemy implementation of CheckpointStore,
    ProposerHeightsReader and HeightGapsFinder.

    Strategy:
    - checkpoint = MAX(height), recomputed on every call, never cached;
    - a batch is written as one multi-row INSERT ... ON CONFLICT (height)
      DO NOTHING RETURNING height inside a transaction; if fewer rows come
      back than were sent, the transaction is rolled back and
      InsertedIncorrectNumberOfRowsError is raised, so a batch is either
      fully committed or not at all.
    """

    def __init__(self, engine: AsyncEngine, *, lowest_height: int) -> None:
        if lowest_height < 0:
            raise ValueError("lowest_height must be non-negative")
        try:
            self._insert = _INSERT_BY_DIALECT[engine.dialect.name]
        except KeyError:
            raise ValueError(f"Unsupported store dialect: {engine.dialect.name!r}")
        self._engine = engine
        self._lowest_height = lowest_height

    @property
    def lowest_height(self) -> int:
        return self._lowest_height

    async def last_indexed_height(self) -> int:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(_SELECT_MAX_HEIGHT_SQL)
                max_height = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreQueryError(f"Could not find indexed height: {exc}") from exc

        if max_height is None:
            return self._lowest_height - 1
        return int(max_height)

    async def insert_batch(self, records: Sequence[IndexedRecord]) -> None:
        if not records:
            return

        stmt = (
            self._insert(ProposerToHeightDB)
            .values(
                [{"height": r.height, "proposer": r.proposer} for r in records]
            )
            .on_conflict_do_nothing(index_elements=[ProposerToHeightDB.height])
            .returning(ProposerToHeightDB.height)
        )

        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(stmt)
                inserted = len(result.scalars().all())

                logger.debug(
                    "Batch insert: heights=[%s, %s], requested=%s, inserted=%s",
                    records[0].height,
                    records[-1].height,
                    len(records),
                    inserted,
                )

                if inserted != len(records):
                    # Raising inside begin() rolls the whole batch back
                    raise InsertedIncorrectNumberOfRowsError(
                        expected=len(records),
                        inserted=inserted,
                    )
        except SQLAlchemyError as exc:
            raise StoreWriteError(f"Could not index batch: {exc}") from exc

    async def heights_for_proposer(self, proposer: str) -> list[int]:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(
                    _SELECT_HEIGHTS_FOR_PROPOSER_SQL,
                    {"proposer": proposer},
                )
                return [int(h) for h in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise StoreQueryError(f"Could not read heights for proposer: {exc}") from exc

    async def find_gaps(self) -> list[HeightGap]:
        params = {"lowest_height": self._lowest_height}
        try:
            async with self._engine.connect() as conn:
                min_height = (
                    await conn.execute(_SELECT_MIN_HEIGHT_SQL, params)
                ).scalar_one_or_none()
                if min_height is None:
                    return []

                rows = (
                    await conn.execute(_SELECT_INTERIOR_GAPS_SQL, params)
                ).mappings().all()
        except SQLAlchemyError as exc:
            raise StoreQueryError(f"Could not look for height gaps: {exc}") from exc

        gaps: list[HeightGap] = []
        if min_height > self._lowest_height:
            gaps.append(HeightGap(start=self._lowest_height, end=int(min_height) - 1))
        gaps.extend(
            HeightGap(start=int(r["gap_start"]), end=int(r["gap_end"])) for r in rows
        )
        return gaps
