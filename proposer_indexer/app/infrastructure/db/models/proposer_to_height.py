from __future__ import annotations

from sqlalchemy import BigInteger, Index, PrimaryKeyConstraint, Text
from sqlalchemy.orm import Mapped, mapped_column

from proposer_indexer.app.infrastructure.db.db_base import BaseDB


class ProposerToHeightDB(BaseDB):
    """
    One row per indexed block: which proposer produced the block at a height.

    Heights are written only by the batch indexer, in contiguous batches,
    and are never updated or deleted. MAX(height) is the indexer checkpoint.
    """

    __tablename__ = "proposer_to_height"
    __table_args__ = (
        # One record per height
        PrimaryKeyConstraint("height"),
        # Statistics API: all heights of a given proposer
        Index("ix_proposer_to_height_proposer", "proposer"),
    )

    height: Mapped[int] = mapped_column(BigInteger, nullable=False, autoincrement=False)

    # Hex-encoded consensus address as reported by the block header
    proposer: Mapped[str] = mapped_column(Text, nullable=False)
