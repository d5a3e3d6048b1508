from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from proposer_indexer.app.config import settings
from proposer_indexer.app.infrastructure.db.connector import connect_with_retry


async def connect_store() -> AsyncEngine:
    """Connect to the store using the startup retry settings."""
    return await connect_with_retry(
        attempts=settings.store_connect_attempts,
        delay_seconds=settings.store_connect_delay_seconds,
    )
