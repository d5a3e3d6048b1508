from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine

from proposer_indexer.app.domain.errors import StoreUnavailableError
from proposer_indexer.app.infrastructure.db.engine import create_app_async_engine


logger = logging.getLogger(__name__)

_PING_SQL = text("SELECT 1")


async def connect_with_retry(
    *,
    attempts: int,
    delay_seconds: float,
    engine_factory: Callable[[], AsyncEngine] = create_app_async_engine,
) -> AsyncEngine:
    """
    Return an engine whose store answered a ping.

    When the store is started alongside the indexer (docker compose) it is
    usually not accepting connections yet. Each attempt builds a fresh engine
    and runs SELECT 1; failed engines are disposed before the next attempt.
    After `attempts` failures StoreUnavailableError is raised.
    """
    if attempts <= 0:
        raise ValueError("attempts must be positive")
    if delay_seconds < 0:
        raise ValueError("delay_seconds must be non-negative")

    last_error: Exception | None = None

    for attempt in range(1, attempts + 1):
        engine = engine_factory()
        try:
            async with engine.connect() as conn:
                await conn.execute(_PING_SQL)
        except (DBAPIError, OSError, asyncio.TimeoutError) as exc:
            last_error = exc
            await engine.dispose()
            logger.warning(
                "Store not reachable (attempt %s/%s): %s",
                attempt,
                attempts,
                exc,
            )
            if attempt < attempts:
                await asyncio.sleep(delay_seconds)
            continue

        logger.info("Connected to store (attempt %s/%s)", attempt, attempts)
        return engine

    raise StoreUnavailableError(attempts=attempts) from last_error
