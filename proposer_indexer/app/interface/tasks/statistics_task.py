from __future__ import annotations

import uvicorn

from proposer_indexer.app.config import settings
from proposer_indexer.app.infrastructure.factories.proposer_heights_store_factory import (
    proposer_heights_store_factory,
)
from proposer_indexer.app.interface.api.statistics import create_statistics_app
from proposer_indexer.app.interface.tasks.connect import connect_store


async def serve_statistics_task(*, backend: str = "sqlalchemy") -> None:
    """
    Task: serve GET /stat?validator=... on STATS_HOST:STATS_PORT until stopped.
    """
    engine = await connect_store()
    try:
        reader = proposer_heights_store_factory(
            backend=backend,
            engine=engine,
            lowest_height=settings.lowest_height,
        )
        app = create_statistics_app(reader=reader)
        server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=settings.stats_host,
                port=settings.stats_port,
                log_config=None,
            )
        )
        await server.serve()
    finally:
        await engine.dispose()
