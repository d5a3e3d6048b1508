from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Query, status
from pydantic import BaseModel

from proposer_indexer.app.config import settings
from proposer_indexer.app.domain.errors import StoreError
from proposer_indexer.app.domain.ports.out import ProposerHeightsReader


logger = logging.getLogger(__name__)


class ProposerHeightsResponse(BaseModel):
    heights: list[int]


def create_statistics_app(*, reader: ProposerHeightsReader) -> FastAPI:
    """
    Build the read-only statistics API on top of a ProposerHeightsReader.

    GET /stat?validator=<proposer address> -> {"heights": [...]}
    """
    app = FastAPI(title=f"{settings.project_name} statistics")

    @app.get("/stat", response_model=ProposerHeightsResponse)
    async def proposer_heights(
        validator: str = Query(..., description="Proposer address"),
    ) -> ProposerHeightsResponse:
        try:
            heights = await reader.heights_for_proposer(validator)
        except StoreError as exc:
            logger.error("Statistics query failed: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Store unavailable",
            ) from exc

        return ProposerHeightsResponse(heights=heights)

    return app
