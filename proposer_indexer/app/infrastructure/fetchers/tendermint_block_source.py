from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, Field, ValidationError

from proposer_indexer.app.domain.errors import (
    DecodeError,
    RequestBuildError,
    TransportError,
)
from proposer_indexer.app.domain.models import IndexedRecord
from proposer_indexer.app.domain.ports.out import BlockSource


logger = logging.getLogger(__name__)

_MAX_HEIGHT = 2**63 - 1  # BIGINT

_BLOCK_PATH = "/block"
_BLOCKCHAIN_PATH = "/blockchain"


# -----------------------------------------------------------------------------
# Wire format
# -----------------------------------------------------------------------------
# Heights are JSON strings ("9558628"); pydantic's lax int parsing accepts
# decimal strings and rejects anything non-numeric.
class _Header(BaseModel):
    height: int = Field(ge=0, le=_MAX_HEIGHT)
    proposer_address: str


class _Block(BaseModel):
    header: _Header


class _BlockResult(BaseModel):
    block: _Block


class _BlockResponse(BaseModel):
    result: _BlockResult


class _BlockchainResult(BaseModel):
    last_height: int = Field(ge=0, le=_MAX_HEIGHT)


class _BlockchainResponse(BaseModel):
    result: _BlockchainResult


_ResponseT = TypeVar("_ResponseT", bound=BaseModel)


class TendermintBlockSource(BlockSource):
    """
    Block source backed by a Tendermint / CometBFT RPC endpoint.

    Uses:
      - GET /block?height=H   -> result.block.header.{height, proposer_address}
      - GET /blockchain       -> result.last_height

    The RPC offers no bulk endpoint for headers (/blockchain only returns
    the 20 most recent), so blocks are fetched one request per height.
    One AsyncClient is shared by all requests; close it with aclose() or
    use the source as an async context manager.
    """

    def __init__(self, *, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_base_url(cls, base_url: str, *, timeout_seconds: float = 30.0) -> "TendermintBlockSource":
        return cls(
            client=httpx.AsyncClient(
                base_url=base_url,
                timeout=httpx.Timeout(timeout_seconds),
            )
        )

    async def __aenter__(self) -> "TendermintBlockSource":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_block_at(self, height: int) -> IndexedRecord:
        body = await self._get_json(_BLOCK_PATH, params={"height": height})
        response = self._decode(_BlockResponse, body, what=f"block at height {height}")
        header = response.result.block.header

        if header.height != height:
            raise DecodeError(
                f"Requested block at height {height}, got header for height {header.height}"
            )

        return IndexedRecord(height=header.height, proposer=header.proposer_address)

    async def fetch_latest_height(self) -> int:
        body = await self._get_json(_BLOCKCHAIN_PATH)
        response = self._decode(_BlockchainResponse, body, what="blockchain status")
        return response.result.last_height

    async def _get_json(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        try:
            request = self._client.build_request("GET", path, params=params)
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise RequestBuildError(f"Could not build request for {path!r}: {exc}") from exc

        logger.debug("GET %s", request.url)

        try:
            response = await self._client.send(request)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"Could not get response for {request.url}: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"Response from {request.url} is not valid JSON") from exc

    @staticmethod
    def _decode(model: type[_ResponseT], body: Any, *, what: str) -> _ResponseT:
        try:
            return model.model_validate(body)
        except ValidationError as exc:
            raise DecodeError(f"Could not parse response for {what}: {exc}") from exc
