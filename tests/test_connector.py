import pytest

from proposer_indexer.app.domain.errors import StoreUnavailableError
from proposer_indexer.app.infrastructure.db.connector import connect_with_retry
from proposer_indexer.app.infrastructure.db.engine import create_app_async_engine


class _EngineFactory:
    """Hands out unreachable engines for the first `failures` attempts."""

    def __init__(self, tmp_path, *, failures: int) -> None:
        self._unreachable = f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'store.db'}"
        self._reachable = f"sqlite+aiosqlite:///{tmp_path / 'store.db'}"
        self._failures = failures
        self.calls = 0

    def __call__(self):
        self.calls += 1
        url = self._unreachable if self.calls <= self._failures else self._reachable
        return create_app_async_engine(database_url=url)


@pytest.mark.asyncio
async def test_connects_on_first_attempt(tmp_path):
    factory = _EngineFactory(tmp_path, failures=0)

    engine = await connect_with_retry(attempts=3, delay_seconds=0, engine_factory=factory)
    await engine.dispose()

    assert factory.calls == 1


@pytest.mark.asyncio
async def test_connects_once_store_becomes_reachable(tmp_path):
    factory = _EngineFactory(tmp_path, failures=4)

    engine = await connect_with_retry(attempts=5, delay_seconds=0, engine_factory=factory)
    await engine.dispose()

    assert factory.calls == 5


@pytest.mark.asyncio
async def test_gives_up_after_attempt_ceiling(tmp_path):
    factory = _EngineFactory(tmp_path, failures=5)

    with pytest.raises(StoreUnavailableError) as exc_info:
        await connect_with_retry(attempts=5, delay_seconds=0, engine_factory=factory)

    assert exc_info.value.attempts == 5
    assert exc_info.value.__cause__ is not None
    assert factory.calls == 5


@pytest.mark.asyncio
async def test_attempts_must_be_positive(tmp_path):
    with pytest.raises(ValueError):
        await connect_with_retry(
            attempts=0,
            delay_seconds=0,
            engine_factory=_EngineFactory(tmp_path, failures=0),
        )
