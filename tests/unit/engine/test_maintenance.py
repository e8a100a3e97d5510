"""
LedgerPurgePoller 단위 테스트
"""

from unittest.mock import AsyncMock

import pytest

from engine.maintenance import LedgerPurgePoller


class FakeClock:
    """수동 단조 시계"""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_ledger_store() -> AsyncMock:
    """Mock Ledger 저장소"""
    store = AsyncMock()
    store.purge_older_than.return_value = 3
    return store


@pytest.fixture
def mock_config_store() -> AsyncMock:
    """Mock 설정 저장소"""
    store = AsyncMock()
    store.get.return_value = {
        "max_age_days": 30,
        "purge_interval_sec": 600,
        "initial_purge_delay_sec": 5,
    }
    store.get_max_age_days.return_value = 30
    return store


@pytest.fixture
def poller(
    mock_ledger_store: AsyncMock,
    mock_config_store: AsyncMock,
    clock: FakeClock,
) -> LedgerPurgePoller:
    return LedgerPurgePoller(mock_ledger_store, mock_config_store, clock=clock)


class TestShouldPoll:
    """should_poll() 테스트"""

    @pytest.mark.asyncio
    async def test_false_before_initialize(self, poller: LedgerPurgePoller) -> None:
        assert await poller.should_poll() is False

    @pytest.mark.asyncio
    async def test_initial_delay(self, poller: LedgerPurgePoller, clock: FakeClock) -> None:
        await poller.initialize()

        clock.now = 4.9
        assert await poller.should_poll() is False

        clock.now = 5.0
        assert await poller.should_poll() is True

    @pytest.mark.asyncio
    async def test_interval_after_poll(self, poller: LedgerPurgePoller, clock: FakeClock) -> None:
        await poller.initialize()
        clock.now = 5.0
        await poller.poll()

        clock.now = 604.0
        assert await poller.should_poll() is False

        clock.now = 605.0
        assert await poller.should_poll() is True

    @pytest.mark.asyncio
    async def test_stop(self, poller: LedgerPurgePoller, clock: FakeClock) -> None:
        await poller.initialize()
        await poller.stop()

        clock.now = 1_000.0
        assert await poller.should_poll() is False


class TestPoll:
    """poll() 테스트"""

    @pytest.mark.asyncio
    async def test_purges_with_configured_age(
        self,
        poller: LedgerPurgePoller,
        mock_ledger_store: AsyncMock,
        mock_config_store: AsyncMock,
    ) -> None:
        result = await poller.poll()

        assert result["purged"] == 3
        mock_ledger_store.purge_older_than.assert_awaited_once_with(30)
        mock_config_store.mark_purged.assert_awaited_once()
        assert poller.total_purged == 3

    @pytest.mark.asyncio
    async def test_error_reported(
        self,
        poller: LedgerPurgePoller,
        mock_ledger_store: AsyncMock,
    ) -> None:
        mock_ledger_store.purge_older_than.side_effect = RuntimeError("disk I/O error")

        result = await poller.poll()

        assert result["purged"] == 0
        assert "disk I/O error" in result["error"]
        assert poller.total_purged == 0
