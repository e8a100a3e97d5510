"""
LedgerEngine 시나리오 통합 테스트

MockGameHost + MemoryLedgerSink + ManualScheduler로 여러 장소를 거치는 흐름 검증.
"""

import asyncio

import pytest

from core.domain.events import HostEvent, HostEventTypes
from core.ledger.types import TransactionKind
from core.types import Venue
from tests.helpers import EngineHarness


class TestBasicScenarios:
    """기본 시나리오"""

    @pytest.mark.asyncio
    async def test_vendor_sale(self, harness: EngineHarness) -> None:
        """상점에서 아이템 1개 판매: 1000 -> 1300"""
        harness.host.set_bags({2589: 1})
        await harness.open(Venue.VENDOR)

        harness.host.set_bags({})
        await harness.balance(1300)
        await harness.close(Venue.VENDOR)
        await harness.advance(2.0)

        assert harness.sink.kinds() == [TransactionKind.SALE]
        assert harness.sink.values() == [300]

    @pytest.mark.asyncio
    async def test_unclaimed_expense_at_timeout(self, harness: EngineHarness) -> None:
        """아무 장소도 열려 있지 않은 감소는 0.5초 후 unclaimed 기록"""
        await harness.balance(700)

        await harness.advance(0.499)
        assert len(harness.sink) == 0

        await harness.scheduler.advance_to(0.5)

        tx = harness.sink.transactions[0]
        assert tx.kind == TransactionKind.UNCLAIMED_EXPENSE
        assert tx.value == -300
        assert tx.source == "Unknown"

    @pytest.mark.asyncio
    async def test_no_change_records_nothing(self, harness: EngineHarness) -> None:
        await harness.balance(1000)
        await harness.advance(5.0)

        assert len(harness.sink) == 0
        assert harness.arbiter.stats.cycles == 0

    @pytest.mark.asyncio
    async def test_late_signal_after_close(self, harness: EngineHarness) -> None:
        """우편함을 닫은 뒤 도착한 잔고 변화는 우편으로 분류하지 않음"""
        await harness.open(Venue.MAILBOX)
        await harness.close(Venue.MAILBOX)

        await harness.balance(1200)
        await harness.advance(0.5)

        assert harness.sink.kinds() == [TransactionKind.UNCLAIMED_INCOME]


class TestConservation:
    """기록 합계 == 잔고 변화량"""

    @pytest.mark.asyncio
    async def test_mixed_session(self, harness: EngineHarness) -> None:
        harness.host.set_bags({2589: 1})
        await harness.open(Venue.VENDOR)
        harness.host.set_bags({})
        await harness.balance(1300)
        await harness.close(Venue.VENDOR)

        await harness.open(Venue.BARBER)
        await harness.balance(1100)
        await harness.close(Venue.BARBER)

        await harness.balance(1150)
        await harness.advance(1.0)

        assert harness.sink.kinds() == [
            TransactionKind.SALE,
            TransactionKind.BARBER_COST,
            TransactionKind.UNCLAIMED_INCOME,
        ]
        assert harness.sink.total() == harness.host.balance - 1000

    @pytest.mark.asyncio
    async def test_stop_flushes_outstanding(self, harness: EngineHarness) -> None:
        """종료 시 남은 변화는 unclaimed로 정리"""
        await harness.balance(900)

        await harness.stop()

        assert harness.sink.kinds() == [TransactionKind.UNCLAIMED_EXPENSE]
        assert harness.sink.total() == -100
        assert harness.engine.is_running is False


class TestRunQueue:
    """run_queue() 메인 루프 테스트"""

    @pytest.mark.asyncio
    async def test_processes_until_shutdown(self, harness: EngineHarness) -> None:
        queue: asyncio.Queue[HostEvent] = asyncio.Queue()
        shutdown = asyncio.Event()

        await queue.put(HostEvent.create(HostEventTypes.VENUE_OPENED, Venue.BARBER))
        harness.host.balance = 800
        await queue.put(HostEvent.create(HostEventTypes.BALANCE_CHANGED))
        await queue.put(HostEvent.create(HostEventTypes.VENUE_CLOSED, Venue.BARBER))

        task = asyncio.create_task(
            harness.engine.run_queue(queue, shutdown, poll_interval=0.01)
        )
        await asyncio.wait_for(queue.join(), timeout=5)
        shutdown.set()
        await asyncio.wait_for(task, timeout=5)

        stats = harness.engine.get_stats()
        assert stats["dispatcher"]["events"] == 3
        assert stats["emitted"] == 1
        assert stats["total_value"] == -200
