"""
engine/scheduler.py 테스트
"""

import asyncio

import pytest

from engine.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    SchedulerError,
    TimerGroup,
)


class Recorder:
    """콜백 호출 기록"""

    def __init__(self, scheduler: ManualScheduler | None = None):
        self.calls: list[tuple[str, float]] = []
        self.scheduler = scheduler

    def make(self, name: str):
        async def callback() -> None:
            now = self.scheduler.now() if self.scheduler else 0.0
            self.calls.append((name, now))

        return callback


class TestManualScheduler:
    """가상 시계 스케줄러 테스트"""

    @pytest.mark.asyncio
    async def test_fires_exactly_at_due(self) -> None:
        scheduler = ManualScheduler()
        rec = Recorder(scheduler)
        scheduler.call_later(0.5, rec.make("timeout"))

        assert await scheduler.advance(0.499) == 0
        assert rec.calls == []

        assert await scheduler.advance_to(0.5) == 1
        assert rec.calls == [("timeout", 0.5)]

    @pytest.mark.asyncio
    async def test_fires_in_due_order(self) -> None:
        scheduler = ManualScheduler()
        rec = Recorder(scheduler)
        scheduler.call_later(0.3, rec.make("b"))
        scheduler.call_later(0.1, rec.make("a"))
        scheduler.call_later(0.3, rec.make("c"))

        await scheduler.advance(1.0)

        assert [name for name, _ in rec.calls] == ["a", "b", "c"]
        assert scheduler.now() == 1.0

    @pytest.mark.asyncio
    async def test_cancelled_handle_not_fired(self) -> None:
        scheduler = ManualScheduler()
        rec = Recorder(scheduler)
        handle = scheduler.call_later(0.1, rec.make("x"))

        assert handle.cancel() is True
        assert handle.cancel() is False
        await scheduler.advance(1.0)

        assert rec.calls == []
        assert scheduler.pending_count == 0

    @pytest.mark.asyncio
    async def test_callback_scheduled_during_advance(self) -> None:
        """콜백 안에서 예약된 타이머도 목표 시각 이전이면 실행"""
        scheduler = ManualScheduler()
        rec = Recorder(scheduler)

        async def chain() -> None:
            scheduler.call_later(0.2, rec.make("second"))

        scheduler.call_later(0.1, chain)
        await scheduler.advance(0.5)

        assert rec.calls == [("second", pytest.approx(0.3))]

    @pytest.mark.asyncio
    async def test_negative_advance_rejected(self) -> None:
        scheduler = ManualScheduler()

        with pytest.raises(ValueError):
            await scheduler.advance(-0.1)

    @pytest.mark.asyncio
    async def test_closed_scheduler_rejects(self) -> None:
        scheduler = ManualScheduler()
        rec = Recorder(scheduler)
        scheduler.call_later(1.0, rec.make("x"))

        await scheduler.close()

        assert scheduler.pending_count == 0
        with pytest.raises(SchedulerError):
            scheduler.call_later(1.0, rec.make("y"))


class TestAsyncioScheduler:
    """이벤트 루프 스케줄러 테스트"""

    @pytest.mark.asyncio
    async def test_fires_after_delay(self) -> None:
        scheduler = AsyncioScheduler()
        fired = asyncio.Event()

        async def callback() -> None:
            fired.set()

        scheduler.call_later(0.01, callback)
        await asyncio.wait_for(fired.wait(), timeout=1.0)
        await scheduler.drain()

        assert fired.is_set()
        await scheduler.close()

    @pytest.mark.asyncio
    async def test_close_cancels_pending(self) -> None:
        scheduler = AsyncioScheduler()
        calls: list[str] = []

        async def callback() -> None:
            calls.append("x")

        handle = scheduler.call_later(0.05, callback)
        await scheduler.close()
        await asyncio.sleep(0.1)

        assert handle.cancelled
        assert calls == []
        with pytest.raises(SchedulerError):
            scheduler.call_later(0.01, callback)


class TestTimerGroup:
    """Tracker 타이머 묶음 테스트"""

    @pytest.mark.asyncio
    async def test_restart_debounces(self) -> None:
        scheduler = ManualScheduler()
        rec = Recorder(scheduler)
        group = TimerGroup(scheduler.call_later, owner="bank")

        group.start("diff", 0.1, rec.make("diff"))
        await scheduler.advance(0.05)
        group.start("diff", 0.1, rec.make("diff"))
        await scheduler.advance(0.08)

        assert rec.calls == []
        await scheduler.advance(0.05)
        assert rec.calls == [("diff", pytest.approx(0.15))]

    @pytest.mark.asyncio
    async def test_cancel_all(self) -> None:
        scheduler = ManualScheduler()
        rec = Recorder(scheduler)
        group = TimerGroup(scheduler.call_later, owner="vendor")
        group.start("a", 0.1, rec.make("a"))
        group.start("b", 0.2, rec.make("b"))

        assert group.active_count == 2
        assert group.cancel_all() == 2
        await scheduler.advance(1.0)

        assert rec.calls == []
        assert not group.is_active("a")
