"""
Event Dispatcher

호스트 이벤트를 한 번에 하나씩 Tracker와 Arbiter에 전달.
지연 콜백도 같은 잠금을 거쳐 실행되므로 모든 상태 변경은 직렬화됨.

잔고 변화 처리 순서:
1. Arbiter.observe(): 새 사이클 시작 (장소가 열려 있으면 보류)
2. 듣고 있는 모든 Tracker.evaluate()
3. Confirmed > Inferred 우선순위로 하나만 채택 → accept() → claim()
"""

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Awaitable

from adapters.interfaces import IGameHost
from core.domain.events import HostEvent, HostEventTypes
from core.ledger.types import TransactionValidationError
from core.types import Venue
from engine.arbiter import Arbiter
from engine.classification import (
    ClassificationResult,
    Unattributed,
    closeness,
    rank,
)
from engine.inventory.snapshot import SnapshotInvariantError
from engine.scheduler import Scheduler, TimerCallback, TimerHandle
from engine.trackers.base import BalanceObservation, VenueTracker

logger = logging.getLogger(__name__)

# 호출자에게 전파할 예외 (프로그래밍 불변식 위반)
INVARIANT_ERRORS = (SnapshotInvariantError, TransactionValidationError)


@dataclass
class DispatcherStats:
    """Dispatcher 통계"""

    events: int = 0
    deferred_callbacks: int = 0
    errors: int = 0
    attributed: int = 0
    by_type: Counter = field(default_factory=Counter)

    def to_dict(self) -> dict[str, Any]:
        return {
            "events": self.events,
            "deferred_callbacks": self.deferred_callbacks,
            "errors": self.errors,
            "attributed": self.attributed,
            "by_type": dict(self.by_type),
        }


class EventDispatcher:
    """호스트 이벤트 분배기

    Args:
        host: 게임 호스트 (잔고 조회)
        scheduler: 지연 콜백 스케줄러
        arbiter: 미분류 변화 중재자 (bind_arbiter로 나중에 연결 가능)

    사용 예시:
    ```python
    dispatcher = EventDispatcher(host, scheduler)
    arbiter = Arbiter(host, emitter, dispatcher.defer, scheduler.now, config)
    dispatcher.bind_arbiter(arbiter)
    dispatcher.register(VendorTracker(ctx))

    await dispatcher.dispatch(HostEvent.create(HostEventTypes.VENUE_OPENED, Venue.VENDOR))
    ```
    """

    def __init__(
        self,
        host: IGameHost,
        scheduler: Scheduler,
        arbiter: Arbiter | None = None,
    ):
        self.host = host
        self.scheduler = scheduler
        self._arbiter = arbiter
        self._lock = asyncio.Lock()
        self._trackers: list[VenueTracker] = []
        self.stats = DispatcherStats()

    # -------------------------------------------------------------------------
    # 등록
    # -------------------------------------------------------------------------

    @property
    def arbiter(self) -> Arbiter:
        if self._arbiter is None:
            raise RuntimeError("Arbiter가 연결되지 않았습니다")
        return self._arbiter

    def bind_arbiter(self, arbiter: Arbiter) -> None:
        self._arbiter = arbiter

    def register(self, tracker: VenueTracker) -> None:
        """Tracker 등록 (등록 순서 = 동률 시 우선순위)"""
        self._trackers.append(tracker)
        logger.debug(f"Tracker 등록: {tracker.name}")

    @property
    def trackers(self) -> list[VenueTracker]:
        return list(self._trackers)

    def is_open(self, venue: Venue) -> bool:
        """해당 장소를 다루는 Tracker가 열려 있는지"""
        return any(t.is_open and venue in t.venues for t in self._trackers)

    def any_window_open(self) -> bool:
        """창이 있는 장소가 하나라도 열려 있는지 (Arbiter 보류 조건)"""
        return any(t.is_open and t.windowed for t in self._trackers)

    # -------------------------------------------------------------------------
    # 지연 콜백
    # -------------------------------------------------------------------------

    def defer(self, delay: float, callback: TimerCallback, label: str = "") -> TimerHandle:
        """지연 콜백 예약 (실행 시 이벤트와 같은 잠금으로 직렬화)"""

        async def run() -> None:
            await self._run_deferred(callback, label)

        return self.scheduler.call_later(delay, run, label)

    async def _run_deferred(self, callback: TimerCallback, label: str) -> None:
        async with self._lock:
            self.stats.deferred_callbacks += 1
            await self._guard(callback(), label)

    async def _guard(self, awaitable: Awaitable[Any], label: str) -> Any:
        """단일 처리 단위 실행: 불변식 위반은 전파, 그 외 예외는 기록 후 계속"""
        try:
            return await awaitable
        except INVARIANT_ERRORS:
            raise
        except Exception as e:
            self.stats.errors += 1
            logger.error(f"이벤트 처리 실패 ({label}): {e}", exc_info=True)
            return None

    # -------------------------------------------------------------------------
    # 분배
    # -------------------------------------------------------------------------

    async def dispatch(self, event: HostEvent) -> None:
        """이벤트 1건 처리"""
        async with self._lock:
            event = event.stamped(self.scheduler.now())
            self.stats.events += 1
            self.stats.by_type[event.event_type] += 1

            logger.debug(
                f"이벤트 수신: {event.event_type}",
                extra={"venue": event.venue.value if event.venue else None},
            )

            if event.event_type == HostEventTypes.VENUE_OPENED:
                await self._on_venue_opened(event)
            elif event.event_type == HostEventTypes.VENUE_CLOSED:
                await self._on_venue_closed(event)
            elif event.event_type == HostEventTypes.BALANCE_CHANGED:
                await self._on_balance_changed(event)
            elif event.event_type == HostEventTypes.INVENTORY_CHANGED:
                for tracker in self._trackers:
                    await self._guard(tracker.handle_inventory(event), tracker.name)
            else:
                for tracker in self._trackers:
                    if event.event_type in tracker.action_types:
                        await self._guard(tracker.handle_action(event), tracker.name)

    async def _on_venue_opened(self, event: HostEvent) -> None:
        matched = False
        for tracker in self._trackers:
            if tracker.handles_venue(event.venue):
                matched = True
                await self._guard(tracker.open(event), tracker.name)
        if not matched:
            logger.debug(f"추적하지 않는 장소 열림: {event.venue}")

    async def _on_venue_closed(self, event: HostEvent) -> None:
        was_open = self.any_window_open()

        for tracker in self._trackers:
            if tracker.handles_venue(event.venue):
                await self._guard(tracker.close(event), tracker.name)

        if was_open and not self.any_window_open():
            await self._guard(self.arbiter.release_deferred(), "arbiter")

    async def _on_balance_changed(self, event: HostEvent) -> None:
        balance = self.host.get_balance()
        deferred = self.any_window_open()

        cycle = await self._guard(self.arbiter.observe(balance, deferred), "arbiter")
        listening = [t for t in self._trackers if t.is_listening]

        if cycle is None:
            for tracker in listening:
                tracker.rebase(balance)
            return

        observation = BalanceObservation(balance=balance, now=event.received_at, event=event)
        candidates: list[tuple[VenueTracker, ClassificationResult]] = []
        for tracker in listening:
            result = await self._guard(self._evaluate(tracker, observation), tracker.name)
            if result is not None and not isinstance(result, Unattributed):
                candidates.append((tracker, result))

        if not candidates:
            return

        order = {id(t): i for i, t in enumerate(self._trackers)}
        candidates.sort(
            key=lambda c: (-rank(c[1]), closeness(c[1], cycle.amount), order[id(c[0])])
        )
        winner, result = candidates[0]

        if len(candidates) > 1:
            logger.debug(
                f"복수 분류 후보 중 {winner.name} 채택",
                extra={"candidates": [t.name for t, _ in candidates]},
            )

        await self._guard(winner.accept(result), winner.name)
        self.stats.attributed += 1

    @staticmethod
    async def _evaluate(tracker: VenueTracker, observation: BalanceObservation) -> ClassificationResult:
        return tracker.evaluate(observation)

    async def close_all(self) -> None:
        """열린 장소 모두 닫기 (종료 시)"""
        async with self._lock:
            for tracker in self._trackers:
                if tracker.is_open:
                    venue = next(iter(tracker.venues), None)
                    await self._guard(
                        tracker.close(HostEvent.create(HostEventTypes.VENUE_CLOSED, venue)),
                        tracker.name,
                    )
