"""
Ledger Engine

호스트, 스케줄러, Ledger 저장 대상을 받아 Reconciliation Engine 구성요소를 연결.

구성:
- TransactionEmitter: 분류 결과 → Transaction → sink
- EventDispatcher: 이벤트 직렬화 및 분배
- Arbiter: 미분류 변화 최종 처리
- Tracker: 설정에서 활성화된 장소별 분류기
"""

import asyncio
import logging
from typing import Any

from adapters.interfaces import IGameHost, ITransactionSink
from core.config.loader import ArbiterConfig, TrackingConfig
from core.domain.events import HostEvent
from engine.arbiter import Arbiter
from engine.dispatcher import EventDispatcher
from engine.emitter import TransactionEmitter
from engine.inventory.catalog import ItemCatalog
from engine.maintenance import LedgerPurgePoller
from engine.scheduler import AsyncioScheduler, Scheduler
from engine.trackers import TrackerContext, VenueTracker, build_trackers

logger = logging.getLogger(__name__)


class LedgerEngine:
    """Transaction Reconciliation Engine

    Args:
        host: 게임 호스트
        sink: Transaction 저장 대상 (LedgerStore 등)
        character_key: 기록 대상 캐릭터 키
        scheduler: 지연 콜백 스케줄러 (None이면 asyncio 루프 타이머)
        arbiter_config: Arbiter 설정
        tracking: 장소별 추적 설정
        catalog: 아이템 메타데이터 캐시 (None이면 host로 생성)

    사용 예시:
    ```python
    engine = LedgerEngine(host, ledger_store, "Alice-Realm")
    engine.start()

    await engine.dispatch(HostEvent.create(HostEventTypes.VENUE_OPENED, Venue.VENDOR))
    await engine.dispatch(HostEvent.create(HostEventTypes.BALANCE_CHANGED))

    await engine.stop()
    ```
    """

    def __init__(
        self,
        host: IGameHost,
        sink: ITransactionSink,
        character_key: str,
        scheduler: Scheduler | None = None,
        arbiter_config: ArbiterConfig | None = None,
        tracking: TrackingConfig | None = None,
        catalog: ItemCatalog | None = None,
    ):
        self.host = host
        self.scheduler = scheduler or AsyncioScheduler()
        self.tracking = tracking or TrackingConfig()

        self.emitter = TransactionEmitter(sink, character_key)
        self.catalog = catalog or ItemCatalog(host)
        self.dispatcher = EventDispatcher(host, self.scheduler)
        self.arbiter = Arbiter(
            host,
            self.emitter,
            self.dispatcher.defer,
            self.scheduler.now,
            arbiter_config,
            record_unclaimed=self.tracking.unclaimed,
        )
        self.dispatcher.bind_arbiter(self.arbiter)

        self.context = TrackerContext(
            host=host,
            arbiter=self.arbiter,
            emitter=self.emitter,
            catalog=self.catalog,
            defer=self.dispatcher.defer,
            clock=self.scheduler.now,
            is_open=self.dispatcher.is_open,
        )
        for tracker in build_trackers(self.context, self.tracking):
            self.dispatcher.register(tracker)

        self.purge_poller: LedgerPurgePoller | None = None
        self._running = False

    @property
    def character_key(self) -> str:
        return self.emitter.character_key

    @property
    def trackers(self) -> list[VenueTracker]:
        return self.dispatcher.trackers

    @property
    def is_running(self) -> bool:
        return self._running

    def attach_purge_poller(self, poller: LedgerPurgePoller) -> None:
        """보관 기간 정리 Poller 연결 (run_queue에서 주기 실행)"""
        self.purge_poller = poller

    # -------------------------------------------------------------------------
    # 생명주기
    # -------------------------------------------------------------------------

    def start(self, balance: int | None = None) -> None:
        """기준 잔고 설정 및 상시 추적 Tracker 시작"""
        baseline = self.arbiter.start(balance)
        for tracker in self.trackers:
            tracker.start()
        self._running = True

        logger.info(
            f"Ledger Engine 시작: {self.character_key}",
            extra={
                "baseline": baseline,
                "trackers": [t.name for t in self.trackers],
            },
        )

    async def stop(self) -> None:
        """열린 장소를 닫고 남은 변화를 정리한 뒤 종료"""
        if not self._running:
            return

        logger.info("Ledger Engine 종료 중...")
        await self.dispatcher.close_all()
        await self.arbiter.flush()
        await self.catalog.close()
        await self.scheduler.close()
        if self.purge_poller is not None:
            await self.purge_poller.stop()

        self._running = False
        logger.info("Ledger Engine 종료", extra=self.get_stats())

    # -------------------------------------------------------------------------
    # 이벤트
    # -------------------------------------------------------------------------

    async def dispatch(self, event: HostEvent) -> None:
        """이벤트 1건 처리"""
        await self.dispatcher.dispatch(event)

    async def run_queue(
        self,
        queue: "asyncio.Queue[HostEvent]",
        shutdown_event: asyncio.Event,
        poll_interval: float = 0.1,
    ) -> None:
        """메인 루프

        큐에서 이벤트를 꺼내 처리하고, 틈틈이 보관 기간 정리 실행.

        Args:
            queue: 호스트 이벤트 큐
            shutdown_event: 설정되면 루프 종료
            poll_interval: 큐 대기 시간 (초)
        """
        logger.info("메인 루프 시작")

        while not shutdown_event.is_set():
            try:
                event = await asyncio.wait_for(queue.get(), timeout=poll_interval)
            except asyncio.TimeoutError:
                event = None

            if event is not None:
                await self.dispatch(event)
                queue.task_done()

            if self.purge_poller is not None and await self.purge_poller.should_poll():
                await self.purge_poller.poll()

        logger.info("메인 루프 종료")

    def get_stats(self) -> dict[str, Any]:
        """엔진 통계"""
        return {
            "dispatcher": self.dispatcher.stats.to_dict(),
            "arbiter": self.arbiter.get_stats(),
            "emitted": self.emitter.emitted_count,
            "total_value": self.emitter.total_value,
        }
