"""
엔진 테스트 보조 도구

MockGameHost + MemoryLedgerSink + ManualScheduler로 LedgerEngine을 구성하고
호스트 신호를 짧게 보낼 수 있는 헬퍼 제공.
"""

import asyncio

from adapters.mock import MemoryLedgerSink, MockGameHost
from core.config.loader import ArbiterConfig, TrackingConfig
from core.domain.events import HostEvent, HostEventTypes
from core.types import InventoryScope, Venue
from core.utils.retry import RetryPolicy
from engine.engine import LedgerEngine
from engine.inventory.catalog import ItemCatalog
from engine.scheduler import ManualScheduler
from engine.trackers.base import VenueTracker

CHARACTER = "Alice-Realm"


async def no_wait(seconds: float) -> None:
    """재시도 대기 없이 루프에 양보"""
    await asyncio.sleep(0)


class EngineHarness:
    """가상 시계 엔진 테스트 하네스

    사용 예시:
    ```python
    harness = EngineHarness(balance=1000)
    harness.start()

    await harness.open(Venue.VENDOR)
    await harness.balance(1300)
    await harness.advance(0.5)

    assert harness.sink.kinds() == [TransactionKind.SALE]
    ```
    """

    def __init__(
        self,
        balance: int = 1000,
        arbiter_config: ArbiterConfig | None = None,
        tracking: TrackingConfig | None = None,
    ):
        self.host = MockGameHost(balance=balance)
        self.sink = MemoryLedgerSink()
        self.scheduler = ManualScheduler()
        self.catalog = ItemCatalog(
            self.host,
            policy=RetryPolicy(max_attempts=3),
            sleep=no_wait,
        )
        self.engine = LedgerEngine(
            self.host,
            self.sink,
            CHARACTER,
            scheduler=self.scheduler,
            arbiter_config=arbiter_config,
            tracking=tracking,
            catalog=self.catalog,
        )

    @property
    def arbiter(self):
        return self.engine.arbiter

    def tracker(self, name: str) -> VenueTracker:
        tracker = next((t for t in self.engine.trackers if t.name == name), None)
        assert tracker is not None, name
        return tracker

    def start(self) -> None:
        self.engine.start()

    async def send(self, event_type: str, venue: Venue | None = None, **payload) -> None:
        await self.engine.dispatch(HostEvent.create(event_type, venue, **payload))

    async def open(self, venue: Venue, **payload) -> None:
        await self.send(HostEventTypes.VENUE_OPENED, venue, **payload)

    async def close(self, venue: Venue) -> None:
        await self.send(HostEventTypes.VENUE_CLOSED, venue)

    async def balance(self, value: int) -> None:
        """잔고 변경 후 BALANCE_CHANGED 전달"""
        self.host.balance = value
        await self.send(HostEventTypes.BALANCE_CHANGED)

    async def bags(self, items: dict[int, int]) -> None:
        """가방 교체 후 INVENTORY_CHANGED 전달"""
        self.host.set_bags(items)
        await self.send(HostEventTypes.INVENTORY_CHANGED, scope=InventoryScope.BAGS.value)

    async def advance(self, seconds: float) -> int:
        return await self.scheduler.advance(seconds)

    async def settle(self) -> None:
        """메타데이터 재시도 Task 완료 대기"""
        await self.catalog.wait_pending()

    async def stop(self) -> None:
        await self.engine.stop()
