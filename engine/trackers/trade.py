"""
Trade Tracker

거래창 양쪽의 제시 골드를 기억했다가 거래 완료 시 순변화량과 대조.
관측 변화량이 순변화량과 같으면 trade-gold-in / trade-gold-out 모두 기록,
다르면 관측 부호에 맞는 1건만 기록.

거래 완료 신호는 창이 닫힌 뒤에 도착할 수 있으므로 닫힌 상태에서도 처리
(제시 금액은 다음 거래창이 열릴 때 초기화).
"""

import logging

from core.constants import Defaults
from core.domain.events import HostEvent, HostEventTypes
from core.ledger.types import TransactionKind
from core.types import Venue
from engine.classification import Allocation, ClassificationResult
from engine.trackers.base import (
    BalanceObservation,
    PendingAction,
    TrackerContext,
    VenueTracker,
)

logger = logging.getLogger(__name__)


class TradeTracker(VenueTracker):
    """거래창 Tracker"""

    name = "trade"
    venues = frozenset({Venue.TRADE})
    action_types = frozenset({
        HostEventTypes.TRADE_MONEY_CHANGED,
        HostEventTypes.TRADE_COMPLETED,
    })

    def __init__(self, ctx: TrackerContext):
        super().__init__(ctx)
        self.given = 0
        self.received = 0
        self.target: str | None = None

    async def on_open(self, event: HostEvent) -> None:
        self.given = 0
        self.received = 0
        self.target = event.payload.get("target") or self.source

    async def handle_action(self, event: HostEvent) -> None:
        if event.event_type == HostEventTypes.TRADE_COMPLETED and not self.is_open:
            await self._on_completed(event)
            return
        await super().handle_action(event)

    async def on_action(self, event: HostEvent) -> None:
        if event.event_type == HostEventTypes.TRADE_MONEY_CHANGED:
            self.given = max(event.get_int("player_money"), 0)
            self.received = max(event.get_int("target_money"), 0)
            if event.payload.get("target"):
                self.target = event.payload["target"]
        elif event.event_type == HostEventTypes.TRADE_COMPLETED:
            await self._on_completed(event)

    async def _on_completed(self, event: HostEvent) -> None:
        given, received = self.given, self.received
        target = event.payload.get("target") or self.target or Defaults.UNKNOWN_SOURCE
        self.given = 0
        self.received = 0

        if not given and not received:
            logger.debug("골드 없는 거래 완료")
            return

        net = received - given
        if net == 0:
            # 잔고 변화 없음: 양쪽 기록만 남김
            await self.emit(TransactionKind.TRADE_GOLD_IN, received, source=target)
            await self.emit(TransactionKind.TRADE_GOLD_OUT, -given, source=target)
            return

        def split(amount: int) -> tuple[Allocation, ...]:
            if amount == net:
                allocations = []
                if received:
                    allocations.append(Allocation(TransactionKind.TRADE_GOLD_IN, received, source=target))
                if given:
                    allocations.append(Allocation(TransactionKind.TRADE_GOLD_OUT, -given, source=target))
                return tuple(allocations)
            kind = TransactionKind.TRADE_GOLD_IN if amount > 0 else TransactionKind.TRADE_GOLD_OUT
            return (Allocation(kind, amount, source=target),)

        kind = TransactionKind.TRADE_GOLD_IN if net > 0 else TransactionKind.TRADE_GOLD_OUT
        await self.expect(kind, net, split=split, source=target)

    def classify(
        self,
        delta: int,
        observation: BalanceObservation,
        pending: PendingAction | None,
    ) -> ClassificationResult:
        return self.confirm_pending(delta, pending)
