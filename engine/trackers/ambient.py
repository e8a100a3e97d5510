"""
상시 추적 Tracker

장소 창 없이 항상 듣는 Tracker (퀘스트 보상, 전리품).
엔진 시작 시 기준 잔고를 잡고, Arbiter 보류 조건에는 포함되지 않음.
"""

import logging

from core.constants import Defaults
from core.domain.events import HostEvent, HostEventTypes
from core.ledger.types import TransactionKind
from core.types import Venue
from core.utils.money import parse_money
from engine.classification import ClassificationResult
from engine.trackers.base import BalanceObservation, PendingAction, VenueTracker

logger = logging.getLogger(__name__)

# 이 장소가 열려 있으면 전리품 아이템 신호 무시 (해당 Tracker가 기록)
LOOT_EXCLUDED_VENUES: tuple[Venue, ...] = (
    Venue.VENDOR,
    Venue.AUCTION_HOUSE,
    Venue.MAILBOX,
    Venue.TRADE,
)


class AmbientTracker(VenueTracker):
    windowed = False

    def classify(
        self,
        delta: int,
        observation: BalanceObservation,
        pending: PendingAction | None,
    ) -> ClassificationResult:
        return self.confirm_pending(delta, pending)


class QuestTracker(AmbientTracker):
    """퀘스트 골드 보상"""

    name = "quest"
    action_types = frozenset({HostEventTypes.QUEST_TURNED_IN})

    async def on_action(self, event: HostEvent) -> None:
        money = event.get_int("money")
        if money <= 0:
            return

        title = event.payload.get("title") or f"Quest #{event.payload.get('quest_id')}"
        await self.expect(TransactionKind.QUEST_GOLD, money, source=title)


class LootTracker(AmbientTracker):
    """전리품 아이템 / 골드"""

    name = "loot"
    action_types = frozenset({
        HostEventTypes.LOOT_RECEIVED,
        HostEventTypes.LOOT_MONEY,
    })

    async def on_action(self, event: HostEvent) -> None:
        if event.event_type == HostEventTypes.LOOT_RECEIVED:
            await self._on_item(event)
        elif event.event_type == HostEventTypes.LOOT_MONEY:
            await self._on_money(event)

    async def _on_item(self, event: HostEvent) -> None:
        for venue in LOOT_EXCLUDED_VENUES:
            if self.ctx.is_open(venue):
                logger.debug(f"전리품 신호 무시 ({venue.value} 열림)")
                return

        item_id = event.payload.get("item_id")
        if item_id is None:
            return

        await self.emit(
            TransactionKind.LOOT,
            0,
            item_id=item_id,
            item_link=event.payload.get("link"),
            quantity=event.payload.get("quantity") or 1,
            source=event.payload.get("source"),
        )

    async def _on_money(self, event: HostEvent) -> None:
        amount = event.get_int("amount")
        if amount <= 0:
            message = event.payload.get("message") or ""
            lowered = message.lower()
            # 경매 대금 알림 등 전리품이 아닌 메시지 제외
            if "auction" in lowered or "loot" not in lowered:
                return
            amount = parse_money(message)

        if amount <= 0:
            return

        await self.expect(
            TransactionKind.LOOT_GOLD,
            amount,
            source=event.payload.get("source") or Defaults.LOOT_GOLD_SOURCE,
        )
