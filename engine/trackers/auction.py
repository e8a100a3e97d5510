"""
Auction House / Black Market Tracker

경매장 액션 신호를 잔고 변화로 확인.

| 신호                          | 기록 유형        | 기대 부호 |
|-------------------------------|------------------|-----------|
| AUCTION_ITEM_POSTED           | deposit-fee      | -         |
| AUCTION_BID_PLACED            | auction-bought   | -         |
| AUCTION_COMMODITY_PURCHASED   | auction-bought   | -         |
| AUCTION_CANCELLED             | auction-fee      | -         |
| AUCTION_EXPIRED               | deposit-refund   | +         |

판매 대금은 우편으로 도착하므로 MailTracker가 처리.
"""

import logging

from core.constants import Timing
from core.domain.events import HostEvent, HostEventTypes
from core.ledger.types import TransactionKind
from core.types import Venue
from engine.classification import ClassificationResult, Unattributed, confirmed
from engine.trackers.base import BalanceObservation, PendingAction, VenueTracker

logger = logging.getLogger(__name__)


class AuctionTracker(VenueTracker):
    """경매장 Tracker"""

    name = "auction"
    venues = frozenset({Venue.AUCTION_HOUSE})
    action_types = frozenset({
        HostEventTypes.AUCTION_ITEM_POSTED,
        HostEventTypes.AUCTION_BID_PLACED,
        HostEventTypes.AUCTION_COMMODITY_PURCHASED,
        HostEventTypes.AUCTION_CANCELLED,
        HostEventTypes.AUCTION_EXPIRED,
    })

    def default_source(self) -> str | None:
        return "Auction House"

    async def on_action(self, event: HostEvent) -> None:
        item = {
            "item_id": event.payload.get("item_id"),
            "link": event.payload.get("link"),
            "quantity": event.payload.get("quantity") or 1,
        }
        event_type = event.event_type

        if event_type == HostEventTypes.AUCTION_ITEM_POSTED:
            deposit = event.get_int("deposit")
            if deposit > 0:
                await self.expect(TransactionKind.DEPOSIT_FEE, -deposit, **item)

        elif event_type == HostEventTypes.AUCTION_BID_PLACED:
            amount = event.get_int("amount")
            if amount > 0:
                await self.expect(TransactionKind.AUCTION_BOUGHT, -amount, **item)

        elif event_type == HostEventTypes.AUCTION_COMMODITY_PURCHASED:
            total = event.get_int("unit_price") * item["quantity"]
            if total > 0:
                await self.expect(TransactionKind.AUCTION_BOUGHT, -total, **item)

        elif event_type == HostEventTypes.AUCTION_CANCELLED:
            cost = event.get_int("cost")
            if cost > 0:
                await self.expect(TransactionKind.AUCTION_FEE, -cost, **item)

        elif event_type == HostEventTypes.AUCTION_EXPIRED:
            deposit = event.get_int("deposit")
            if deposit > 0:
                await self.expect(
                    TransactionKind.DEPOSIT_REFUND,
                    deposit,
                    ttl=Timing.AUCTION_SALE_TTL_SEC,
                    **item,
                )

    def classify(
        self,
        delta: int,
        observation: BalanceObservation,
        pending: PendingAction | None,
    ) -> ClassificationResult:
        return self.confirm_pending(delta, pending)


class BlackMarketTracker(VenueTracker):
    """블랙마켓 경매장 Tracker

    입찰 신호는 5초간 유효. 신호 없이도 열려 있는 동안의 잔고 감소는 입찰로 기록.
    """

    name = "black_market"
    venues = frozenset({Venue.BLACK_MARKET})
    action_types = frozenset({HostEventTypes.BLACK_MARKET_BID_PLACED})
    pending_ttl = Timing.BLACK_MARKET_TTL_SEC

    def default_source(self) -> str | None:
        return "Black Market"

    async def on_action(self, event: HostEvent) -> None:
        amount = event.get_int("amount")
        if amount <= 0:
            return
        await self.expect(
            TransactionKind.BLACK_MARKET_BID,
            -amount,
            item_id=event.payload.get("item_id"),
            link=event.payload.get("link"),
            quantity=1,
        )

    def classify(
        self,
        delta: int,
        observation: BalanceObservation,
        pending: PendingAction | None,
    ) -> ClassificationResult:
        result = self.confirm_pending(delta, pending)
        if not isinstance(result, Unattributed) or delta > 0:
            return result
        return confirmed(TransactionKind.BLACK_MARKET_BID, delta, source=self.source)
