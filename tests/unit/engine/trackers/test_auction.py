"""
AuctionTracker / BlackMarketTracker 테스트
"""

import pytest

from core.domain.events import HostEventTypes
from core.ledger.types import TransactionKind
from core.types import Venue
from tests.helpers import EngineHarness


class TestAuctionTracker:
    """경매장 액션 확인 테스트"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("event_type", "payload", "balance", "kind"),
        [
            (HostEventTypes.AUCTION_ITEM_POSTED, {"deposit": 200}, 800, TransactionKind.DEPOSIT_FEE),
            (HostEventTypes.AUCTION_BID_PLACED, {"amount": 400}, 600, TransactionKind.AUCTION_BOUGHT),
            (HostEventTypes.AUCTION_CANCELLED, {"cost": 50}, 950, TransactionKind.AUCTION_FEE),
            (HostEventTypes.AUCTION_EXPIRED, {"deposit": 200}, 1200, TransactionKind.DEPOSIT_REFUND),
        ],
    )
    async def test_action_confirmed(
        self,
        harness: EngineHarness,
        event_type: str,
        payload: dict,
        balance: int,
        kind: TransactionKind,
    ) -> None:
        await harness.open(Venue.AUCTION_HOUSE)
        await harness.send(event_type, item_id=2589, link="[Linen Cloth]", **payload)

        await harness.balance(balance)

        tx = harness.sink.transactions[0]
        assert tx.kind == kind
        assert tx.value == balance - 1000
        assert tx.item_link == "[Linen Cloth]"
        assert tx.source == "Auction House"

    @pytest.mark.asyncio
    async def test_commodity_total(self, harness: EngineHarness) -> None:
        await harness.open(Venue.AUCTION_HOUSE)
        await harness.send(
            HostEventTypes.AUCTION_COMMODITY_PURCHASED,
            item_id=2589,
            quantity=10,
            unit_price=30,
        )

        assert harness.tracker("auction").pending_action.expected == -300

        await harness.balance(700)

        tx = harness.sink.transactions[0]
        assert tx.kind == TransactionKind.AUCTION_BOUGHT
        assert tx.quantity == 10

    @pytest.mark.asyncio
    async def test_opposite_sign_not_confirmed(self, harness: EngineHarness) -> None:
        await harness.open(Venue.AUCTION_HOUSE)
        await harness.send(HostEventTypes.AUCTION_ITEM_POSTED, item_id=2589, deposit=200)

        await harness.balance(1200)
        await harness.close(Venue.AUCTION_HOUSE)
        await harness.advance(0.5)

        assert harness.sink.kinds() == [TransactionKind.UNCLAIMED_INCOME]


class TestBlackMarketTracker:
    """블랙마켓 입찰 테스트"""

    @pytest.mark.asyncio
    async def test_bid_confirmed(self, harness: EngineHarness) -> None:
        await harness.open(Venue.BLACK_MARKET)
        await harness.send(HostEventTypes.BLACK_MARKET_BID_PLACED, item_id=1, amount=500)

        await harness.advance(4.0)
        await harness.balance(500)

        tx = harness.sink.transactions[0]
        assert tx.kind == TransactionKind.BLACK_MARKET_BID
        assert tx.source == "Black Market"

    @pytest.mark.asyncio
    async def test_decrease_without_signal_is_bid(self, harness: EngineHarness) -> None:
        await harness.open(Venue.BLACK_MARKET)

        await harness.balance(900)

        assert harness.sink.kinds() == [TransactionKind.BLACK_MARKET_BID]

    @pytest.mark.asyncio
    async def test_outbid_refund_left_to_arbiter(self, harness: EngineHarness) -> None:
        await harness.open(Venue.BLACK_MARKET)

        await harness.balance(1500)
        await harness.close(Venue.BLACK_MARKET)
        await harness.advance(0.5)

        assert harness.sink.kinds() == [TransactionKind.UNCLAIMED_INCOME]
