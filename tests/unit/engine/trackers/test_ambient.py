"""
상시 추적 Tracker 테스트 (퀘스트, 전리품)
"""

import pytest

from core.domain.events import HostEventTypes
from core.ledger.types import TransactionKind
from core.types import Venue
from tests.helpers import EngineHarness


class TestQuestTracker:
    """퀘스트 골드 테스트"""

    @pytest.mark.asyncio
    async def test_signal_then_balance(self, harness: EngineHarness) -> None:
        await harness.send(HostEventTypes.QUEST_TURNED_IN, quest_id=176, title="Wanted: Hogger", money=250)

        await harness.balance(1250)
        await harness.advance(1.0)

        assert harness.sink.kinds() == [TransactionKind.QUEST_GOLD]
        assert harness.sink.transactions[0].source == "Wanted: Hogger"

    @pytest.mark.asyncio
    async def test_balance_then_signal(self, harness: EngineHarness) -> None:
        """잔고 변화가 먼저 오면 타임아웃 전 늦은 청구"""
        await harness.balance(1250)
        await harness.advance(0.3)
        await harness.send(HostEventTypes.QUEST_TURNED_IN, quest_id=176, money=250)
        await harness.advance(1.0)

        assert harness.sink.kinds() == [TransactionKind.QUEST_GOLD]
        assert harness.sink.transactions[0].source == "Quest #176"

    @pytest.mark.asyncio
    async def test_signal_after_timeout(self, harness: EngineHarness) -> None:
        await harness.balance(1250)
        await harness.advance(0.5)
        await harness.send(HostEventTypes.QUEST_TURNED_IN, quest_id=176, money=250)

        assert harness.sink.kinds() == [TransactionKind.UNCLAIMED_INCOME]


class TestLootTracker:
    """전리품 테스트"""

    @pytest.mark.asyncio
    async def test_loot_item(self, harness: EngineHarness) -> None:
        await harness.send(
            HostEventTypes.LOOT_RECEIVED,
            item_id=2589,
            link="[Linen Cloth]",
            quantity=3,
            source="Defias Thug",
        )

        tx = harness.sink.transactions[0]
        assert tx.kind == TransactionKind.LOOT
        assert tx.value == 0
        assert tx.quantity == 3
        assert tx.source == "Defias Thug"

    @pytest.mark.asyncio
    async def test_loot_item_ignored_while_vendor_open(self, harness: EngineHarness) -> None:
        await harness.open(Venue.VENDOR)

        await harness.send(HostEventTypes.LOOT_RECEIVED, item_id=2589, quantity=1)

        assert len(harness.sink) == 0

    @pytest.mark.asyncio
    async def test_loot_money(self, harness: EngineHarness) -> None:
        await harness.send(HostEventTypes.LOOT_MONEY, amount=37)

        await harness.balance(1037)

        tx = harness.sink.transactions[0]
        assert tx.kind == TransactionKind.LOOT_GOLD
        assert tx.source == "Gold Loot"

    @pytest.mark.asyncio
    async def test_loot_money_from_message(self, harness: EngineHarness) -> None:
        await harness.send(HostEventTypes.LOOT_MONEY, message="You loot 1 Silver, 5 Copper")

        await harness.balance(1105)

        assert harness.sink.values() == [105]

    @pytest.mark.asyncio
    async def test_auction_message_ignored(self, harness: EngineHarness) -> None:
        await harness.send(
            HostEventTypes.LOOT_MONEY,
            message="You receive 5 Gold from an auction you loot",
        )

        assert harness.tracker("loot").pending_action is None
