"""
VendorTracker 테스트
"""

import logging

import pytest

from adapters.models import ItemMetadata
from core.domain.events import HostEventTypes
from core.ledger.types import TransactionKind
from core.types import Venue
from engine.trackers.vendor import within_tolerance
from tests.helpers import EngineHarness


def add_items(harness: EngineHarness, *items: tuple[int, int]) -> None:
    for item_id, value in items:
        harness.host.add_item_metadata(
            ItemMetadata(item_id=item_id, name=f"item {item_id}", vendor_unit_value=value)
        )


class TestVendorSale:
    """가방 비교 판매 추론 테스트"""

    @pytest.mark.asyncio
    async def test_single_item_sale(self, harness: EngineHarness) -> None:
        """1000 -> 1300, 아이템 1개 제거: 300 판매"""
        harness.host.set_bags({2589: 1, 118: 2})
        await harness.open(Venue.VENDOR)

        harness.host.set_bags({118: 2})
        await harness.balance(1300)
        await harness.advance(1.0)

        assert harness.sink.kinds() == [TransactionKind.SALE]
        sale = harness.sink.transactions[0]
        assert sale.value == 300
        assert sale.item_id == 2589
        assert sale.item_link == "[item:2589]"
        assert sale.source == "Vendor"

    @pytest.mark.asyncio
    async def test_proportional_split_with_known_values(self, harness: EngineHarness) -> None:
        add_items(harness, (1, 100), (2, 50))
        harness.host.set_bags({1: 1, 2: 4})
        await harness.open(Venue.VENDOR)
        await harness.settle()

        harness.host.set_bags({})
        await harness.balance(1300)

        assert harness.sink.values() == [100, 200]
        assert [t.quantity for t in harness.sink.transactions] == [1, 4]

    @pytest.mark.asyncio
    async def test_even_split_when_values_unknown(self, harness: EngineHarness) -> None:
        harness.host.set_bags({1: 1, 2: 1, 3: 1})
        await harness.open(Venue.VENDOR)

        harness.host.set_bags({})
        await harness.balance(1100)

        assert harness.sink.values() == [34, 33, 33]
        assert sum(harness.sink.values()) == 100

    @pytest.mark.asyncio
    async def test_known_unsellable_excluded(self, harness: EngineHarness) -> None:
        add_items(harness, (1, 0), (2, 25))
        harness.host.set_bags({1: 1, 2: 1})
        await harness.open(Venue.VENDOR)
        await harness.settle()

        harness.host.set_bags({})
        await harness.balance(1025)

        assert [t.item_id for t in harness.sink.transactions] == [2]

    @pytest.mark.asyncio
    async def test_late_bag_update_claims_held_sale(self, harness: EngineHarness) -> None:
        """잔고가 가방 갱신보다 먼저 오면 가방 갱신 때 판매 기록"""
        harness.host.set_bags({2589: 1})
        await harness.open(Venue.VENDOR)

        await harness.balance(1300)
        assert len(harness.sink) == 0

        await harness.advance(0.05)
        await harness.bags({})

        assert harness.sink.kinds() == [TransactionKind.SALE]
        assert harness.sink.values() == [300]

        await harness.close(Venue.VENDOR)
        await harness.advance(1.0)
        assert len(harness.sink) == 1

    @pytest.mark.asyncio
    async def test_held_sales_assigned_in_order(self, harness: EngineHarness) -> None:
        """가방 갱신 전에 판매가 두 번 오면 각 금액이 맞는 아이템에 배정"""
        add_items(harness, (1, 300), (2, 200))
        harness.host.set_bags({1: 1, 2: 1})
        await harness.open(Venue.VENDOR)
        await harness.settle()

        await harness.balance(1300)
        await harness.balance(1500)
        assert len(harness.tracker("vendor").held_sales) == 2

        await harness.advance(0.05)
        await harness.bags({})

        assert harness.sink.kinds() == [TransactionKind.SALE, TransactionKind.SALE]
        assert [(t.item_id, t.value) for t in harness.sink.transactions] == [(1, 300), (2, 200)]
        assert not harness.tracker("vendor").held_sales

        await harness.close(Venue.VENDOR)
        await harness.advance(1.0)
        assert harness.sink.total() == 500

    @pytest.mark.asyncio
    async def test_held_sales_with_staggered_bag_updates(self, harness: EngineHarness) -> None:
        """판매가 미상이면 먼저 보류된 판매가 먼저 제거된 아이템을 가짐"""
        harness.host.set_bags({1: 1, 2: 1})
        await harness.open(Venue.VENDOR)

        await harness.balance(1300)
        await harness.balance(1500)

        await harness.bags({2: 1})
        assert [(t.item_id, t.value) for t in harness.sink.transactions] == [(1, 300)]
        assert len(harness.tracker("vendor").held_sales) == 1

        await harness.bags({})
        assert [(t.item_id, t.value) for t in harness.sink.transactions] == [(1, 300), (2, 200)]

        await harness.close(Venue.VENDOR)
        await harness.advance(1.0)
        assert len(harness.sink) == 2

    @pytest.mark.asyncio
    async def test_even_split_warns_on_exhausted_metadata(
        self, harness: EngineHarness, caplog: pytest.LogCaptureFixture
    ) -> None:
        harness.host.set_bags({404: 1, 405: 1})
        await harness.open(Venue.VENDOR)
        await harness.settle()

        harness.host.set_bags({})
        with caplog.at_level(logging.WARNING, logger="engine.trackers.vendor"):
            await harness.balance(1100)

        assert harness.sink.values() == [50, 50]
        assert harness.catalog.is_exhausted(404)
        assert any("메타데이터 조회 포기" in r.getMessage() for r in caplog.records)


class TestVendorAfterTimeout:
    """청구 타임아웃 이후 도착한 상점 신호 테스트"""

    @pytest.mark.asyncio
    async def test_purchase_signal_before_timeout_claims(self, harness: EngineHarness) -> None:
        await harness.balance(900)
        await harness.advance(0.4)

        await harness.open(Venue.VENDOR)
        await harness.send(HostEventTypes.VENDOR_ITEM_PURCHASED, item_id=159, cost=100)
        await harness.close(Venue.VENDOR)
        await harness.advance(1.0)

        assert harness.sink.kinds() == [TransactionKind.PURCHASE]
        assert harness.sink.total() == -100

    @pytest.mark.asyncio
    async def test_purchase_signal_after_timeout(self, harness: EngineHarness) -> None:
        """0.6초 뒤의 구매 신호는 이미 기록된 미분류 지출을 건드리지 않음"""
        await harness.balance(900)
        await harness.advance(0.6)
        assert harness.sink.kinds() == [TransactionKind.UNCLAIMED_EXPENSE]

        await harness.open(Venue.VENDOR)
        await harness.send(HostEventTypes.VENDOR_ITEM_PURCHASED, item_id=159, cost=100)
        await harness.close(Venue.VENDOR)
        await harness.advance(1.0)

        assert harness.sink.kinds() == [TransactionKind.UNCLAIMED_EXPENSE]
        assert harness.sink.total() == -100

    @pytest.mark.asyncio
    async def test_sale_bag_update_after_timeout(self, harness: EngineHarness) -> None:
        """0.6초 뒤의 판매 가방 갱신은 판매로 다시 기록되지 않음"""
        harness.host.set_bags({2589: 1})
        await harness.balance(1300)
        await harness.advance(0.6)

        await harness.open(Venue.VENDOR)
        await harness.bags({})
        await harness.close(Venue.VENDOR)
        await harness.advance(1.0)

        assert harness.sink.kinds() == [TransactionKind.UNCLAIMED_INCOME]
        assert harness.sink.total() == 300


class TestVendorPurchase:
    """구매/되사기 테스트"""

    @pytest.mark.asyncio
    async def test_purchase_confirmed_by_balance(self, harness: EngineHarness) -> None:
        await harness.open(Venue.VENDOR)
        await harness.send(
            HostEventTypes.VENDOR_ITEM_PURCHASED,
            item_id=159,
            link="[Refreshing Spring Water]",
            quantity=5,
            cost=125,
        )

        await harness.balance(875)

        tx = harness.sink.transactions[0]
        assert tx.kind == TransactionKind.PURCHASE
        assert tx.value == -125
        assert tx.quantity == 5

    @pytest.mark.asyncio
    async def test_observed_amount_recorded(self, harness: EngineHarness) -> None:
        """기록 금액은 예고가 아니라 관측 변화량"""
        await harness.open(Venue.VENDOR)
        await harness.send(HostEventTypes.VENDOR_BUYBACK, item_id=159, cost=100)

        await harness.balance(880)

        assert harness.sink.kinds() == [TransactionKind.BUYBACK]
        assert harness.sink.values() == [-120]

    @pytest.mark.asyncio
    async def test_balance_before_action_claimed_late(self, harness: EngineHarness) -> None:
        await harness.open(Venue.VENDOR)

        await harness.balance(900)
        await harness.send(HostEventTypes.VENDOR_ITEM_PURCHASED, item_id=159, cost=100)

        assert harness.sink.kinds() == [TransactionKind.PURCHASE]
        await harness.close(Venue.VENDOR)
        await harness.advance(1.0)
        assert len(harness.sink) == 1

    @pytest.mark.asyncio
    async def test_expired_action_not_used(self, harness: EngineHarness) -> None:
        await harness.open(Venue.VENDOR)
        await harness.send(HostEventTypes.VENDOR_ITEM_PURCHASED, item_id=159, cost=100)

        await harness.advance(2.5)
        await harness.balance(900)
        await harness.close(Venue.VENDOR)
        await harness.advance(0.5)

        assert harness.sink.kinds() == [TransactionKind.UNCLAIMED_EXPENSE]

    @pytest.mark.asyncio
    async def test_action_after_close_ignored(self, harness: EngineHarness) -> None:
        await harness.open(Venue.VENDOR)
        await harness.close(Venue.VENDOR)

        await harness.send(HostEventTypes.VENDOR_ITEM_PURCHASED, item_id=159, cost=100)

        assert harness.tracker("vendor").pending_action is None

    @pytest.mark.asyncio
    async def test_added_item_inferred_as_purchase(self, harness: EngineHarness) -> None:
        await harness.open(Venue.VENDOR)

        harness.host.set_bags({159: 5})
        await harness.balance(950)

        assert harness.sink.kinds() == [TransactionKind.PURCHASE]
        assert harness.sink.transactions[0].item_id == 159


def test_within_tolerance() -> None:
    assert within_tolerance(105, 100)
    assert within_tolerance(110, 100)
    assert not within_tolerance(112, 100)
