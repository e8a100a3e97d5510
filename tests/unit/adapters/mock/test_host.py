"""
MockGameHost / MemoryLedgerSink 테스트
"""

import pytest

from adapters.mock import MemoryLedgerSink, MockGameHost
from adapters.models import ItemMetadata
from core.ledger.types import Transaction, TransactionKind
from core.types import InventoryScope


class TestMockGameHost:
    """MockGameHost 테스트"""

    def test_balance_reads_counted(self) -> None:
        host = MockGameHost(balance=1000)

        host.get_balance()
        host.balance = 1300

        assert host.get_balance() == 1300
        assert host.balance_reads == 2

    def test_set_bags_skips_empty(self) -> None:
        host = MockGameHost()
        host.set_bags({2589: 5, 2592: 0})

        slots = host.enumerate_inventory(InventoryScope.BAGS)

        assert [(s.item_id, s.quantity) for s in slots] == [(2589, 5)]
        assert host.enumerate_inventory(InventoryScope.BANK) == []

    def test_pending_metadata(self) -> None:
        host = MockGameHost()
        host.add_item_metadata(ItemMetadata(item_id=2589, name="Linen Cloth", vendor_unit_value=13))
        host.set_pending(2589, 2)

        answers = [host.lookup_item_metadata(2589) for _ in range(3)]

        assert answers[:2] == [None, None]
        assert answers[2] is not None
        assert host.metadata_lookups[2589] == 3

    def test_unknown_item_never_ready(self) -> None:
        assert MockGameHost().lookup_item_metadata(1) is None


class TestMemoryLedgerSink:
    """MemoryLedgerSink 테스트"""

    @pytest.mark.asyncio
    async def test_append_assigns_seq(self) -> None:
        sink = MemoryLedgerSink()

        first = await sink.append(
            Transaction(kind=TransactionKind.SALE, character_key="Alice-Realm", value=300)
        )
        second = await sink.append(
            Transaction(kind=TransactionKind.REPAIR, character_key="Alice-Realm", value=-120)
        )

        assert (first.seq, second.seq) == (1, 2)
        assert sink.total() == 180
        assert sink.of_kind(TransactionKind.REPAIR) == [second]
        assert len(sink) == 2
