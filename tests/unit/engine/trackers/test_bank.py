"""
Bank Tracker 테스트
"""

import pytest

from core.domain.events import HostEventTypes
from core.ledger.types import TransactionKind
from core.types import Venue
from tests.helpers import EngineHarness


class TestBankItems:
    """은행 아이템 이동 테스트"""

    @pytest.mark.asyncio
    async def test_deposit_and_withdraw(self, harness: EngineHarness) -> None:
        harness.host.set_bags({1: 5})
        await harness.open(Venue.BANK)

        await harness.bags({1: 2})
        await harness.advance(0.1)

        out = harness.sink.transactions[0]
        assert out.kind == TransactionKind.BANK_ITEM_OUT
        assert out.item_id == 1
        assert out.quantity == 3
        assert out.value == 0

        await harness.bags({1: 2, 7: 1})
        await harness.advance(0.1)

        assert harness.sink.kinds()[-1] == TransactionKind.BANK_ITEM_IN

    @pytest.mark.asyncio
    async def test_debounced(self, harness: EngineHarness) -> None:
        harness.host.set_bags({1: 5})
        await harness.open(Venue.BANK)

        await harness.bags({1: 4})
        await harness.advance(0.05)
        await harness.bags({1: 3})
        await harness.advance(0.08)

        assert len(harness.sink) == 0

        await harness.advance(0.05)

        assert harness.sink.values() == [0]
        assert harness.sink.transactions[0].quantity == 2

    @pytest.mark.asyncio
    async def test_close_flushes_pending_diff(self, harness: EngineHarness) -> None:
        harness.host.set_bags({1: 5})
        await harness.open(Venue.BANK)

        await harness.bags({})
        await harness.close(Venue.BANK)

        assert harness.sink.kinds() == [TransactionKind.BANK_ITEM_OUT]

    @pytest.mark.asyncio
    async def test_unexplained_balance_left_to_arbiter(self, harness: EngineHarness) -> None:
        await harness.open(Venue.BANK)

        await harness.balance(900)
        await harness.close(Venue.BANK)
        await harness.advance(0.5)

        assert harness.sink.kinds() == [TransactionKind.UNCLAIMED_EXPENSE]


class TestMoneyBanks:
    """길드/전투부대 은행 골드 테스트"""

    @pytest.mark.asyncio
    async def test_guild_bank_deposit(self, harness: EngineHarness) -> None:
        await harness.open(Venue.GUILD_BANK, bank_balance=10_000)
        await harness.send(HostEventTypes.GUILD_BANK_MONEY_CHANGED, balance=10_500)

        await harness.balance(500)

        tx = harness.sink.transactions[0]
        assert tx.kind == TransactionKind.GUILDBANK_GOLD_OUT
        assert tx.value == -500
        assert tx.source == "Guild Bank"

    @pytest.mark.asyncio
    async def test_warband_withdraw_by_delta(self, harness: EngineHarness) -> None:
        await harness.open(Venue.WARBAND_BANK)
        await harness.send(HostEventTypes.WARBAND_MONEY_CHANGED, delta=-300)

        await harness.balance(1300)

        assert harness.sink.kinds() == [TransactionKind.WARBANK_GOLD_IN]
        assert harness.sink.values() == [300]

    @pytest.mark.asyncio
    async def test_first_bank_balance_is_baseline(self, harness: EngineHarness) -> None:
        await harness.open(Venue.GUILD_BANK)
        await harness.send(HostEventTypes.GUILD_BANK_MONEY_CHANGED, balance=10_000)

        assert harness.tracker("guild_bank").pending_action is None

        await harness.send(HostEventTypes.GUILD_BANK_MONEY_CHANGED, balance=9_000)

        pending = harness.tracker("guild_bank").pending_action
        assert pending.kind == TransactionKind.GUILDBANK_GOLD_IN
        assert pending.expected == 1_000

    @pytest.mark.asyncio
    async def test_guild_bank_items_use_guild_kinds(self, harness: EngineHarness) -> None:
        harness.host.set_bags({1: 1})
        await harness.open(Venue.GUILD_BANK)

        await harness.bags({})
        await harness.advance(0.1)

        assert harness.sink.kinds() == [TransactionKind.GUILDBANK_ITEM_OUT]
