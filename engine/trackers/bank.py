"""
Bank Trackers

개인 은행 / 길드 은행 / 전투부대(계정) 은행.

아이템: 가방 갱신 신호를 100ms 디바운스한 뒤 열릴 때의 스냅샷과 비교.
가방에서 빠진 아이템은 *-item-out, 들어온 아이템은 *-item-in (금액 0).

골드 (길드/전투부대 은행): 은행 잔고 변화 신호로 방향을 알아낸 뒤
캐릭터 잔고 변화로 확인. 은행 잔고가 늘면 캐릭터 지출(*-gold-out),
줄면 캐릭터 수입(*-gold-in).
"""

import logging

from core.constants import Timing
from core.domain.events import HostEvent, HostEventTypes
from core.ledger.types import TransactionKind
from core.types import ItemDirection, Venue
from engine.classification import UNATTRIBUTED, ClassificationResult
from engine.inventory.snapshot import diff, take_snapshot
from engine.trackers.base import (
    BalanceObservation,
    PendingAction,
    TrackerContext,
    VenueTracker,
)

logger = logging.getLogger(__name__)


class BankTracker(VenueTracker):
    """개인 은행 Tracker (아이템만)"""

    name = "bank"
    venues = frozenset({Venue.BANK})
    tracks_items = True
    item_in_kind = TransactionKind.BANK_ITEM_IN
    item_out_kind = TransactionKind.BANK_ITEM_OUT

    def default_source(self) -> str | None:
        return "Bank"

    async def on_inventory(self, event: HostEvent) -> None:
        if event.scope != self.inventory_scope:
            return
        self.timers.start("item-diff", Timing.INVENTORY_DEBOUNCE_SEC, self.flush_items)

    async def on_close(self, event: HostEvent) -> None:
        # 디바운스 중인 변화는 닫기 전에 반영
        if self.timers.is_active("item-diff"):
            await self.flush_items()

    async def flush_items(self) -> int:
        """스냅샷 비교 후 아이템 이동 기록

        Returns:
            기록한 건수
        """
        if self.snapshot is None:
            return 0

        after = take_snapshot(self.ctx.host, self.inventory_scope)
        changes = diff(self.snapshot, after)
        self.snapshot = after
        self.timers.cancel("item-diff")

        for change in changes:
            kind = self.item_out_kind if change.direction == ItemDirection.REMOVED else self.item_in_kind
            await self.emit(
                kind,
                0,
                item_id=change.item_id,
                item_link=change.link,
                quantity=change.quantity,
            )
        return len(changes)

    def classify(
        self,
        delta: int,
        observation: BalanceObservation,
        pending: PendingAction | None,
    ) -> ClassificationResult:
        if pending is None:
            return UNATTRIBUTED
        return self.confirm_pending(delta, pending)


class MoneyBankTracker(BankTracker):
    """골드 보관이 가능한 은행 (길드/전투부대)

    클래스 속성:
        money_event: 은행 잔고 변화 신호
        gold_in_kind / gold_out_kind: 캐릭터 기준 입출금 유형
    """

    money_event: str = ""
    gold_in_kind: TransactionKind
    gold_out_kind: TransactionKind

    def __init__(self, ctx: TrackerContext):
        super().__init__(ctx)
        self.bank_balance: int | None = None

    async def on_open(self, event: HostEvent) -> None:
        bank_balance = event.payload.get("bank_balance")
        self.bank_balance = int(bank_balance) if bank_balance is not None else None

    async def on_action(self, event: HostEvent) -> None:
        if event.event_type != self.money_event:
            return

        bank_delta = self._bank_delta(event)
        if not bank_delta:
            return

        # 은행 잔고 증가 = 캐릭터 입금(지출)
        kind = self.gold_out_kind if bank_delta > 0 else self.gold_in_kind
        await self.expect(kind, -bank_delta)

    def _bank_delta(self, event: HostEvent) -> int:
        if "delta" in event.payload:
            return event.get_int("delta")

        if "balance" not in event.payload:
            return 0

        balance = event.get_int("balance")
        previous = self.bank_balance
        self.bank_balance = balance
        if previous is None:
            logger.debug(f"{self.name}: 은행 잔고 기준값 설정", extra={"bank_balance": balance})
            return 0
        return balance - previous


class GuildBankTracker(MoneyBankTracker):
    """길드 은행 Tracker"""

    name = "guild_bank"
    venues = frozenset({Venue.GUILD_BANK})
    action_types = frozenset({HostEventTypes.GUILD_BANK_MONEY_CHANGED})
    money_event = HostEventTypes.GUILD_BANK_MONEY_CHANGED
    item_in_kind = TransactionKind.GUILDBANK_ITEM_IN
    item_out_kind = TransactionKind.GUILDBANK_ITEM_OUT
    gold_in_kind = TransactionKind.GUILDBANK_GOLD_IN
    gold_out_kind = TransactionKind.GUILDBANK_GOLD_OUT

    def default_source(self) -> str | None:
        return "Guild Bank"


class WarbandBankTracker(MoneyBankTracker):
    """전투부대 은행 Tracker (계정 공용, 본인 자금 이동)"""

    name = "warband_bank"
    venues = frozenset({Venue.WARBAND_BANK})
    action_types = frozenset({HostEventTypes.WARBAND_MONEY_CHANGED})
    money_event = HostEventTypes.WARBAND_MONEY_CHANGED
    item_in_kind = TransactionKind.WARBANK_ITEM_IN
    item_out_kind = TransactionKind.WARBANK_ITEM_OUT
    gold_in_kind = TransactionKind.WARBANK_GOLD_IN
    gold_out_kind = TransactionKind.WARBANK_GOLD_OUT

    def default_source(self) -> str | None:
        return "Warband Bank"
