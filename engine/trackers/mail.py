"""
Mail Tracker

우편함 송수신 추적.

- MAIL_SENT: 첨부 아이템은 즉시 mail-item-out, 송금액과 우편료는 잔고 감소로 확인
  (감소분 중 송금액을 넘는 부분이 mail-postage)
- MAIL_MONEY_TAKEN: mail-gold-in. 경매 판매 정산서(invoice)가 있으면
  auction-sold(총액) / deposit-refund / auction-fee로 나눔 (합계 = 관측 금액)
- MAIL_ITEM_TAKEN: mail-item-in, 착불(cod)이면 mail-gold-out
- AUCTION_SOLD: 우편함이 닫혀 있어도 5초간 기억. 정산서 없는 대금 수령 시
  경매장 수수료율로 총액/수수료 추정

invoice 형식: {"gross": 총 판매가, "deposit": 보증금, "fee": 경매장 수수료,
              "item_id", "link", "quantity"}
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from core.constants import Defaults, Timing
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

SplitFn = Callable[[int], tuple[Allocation, ...]]


@dataclass
class RecentSale:
    """경매장 판매 알림 (대금은 우편으로 도착)"""

    item_id: int | None
    link: str | None
    quantity: int | None
    created_at: float

    def is_fresh(self, now: float) -> bool:
        return now - self.created_at <= Timing.AUCTION_SALE_TTL_SEC


def split_sent_money(money: int, recipient: str | None) -> SplitFn:
    """송금 + 우편료 분배 함수"""

    def split(amount: int) -> tuple[Allocation, ...]:
        gold = max(amount, -money)
        postage = amount - gold
        allocations = [Allocation(TransactionKind.MAIL_GOLD_OUT, gold, source=recipient)]
        if postage:
            allocations.append(Allocation(TransactionKind.MAIL_POSTAGE, postage, source=recipient))
        return tuple(allocations)

    return split


def split_invoice(invoice: dict[str, Any], sender: str | None) -> SplitFn:
    """경매 판매 정산서 분배 함수

    판매 총액은 관측 금액에서 보증금 환급을 빼고 수수료를 더한 값.
    음수가 되면 정산서를 무시하고 mail-gold-in 1건.
    """
    deposit = max(int(invoice.get("deposit") or 0), 0)
    fee = max(int(invoice.get("fee") or 0), 0)
    item = {
        "item_id": invoice.get("item_id"),
        "item_link": invoice.get("link"),
        "quantity": invoice.get("quantity") or None,
    }

    def split(amount: int) -> tuple[Allocation, ...]:
        sold = amount - deposit + fee
        if sold < 0:
            logger.debug("정산서 금액 불일치, 단일 수령으로 기록", extra={"amount": amount})
            return (Allocation(TransactionKind.MAIL_GOLD_IN, amount, source=sender),)

        allocations = [
            Allocation(TransactionKind.AUCTION_SOLD, sold, source=Defaults.AUCTION_HOUSE_SOURCE, **item)
        ]
        if deposit:
            allocations.append(
                Allocation(TransactionKind.DEPOSIT_REFUND, deposit, source=Defaults.AUCTION_HOUSE_SOURCE, **item)
            )
        if fee:
            allocations.append(
                Allocation(TransactionKind.AUCTION_FEE, -fee, source=Defaults.AUCTION_HOUSE_SOURCE, **item)
            )
        return tuple(allocations)

    return split


def split_estimated_sale(sale: RecentSale) -> SplitFn:
    """정산서 없는 경매 대금: 수수료율로 총액 추정"""

    def split(amount: int) -> tuple[Allocation, ...]:
        gross = round(amount / (1 - Defaults.AUCTION_CUT_RATIO))
        fee = gross - amount
        item = {"item_id": sale.item_id, "item_link": sale.link, "quantity": sale.quantity}
        allocations = [
            Allocation(TransactionKind.AUCTION_SOLD, gross, source=Defaults.AUCTION_HOUSE_SOURCE, **item)
        ]
        if fee:
            allocations.append(
                Allocation(TransactionKind.AUCTION_FEE, -fee, source=Defaults.AUCTION_HOUSE_SOURCE, **item)
            )
        return tuple(allocations)

    return split


class MailTracker(VenueTracker):
    """우편함 Tracker"""

    name = "mail"
    venues = frozenset({Venue.MAILBOX})
    action_types = frozenset({
        HostEventTypes.MAIL_SENT,
        HostEventTypes.MAIL_MONEY_TAKEN,
        HostEventTypes.MAIL_ITEM_TAKEN,
        HostEventTypes.AUCTION_SOLD,
    })

    def __init__(self, ctx: TrackerContext):
        super().__init__(ctx)
        self.recent_sale: RecentSale | None = None

    def default_source(self) -> str | None:
        return "Mailbox"

    async def handle_action(self, event: HostEvent) -> None:
        if event.event_type == HostEventTypes.AUCTION_SOLD:
            self._remember_sale(event)
            return
        await super().handle_action(event)

    def _remember_sale(self, event: HostEvent) -> None:
        self.recent_sale = RecentSale(
            item_id=event.payload.get("item_id"),
            link=event.payload.get("link"),
            quantity=event.payload.get("quantity") or None,
            created_at=self.ctx.clock(),
        )
        logger.debug("경매 판매 알림 기억", extra={"item_id": self.recent_sale.item_id})

    def _take_recent_sale(self) -> RecentSale | None:
        sale = self.recent_sale
        self.recent_sale = None
        if sale is None or not sale.is_fresh(self.ctx.clock()):
            return None
        return sale

    async def on_action(self, event: HostEvent) -> None:
        if event.event_type == HostEventTypes.MAIL_SENT:
            await self._on_sent(event)
        elif event.event_type == HostEventTypes.MAIL_MONEY_TAKEN:
            await self._on_money_taken(event)
        elif event.event_type == HostEventTypes.MAIL_ITEM_TAKEN:
            await self._on_item_taken(event)

    async def _on_sent(self, event: HostEvent) -> None:
        recipient = event.payload.get("recipient") or Defaults.UNKNOWN_SOURCE

        for item in event.payload.get("items") or []:
            await self.emit(
                TransactionKind.MAIL_ITEM_OUT,
                0,
                item_id=item.get("item_id"),
                item_link=item.get("link"),
                quantity=item.get("quantity") or 1,
                source=recipient,
            )

        money = event.get_int("money")
        if money > 0:
            await self.expect(
                TransactionKind.MAIL_GOLD_OUT,
                -money,
                split=split_sent_money(money, recipient),
                source=recipient,
            )
        else:
            await self.expect(TransactionKind.MAIL_POSTAGE, None, source=recipient)

    async def _on_money_taken(self, event: HostEvent) -> None:
        amount = event.get_int("amount")
        sender = event.payload.get("sender") or Defaults.UNKNOWN_SOURCE
        invoice = event.payload.get("invoice")

        split: SplitFn | None = None
        if invoice:
            split = split_invoice(invoice, sender)
        else:
            sale = self._take_recent_sale()
            if sale is not None:
                split = split_estimated_sale(sale)

        await self.expect(
            TransactionKind.MAIL_GOLD_IN,
            amount if amount > 0 else None,
            split=split,
            source=sender,
        )

    async def _on_item_taken(self, event: HostEvent) -> None:
        sender = event.payload.get("sender") or Defaults.UNKNOWN_SOURCE
        item = {
            "item_id": event.payload.get("item_id"),
            "quantity": event.payload.get("quantity") or 1,
        }
        link = event.payload.get("link")

        await self.emit(TransactionKind.MAIL_ITEM_IN, 0, item_link=link, source=sender, **item)

        cod = event.get_int("cod")
        if cod > 0:
            await self.expect(TransactionKind.MAIL_GOLD_OUT, -cod, link=link, source=sender, **item)

    def classify(
        self,
        delta: int,
        observation: BalanceObservation,
        pending: PendingAction | None,
    ) -> ClassificationResult:
        return self.confirm_pending(delta, pending)
