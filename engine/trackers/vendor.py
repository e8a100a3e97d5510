"""
Vendor Tracker

상점 판매/구매/되사기 추적.

- 구매/되사기: 액션 신호(VENDOR_ITEM_PURCHASED/VENDOR_BUYBACK)로 확인
- 판매: 호스트가 판매 금액을 알려주지 않으므로 가방 비교로 추론
  1. 제거된 아이템이 하나면 전체 변화량을 그 아이템에 배정
  2. 여러 개이고 알려진 판매가 합계가 변화량의 10% 이내면 판매가 비례 분배
  3. 그 외에는 균등 분배 (낮은 신뢰도, 경고 로그)
- 잔고 변화마다 스냅샷을 다시 찍음 (가방 갱신 신호에서는 다시 찍지 않음)
- 잔고보다 가방 갱신이 늦게 오면 판매를 보류했다가 가방 갱신 시 늦게 청구
  (보류 판매는 들어온 순서대로 배정)
"""

import logging
from collections import deque
from dataclasses import dataclass

from core.constants import Defaults, Timing
from core.domain.events import HostEvent, HostEventTypes
from core.ledger.types import TransactionKind
from core.types import Confidence, Venue
from engine.classification import (
    UNATTRIBUTED,
    Allocation,
    ClassificationResult,
    Inferred,
    Unattributed,
    split_evenly,
    split_proportionally,
)
from engine.inventory.snapshot import (
    ItemDelta,
    added_items,
    diff,
    removed_items,
    take_snapshot,
)
from engine.trackers.base import (
    BalanceObservation,
    PendingAction,
    TrackerContext,
    VenueTracker,
)

logger = logging.getLogger(__name__)


@dataclass
class HeldSale:
    """가방 갱신을 기다리는 판매 금액"""

    amount: int
    observed_at: float
    timer: str


def within_tolerance(observed: int, expected: int) -> bool:
    """판매 금액 허용 오차 확인 (예상의 10% + 1 copper)"""
    return abs(observed - expected) < expected * Defaults.VALUE_TOLERANCE_RATIO + 1


class VendorTracker(VenueTracker):
    """상점 Tracker"""

    name = "vendor"
    venues = frozenset({Venue.VENDOR})
    action_types = frozenset({
        HostEventTypes.VENDOR_ITEM_PURCHASED,
        HostEventTypes.VENDOR_BUYBACK,
    })
    tracks_items = True

    def __init__(self, ctx: TrackerContext):
        super().__init__(ctx)
        self.held_sales: deque[HeldSale] = deque()
        self._held_seq = 0

    def default_source(self) -> str | None:
        return "Vendor"

    async def on_close(self, event: HostEvent) -> None:
        if self.held_sales:
            logger.debug(
                "보류 판매 폐기 (상점 닫힘)",
                extra={"amounts": [s.amount for s in self.held_sales]},
            )
        self.held_sales.clear()

    # -------------------------------------------------------------------------
    # 액션 신호
    # -------------------------------------------------------------------------

    async def on_action(self, event: HostEvent) -> None:
        cost = event.get_int("cost")
        if cost <= 0:
            logger.debug(f"비용 없는 상점 액션 무시: {event.event_type}")
            return

        kind = (
            TransactionKind.BUYBACK
            if event.event_type == HostEventTypes.VENDOR_BUYBACK
            else TransactionKind.PURCHASE
        )
        await self.expect(
            kind,
            -cost,
            item_id=event.payload.get("item_id"),
            link=event.payload.get("link"),
            quantity=event.payload.get("quantity") or 1,
        )

    # -------------------------------------------------------------------------
    # 잔고 변화
    # -------------------------------------------------------------------------

    def evaluate(self, observation: BalanceObservation) -> ClassificationResult:
        result = super().evaluate(observation)
        if self.is_open and not self.held_sales:
            self.snapshot = take_snapshot(self.ctx.host, self.inventory_scope)
        return result

    def classify(
        self,
        delta: int,
        observation: BalanceObservation,
        pending: PendingAction | None,
    ) -> ClassificationResult:
        result = self.confirm_pending(delta, pending)
        if not isinstance(result, Unattributed):
            return result

        after = take_snapshot(self.ctx.host, self.inventory_scope)
        changes = diff(self.snapshot or {}, after)

        if delta > 0:
            removed = removed_items(changes)
            if not removed or self.held_sales:
                self._hold_sale(delta, observation.now)
                return Unattributed("가방 갱신 대기")
            return self.infer_sale(delta, removed)

        if pending is None:
            return self.infer_purchase(delta, added_items(changes))
        return UNATTRIBUTED

    # -------------------------------------------------------------------------
    # 판매 추론
    # -------------------------------------------------------------------------

    def sale_candidates(self, removed: list[ItemDelta]) -> list[ItemDelta]:
        """판매 후보 (판매가 0으로 알려진 아이템 제외, 미상은 유지)"""
        return [d for d in removed if self.ctx.catalog.vendor_value(d.item_id) != 0]

    def infer_sale(self, delta: int, removed: list[ItemDelta]) -> ClassificationResult:
        """제거된 아이템에 판매 금액 배정

        Args:
            delta: 관측된 증가량 (양수)
            removed: 가방에서 제거된 아이템

        Returns:
            Inferred (후보가 없으면 Unattributed)
        """
        candidates = self.sale_candidates(removed)
        if not candidates:
            return Unattributed("판매 가능한 아이템 없음")

        if len(candidates) == 1:
            return Inferred(
                (self._allocation(TransactionKind.SALE, candidates[0], delta),),
                confidence=Confidence.HIGH,
            )

        known = [self.ctx.catalog.vendor_value(d.item_id) for d in candidates]
        if all(v is not None for v in known):
            weights = [v * d.quantity for v, d in zip(known, candidates)]
            if within_tolerance(delta, sum(weights)):
                shares = split_proportionally(delta, weights)
                return Inferred(
                    tuple(
                        self._allocation(TransactionKind.SALE, d, share)
                        for d, share in zip(candidates, shares)
                    ),
                    confidence=Confidence.MEDIUM,
                    expected=sum(weights),
                )

        logger.warning(
            f"판매 금액 균등 분배 (낮은 신뢰도): {len(candidates)}개 아이템",
            extra={"delta": delta, "items": [d.item_id for d in candidates]},
        )
        exhausted = [d.item_id for d in candidates if self.ctx.catalog.is_exhausted(d.item_id)]
        if exhausted:
            logger.warning(
                f"메타데이터 조회 포기한 아이템 포함 (낮은 신뢰도): {exhausted}",
                extra={"delta": delta, "exhausted": exhausted},
            )
        shares = split_evenly(delta, len(candidates))
        return Inferred(
            tuple(
                self._allocation(TransactionKind.SALE, d, share)
                for d, share in zip(candidates, shares)
            ),
            confidence=Confidence.LOW,
        )

    def infer_purchase(self, delta: int, added: list[ItemDelta]) -> ClassificationResult:
        """액션 신호 없이 아이템이 추가된 지출을 구매로 추론"""
        if not added:
            return UNATTRIBUTED

        if len(added) == 1:
            return Inferred(
                (self._allocation(TransactionKind.PURCHASE, added[0], delta),),
                confidence=Confidence.HIGH,
            )

        known = [self.ctx.catalog.vendor_value(d.item_id) for d in added]
        if all(known):
            shares = split_proportionally(delta, [v * d.quantity for v, d in zip(known, added)])
            confidence = Confidence.MEDIUM
        else:
            shares = split_evenly(delta, len(added))
            confidence = Confidence.LOW

        return Inferred(
            tuple(
                self._allocation(TransactionKind.PURCHASE, d, share)
                for d, share in zip(added, shares)
            ),
            confidence=confidence,
        )

    def _allocation(self, kind: TransactionKind, item: ItemDelta, value: int) -> Allocation:
        return Allocation(
            kind=kind,
            value=value,
            item_id=item.item_id,
            item_link=item.link,
            quantity=item.quantity,
            source=self.source,
        )

    # -------------------------------------------------------------------------
    # 보류 판매 (가방 갱신이 늦은 경우)
    # -------------------------------------------------------------------------

    def _hold_sale(self, amount: int, now: float) -> None:
        self._held_seq += 1
        sale = HeldSale(amount=amount, observed_at=now, timer=f"held-sale-{self._held_seq}")
        self.held_sales.append(sale)
        self.timers.start(
            sale.timer,
            Timing.UNRESOLVED_SALE_TTL_SEC,
            lambda: self._expire_held_sale(sale),
        )
        logger.debug(
            "판매 보류: 가방 갱신 대기",
            extra={"amount": amount, "held": len(self.held_sales)},
        )

    async def _expire_held_sale(self, sale: HeldSale) -> None:
        if sale not in self.held_sales:
            return
        self.held_sales.remove(sale)
        logger.debug("보류 판매 만료", extra={"amount": sale.amount})
        if not self.held_sales:
            self.snapshot = take_snapshot(self.ctx.host, self.inventory_scope)

    def _take_items(self, sale: HeldSale, removed: list[ItemDelta]) -> list[ItemDelta]:
        """보류 판매 하나에 배정할 제거 아이템

        마지막 보류 판매는 남은 아이템 전부. 그 외에는 판매가가 금액과 맞는
        아이템, 없으면 첫 판매 후보 하나.
        """
        if not self.held_sales:
            return list(removed)

        candidates = self.sale_candidates(removed)
        for item in candidates:
            value = self.ctx.catalog.vendor_value(item.item_id)
            if value and within_tolerance(sale.amount, value * item.quantity):
                return [item]
        return candidates[:1]

    async def _claim_held(self, sale: HeldSale, items: list[ItemDelta]) -> bool:
        result = self.infer_sale(sale.amount, items)
        if not isinstance(result, Inferred):
            logger.debug("보류 판매에 배정할 아이템 없음", extra={"amount": sale.amount})
            return False

        if not self.ctx.arbiter.claim_amount(sale.amount):
            logger.debug("보류 판매를 청구하지 못함 (변화 이미 정리됨)", extra={"amount": sale.amount})
            return False

        await self.ctx.emitter.emit_allocations(result.allocations)
        return True

    async def on_inventory(self, event: HostEvent) -> None:
        if not self.held_sales or event.scope != self.inventory_scope:
            return

        after = take_snapshot(self.ctx.host, self.inventory_scope)
        removed = removed_items(diff(self.snapshot or {}, after))
        if not removed:
            return

        # 먼저 보류된 판매부터 배정
        while self.held_sales and removed:
            sale = self.held_sales.popleft()
            self.timers.cancel(sale.timer)
            items = self._take_items(sale, removed)
            removed = [d for d in removed if d not in items]
            await self._claim_held(sale, items)

        self.snapshot = after
