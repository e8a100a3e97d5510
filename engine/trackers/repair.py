"""
Repair Tracker

수리 요청(REPAIR_REQUESTED)을 잔고 감소로 확인.
비용이 있는 수리 요청마다 100ms 후 재확인하여, 캐릭터 잔고가 비용의 절반
이상 줄지 않았으면 길드 자금 수리(repair-guild, 금액 0)로 기록.
길드 자금 요청 여부는 판정에 쓰지 않고 로그에만 남김.
"""

import logging

from core.constants import Defaults, Timing
from core.domain.events import HostEvent, HostEventTypes
from core.ledger.types import TransactionKind
from core.types import Venue
from engine.classification import ClassificationResult, Confirmed
from engine.trackers.base import (
    BalanceObservation,
    PendingAction,
    TrackerContext,
    VenueTracker,
)

logger = logging.getLogger(__name__)


class RepairTracker(VenueTracker):
    """수리 Tracker

    상점 창과 수리 창 모두에서 열림.
    """

    name = "repair"
    venues = frozenset({Venue.VENDOR, Venue.REPAIR})
    action_types = frozenset({HostEventTypes.REPAIR_REQUESTED})

    def __init__(self, ctx: TrackerContext):
        super().__init__(ctx)
        self._guild_cost: int | None = None
        self._guild_requested = False
        self._paid = 0

    def default_source(self) -> str | None:
        return "Repair"

    async def on_action(self, event: HostEvent) -> None:
        cost = event.get_int("cost")
        if cost <= 0:
            logger.debug("수리 비용 없음, 무시")
            return

        use_guild_funds = bool(event.payload.get("use_guild_funds"))
        self._paid = 0

        claimed = await self.expect(TransactionKind.REPAIR, -cost, use_guild_funds=use_guild_funds)
        if claimed is not None:
            self._paid = -claimed

        self._guild_cost = cost
        self._guild_requested = use_guild_funds
        self.timers.start("guild-recheck", Timing.REPAIR_RECHECK_SEC, self._recheck_guild)

    def classify(
        self,
        delta: int,
        observation: BalanceObservation,
        pending: PendingAction | None,
    ) -> ClassificationResult:
        return self.confirm_pending(delta, pending)

    async def after_accept(self, result: Confirmed) -> None:
        self._paid += -result.amount

    async def _recheck_guild(self) -> None:
        cost = self._guild_cost
        self._guild_cost = None
        if cost is None:
            return

        if self._paid >= cost * Defaults.GUILD_REPAIR_RATIO:
            logger.debug(
                "길드 자금 수리 아님 (개인 잔고 차감)",
                extra={"cost": cost, "paid": self._paid},
            )
            return

        if not self._guild_requested:
            logger.info(
                "길드 자금 요청 없이 잔고 변화 없음, 길드 자금 수리로 기록",
                extra={"cost": cost, "paid": self._paid},
            )
        await self.emit(TransactionKind.REPAIR_GUILD, 0, source=Defaults.GUILD_FUNDS_SOURCE)
        if self.pending_action is not None and self.pending_action.kind == TransactionKind.REPAIR:
            self.pending_action = None
