"""
서비스 비용 Tracker

골드만 움직이는 장소.

- 미용실 / 형상변환: 열려 있는 동안의 잔고 감소는 모두 해당 비용 (잔고만 확인)
- 비행 조련사: FLIGHT_TAKEN 신호의 비용과 1 copper 이내로 일치해야 함
"""

import logging

from core.constants import Defaults
from core.domain.events import HostEvent, HostEventTypes
from core.ledger.types import TransactionKind
from core.types import Venue
from engine.classification import UNATTRIBUTED, ClassificationResult, confirmed
from engine.trackers.base import BalanceObservation, PendingAction, VenueTracker

logger = logging.getLogger(__name__)


class BalanceOnlyTracker(VenueTracker):
    """열려 있는 동안의 잔고 감소를 cost_kind로 기록"""

    cost_kind: TransactionKind

    def classify(
        self,
        delta: int,
        observation: BalanceObservation,
        pending: PendingAction | None,
    ) -> ClassificationResult:
        if delta > 0:
            return UNATTRIBUTED
        return confirmed(self.cost_kind, delta, source=self.source)


class BarberTracker(BalanceOnlyTracker):
    name = "barber"
    venues = frozenset({Venue.BARBER})
    cost_kind = TransactionKind.BARBER_COST

    def default_source(self) -> str | None:
        return "Barber"


class TransmogTracker(BalanceOnlyTracker):
    name = "transmog"
    venues = frozenset({Venue.TRANSMOG})
    cost_kind = TransactionKind.TRANSMOG_COST

    def default_source(self) -> str | None:
        return "Transmogrification"


class FlightTracker(VenueTracker):
    """비행 조련사 Tracker (목적지를 출처로 기록)"""

    name = "flight"
    venues = frozenset({Venue.FLIGHT_MASTER})
    action_types = frozenset({HostEventTypes.FLIGHT_TAKEN})

    async def on_action(self, event: HostEvent) -> None:
        cost = event.get_int("cost")
        if cost <= 0:
            return
        await self.expect(
            TransactionKind.FLIGHT_COST,
            -cost,
            tolerance=Defaults.FLIGHT_COST_TOLERANCE,
            source=event.payload.get("destination") or Defaults.UNKNOWN_SOURCE,
        )

    def classify(
        self,
        delta: int,
        observation: BalanceObservation,
        pending: PendingAction | None,
    ) -> ClassificationResult:
        result = self.confirm_pending(delta, pending)
        if pending is not None and result is UNATTRIBUTED and delta < 0:
            logger.debug(
                "비행 비용 불일치",
                extra={"expected": pending.expected, "actual": delta},
            )
        return result
