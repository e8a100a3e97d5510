"""
Venue Context Tracker 기본 클래스

모든 장소별 Tracker가 공유하는 상태 머신과 분류 보조 로직.

상태: Closed -[장소 열림]-> Open -[장소 닫힘]-> Closed

- 장소 열림: 기준 잔고 저장, 아이템 추적 장소면 가방 스냅샷
- 액션 신호: pending_action 기록 (또는 이미 관측된 변화를 늦게 청구)
- 잔고 변화: evaluate()가 Confirmed / Inferred / Unattributed 반환
- 장소 닫힘: 타이머 취소, pending_action/스냅샷/기준 잔고 폐기
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from adapters.interfaces import IGameHost
from core.constants import Timing
from core.domain.events import HostEvent
from core.ledger.types import KIND_INFO, Transaction, TransactionKind
from core.types import InventoryScope, Venue
from engine.balance import BalanceTracker
from engine.classification import (
    UNATTRIBUTED,
    Allocation,
    ClassificationResult,
    Confirmed,
    Inferred,
)
from engine.emitter import TransactionEmitter
from engine.inventory.catalog import ItemCatalog
from engine.inventory.snapshot import ItemQuantityMap, take_snapshot
from engine.scheduler import TimerCallback, TimerGroup, TimerHandle

if TYPE_CHECKING:
    from engine.arbiter import Arbiter

logger = logging.getLogger(__name__)


@dataclass
class TrackerContext:
    """Tracker가 사용하는 공유 의존성

    Attributes:
        host: 게임 호스트
        arbiter: 미분류 변화 중재자 (claim 대상)
        emitter: Transaction 기록기
        catalog: 아이템 메타데이터
        defer: 지연 콜백 예약 (Dispatcher 직렬화 경로로 실행)
        clock: 스케줄러 시계
        is_open: 장소 열림 여부 조회
    """

    host: IGameHost
    arbiter: "Arbiter"
    emitter: TransactionEmitter
    catalog: ItemCatalog
    defer: Callable[[float, TimerCallback, str], TimerHandle]
    clock: Callable[[], float]
    is_open: Callable[[Venue], bool]


@dataclass(frozen=True)
class BalanceObservation:
    """잔고 변화 신호 1건에 대한 관측값"""

    balance: int
    now: float
    event: HostEvent | None = None


@dataclass
class PendingAction:
    """잔고 변화로 확인될 예정인 액션

    Attributes:
        kind: 기록할 거래 유형
        created_at: 기록 시각 (스케줄러 시계)
        ttl: 유효 시간 (초)
        expected: 예고된 변화량 (부호 있음, 교차 확인용)
        tolerance: 예고 금액과 관측 금액의 허용 차이 (None이면 부호만 확인)
        direction: 예고 금액이 없을 때의 기대 부호 (0이면 유형의 부호)
        item_id / link / quantity / source: 기록할 부가 정보
        extra: 장소별 추가 데이터
        split: 관측 금액을 여러 항목으로 나누는 함수 (우편 송금+우편료 등)
    """

    kind: TransactionKind
    created_at: float
    ttl: float = Timing.PENDING_ACTION_TTL_SEC
    expected: int | None = None
    tolerance: int | None = None
    direction: int = 0
    item_id: int | None = None
    link: str | None = None
    quantity: int | None = None
    source: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    split: Callable[[int], tuple[Allocation, ...]] | None = field(default=None, repr=False)

    def is_fresh(self, now: float) -> bool:
        return now - self.created_at <= self.ttl

    @property
    def expected_sign(self) -> int:
        if self.expected:
            return 1 if self.expected > 0 else -1
        if self.direction:
            return 1 if self.direction > 0 else -1
        return KIND_INFO[self.kind].sign

    def sign_matches(self, delta: int) -> bool:
        """변화량 부호가 예고와 일치 (기대 부호가 없으면 항상 일치)"""
        sign = self.expected_sign
        return sign == 0 or (delta > 0) == (sign > 0)

    def matches(self, delta: int) -> bool:
        """부호와 허용 오차 모두 일치"""
        if not self.sign_matches(delta):
            return False
        if self.tolerance is None or self.expected is None:
            return True
        return abs(delta - self.expected) <= self.tolerance

    def allocation(self, value: int, kind: TransactionKind | None = None) -> Allocation:
        """관측된 금액으로 Allocation 생성"""
        return Allocation(
            kind=kind or self.kind,
            value=value,
            item_id=self.item_id,
            item_link=self.link,
            quantity=self.quantity,
            source=self.source,
        )

    def allocations(self, value: int) -> tuple[Allocation, ...]:
        """관측된 금액을 기록 항목으로 변환 (split이 없으면 단일 항목)"""
        if self.split is not None:
            return self.split(value)
        return (self.allocation(value),)


class VenueTracker(ABC):
    """장소 Tracker 추상 클래스

    장소별로 상속하여 classify()와 필요한 훅(on_action 등)을 구현.

    클래스 속성:
        venues: 이 Tracker를 여닫는 장소
        action_types: 처리하는 장소별 액션 신호
        windowed: 장소 창이 있는 Tracker (False면 상시 추적, Arbiter 보류 대상 아님)
        tracks_items: 열릴 때 가방 스냅샷을 찍는지 여부
        inventory_scope: 스냅샷 범위
    """

    name: str = "tracker"
    venues: frozenset[Venue] = frozenset()
    action_types: frozenset[str] = frozenset()
    windowed: bool = True
    tracks_items: bool = False
    inventory_scope: InventoryScope = InventoryScope.BAGS
    pending_ttl: float = Timing.PENDING_ACTION_TTL_SEC

    def __init__(self, ctx: TrackerContext):
        self.ctx = ctx
        self.balance = BalanceTracker(ctx.host)
        self.timers = TimerGroup(ctx.defer, owner=self.name)
        self.is_open = False
        self.snapshot: ItemQuantityMap | None = None
        self.pending_action: PendingAction | None = None
        self.source: str | None = None

    # -------------------------------------------------------------------------
    # 라우팅 정보
    # -------------------------------------------------------------------------

    def handles_venue(self, venue: Venue | None) -> bool:
        return venue is not None and venue in self.venues

    @property
    def is_listening(self) -> bool:
        """잔고 변화를 평가할 상태인지 (상시 추적 Tracker는 항상)"""
        return self.is_open or not self.windowed

    # -------------------------------------------------------------------------
    # 생명주기
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """엔진 시작: 상시 추적 Tracker는 여기서 기준 잔고를 잡음"""
        if not self.windowed:
            self.balance.open()

    async def open(self, event: HostEvent) -> None:
        """장소 열림: 기준값 저장"""
        if self.is_open:
            logger.debug(f"{self.name}: 이미 열려 있음, 기준값 재설정")
            self.timers.cancel_all()

        self.is_open = True
        self.pending_action = None
        self.source = event.payload.get("source") or self.default_source()
        self.balance.open()

        if self.tracks_items:
            self.snapshot = take_snapshot(self.ctx.host, self.inventory_scope)
            self.ctx.catalog.prefetch(self.snapshot.keys())

        logger.debug(
            f"{self.name} 열림",
            extra={"baseline": self.balance.baseline, "source": self.source},
        )
        await self.on_open(event)

    async def close(self, event: HostEvent) -> None:
        """장소 닫힘: 타이머 취소 및 상태 폐기"""
        if not self.is_open:
            logger.debug(f"{self.name}: 닫힌 상태에서 닫힘 신호 무시")
            return

        await self.on_close(event)

        self.timers.cancel_all()
        if self.pending_action is not None:
            logger.debug(
                f"{self.name}: 대기 액션 폐기 (장소 닫힘)",
                extra={"kind": self.pending_action.kind.value},
            )
        self.pending_action = None
        self.snapshot = None
        self.balance.close()
        self.is_open = False
        logger.debug(f"{self.name} 닫힘")

    def default_source(self) -> str | None:
        return None

    async def on_open(self, event: HostEvent) -> None:
        """열림 후 훅 (하위 클래스에서 필요 시 오버라이드)"""
        pass

    async def on_close(self, event: HostEvent) -> None:
        """닫힘 전 훅 (타이머/상태 폐기 전에 호출)"""
        pass

    # -------------------------------------------------------------------------
    # 신호 처리
    # -------------------------------------------------------------------------

    async def handle_action(self, event: HostEvent) -> None:
        """장소별 액션 신호"""
        if self.windowed and not self.is_open:
            logger.debug(
                f"{self.name}: 닫힌 상태의 액션 신호 무시",
                extra={"event_type": event.event_type},
            )
            return
        await self.on_action(event)

    async def on_action(self, event: HostEvent) -> None:
        pass

    async def handle_inventory(self, event: HostEvent) -> None:
        """인벤토리 변화 신호"""
        if not self.is_listening:
            return
        await self.on_inventory(event)

    async def on_inventory(self, event: HostEvent) -> None:
        pass

    def rebase(self, balance: int) -> None:
        """변화 없는 잔고 신호: 기준값만 갱신"""
        if self.balance.is_active:
            self.balance.on_balance_changed(balance)

    def evaluate(self, observation: BalanceObservation) -> ClassificationResult:
        """잔고 변화 평가

        자체 BalanceTracker로 변화량을 계산한 뒤 classify()에 위임.
        """
        if not self.balance.is_active:
            return UNATTRIBUTED

        delta = self.balance.on_balance_changed(observation.balance)
        if delta == 0:
            return UNATTRIBUTED

        pending = self.fresh_pending(observation.now)
        return self.classify(delta, observation, pending)

    @abstractmethod
    def classify(
        self,
        delta: int,
        observation: BalanceObservation,
        pending: PendingAction | None,
    ) -> ClassificationResult:
        """장소별 분류 규칙

        Args:
            delta: 이 Tracker 기준 변화량 (0 아님)
            observation: 잔고 관측값
            pending: 유효한 대기 액션 (없으면 None)
        """
        ...

    async def accept(self, result: Confirmed | Inferred) -> list[Transaction]:
        """Dispatcher가 채택한 결과 기록 및 사이클 청구"""
        transactions = await self.ctx.emitter.emit_allocations(result.allocations)
        self.pending_action = None
        self.ctx.arbiter.claim()
        await self.after_accept(result)
        return transactions

    async def after_accept(self, result: Confirmed | Inferred) -> None:
        pass

    # -------------------------------------------------------------------------
    # 대기 액션 / 늦은 청구
    # -------------------------------------------------------------------------

    def fresh_pending(self, now: float) -> PendingAction | None:
        """유효한 대기 액션 (만료됐으면 폐기 후 None)"""
        pending = self.pending_action
        if pending is None:
            return None
        if not pending.is_fresh(now):
            logger.debug(
                f"{self.name}: 만료된 대기 액션 폐기",
                extra={"kind": pending.kind.value, "age": round(now - pending.created_at, 3)},
            )
            self.pending_action = None
            return None
        return pending

    def confirm_pending(self, delta: int, pending: PendingAction | None) -> ClassificationResult:
        """대기 액션과 부호(및 허용 오차)가 맞으면 관측 금액으로 Confirmed"""
        if pending is None or not pending.matches(delta):
            return UNATTRIBUTED
        return Confirmed(pending.allocations(delta), expected=pending.expected)

    async def expect(
        self,
        kind: TransactionKind,
        expected: int | None,
        ttl: float | None = None,
        tolerance: int | None = None,
        direction: int = 0,
        split: Callable[[int], tuple[Allocation, ...]] | None = None,
        **fields: Any,
    ) -> int | None:
        """액션 신호 처리 공통 경로

        이미 관측된 미청구 변화가 있으면 바로 기록/청구 (잔고 신호가 먼저 온 경우).
        없으면 pending_action으로 저장해 다음 잔고 변화를 기다림.

        Args:
            kind: 기록할 거래 유형
            expected: 예고된 변화량 (부호 있음)
            ttl: 유효 시간 (None이면 Tracker 기본값)
            tolerance: 예고 금액과의 허용 차이
            direction: 예고 금액이 없을 때의 기대 부호
            split: 관측 금액 -> 여러 기록 항목
            **fields: item_id, link, quantity, source 및 장소별 추가 데이터

        Returns:
            늦은 청구로 즉시 기록한 금액 (대기 액션으로 저장했으면 None)
        """
        action = PendingAction(
            kind=kind,
            created_at=self.ctx.clock(),
            ttl=self.pending_ttl if ttl is None else ttl,
            expected=expected,
            tolerance=tolerance,
            direction=direction,
            item_id=fields.pop("item_id", None),
            link=fields.pop("link", None),
            quantity=fields.pop("quantity", None),
            source=fields.pop("source", None) or self.source,
            extra=fields,
            split=split,
        )

        claimed = await self.claim_observed(
            action.expected_sign, action.allocations, accepts=action.matches
        )
        if claimed is not None:
            return claimed

        self.pending_action = action
        logger.debug(
            f"{self.name}: 대기 액션 기록 {kind.value}",
            extra={"expected": expected},
        )
        return None

    async def claim_observed(
        self,
        sign: int,
        build: Callable[[int], tuple[Allocation, ...]],
        accepts: Callable[[int], bool] | None = None,
    ) -> int | None:
        """Arbiter가 보유한 미청구 변화를 늦게 청구

        Args:
            sign: 기대 부호
            build: 관측 금액 -> 기록할 Allocation 목록
            accepts: 관측 금액 추가 확인 (허용 오차 등)

        Returns:
            청구한 금액 (청구할 변화가 없으면 None)
        """
        cycle = self.ctx.arbiter.claimable(sign)
        if cycle is None:
            return None
        if accepts is not None and not accepts(cycle.amount):
            return None

        allocations = build(cycle.amount)
        await self.ctx.emitter.emit_allocations(allocations)
        self.ctx.arbiter.claim()
        logger.debug(
            f"{self.name}: 관측된 변화 늦은 청구",
            extra={"cycle": cycle.cycle, "amount": cycle.amount},
        )
        return cycle.amount

    async def emit(self, kind: TransactionKind, value: int, **fields: Any) -> Transaction:
        """잔고와 무관한 기록 (아이템 이동 등)"""
        fields.setdefault("source", self.source)
        return await self.ctx.emitter.emit(kind, value, **fields)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(open={self.is_open})"
