"""
Unclaimed-Change Arbiter

어떤 Tracker도 설명하지 못한 잔고 변화를 일정 시간 후 미분류 거래
(unclaimed-income / unclaimed-expense, source="Unknown")로 기록하는 최종 안전망.

사이클 프로토콜:
1. begin_cycle(): 잔고 변화마다 새 PendingAttribution 생성 (claimed=False)
2. claim(): Tracker가 변화를 기록했음을 알림 (타임아웃 전이면 언제든)
3. resolve(): 타임아웃 시 claimed면 폐기, 너무 오래됐으면 폐기, 아니면 미분류 기록

장소가 열려 있는 동안의 변화는 타이머 없이 보류(deferred)하고,
청구되지 않은 금액은 마지막 장소가 닫힐 때 타이머 경로로 넘김.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from adapters.interfaces import IGameHost
from core.config.loader import ArbiterConfig
from core.constants import Defaults
from core.ledger.types import Transaction, TransactionKind
from core.utils.money import format_money
from engine.emitter import TransactionEmitter
from engine.scheduler import TimerCallback, TimerHandle

logger = logging.getLogger(__name__)


@dataclass
class PendingAttribution:
    """청구 대기 중인 잔고 변화

    Attributes:
        amount: 변화량 (부호 있음)
        observed_at: 관측 시각 (스케줄러 시계)
        cycle: 사이클 번호
        deferred: 장소가 열려 있어 타이머 없이 보류 중
        claimed: Tracker가 청구함
    """

    amount: int
    observed_at: float
    cycle: int
    deferred: bool = False
    claimed: bool = False
    handle: TimerHandle | None = field(default=None, repr=False)

    def age(self, now: float) -> float:
        return now - self.observed_at

    @property
    def sign(self) -> int:
        return 1 if self.amount > 0 else -1


@dataclass
class ArbiterStats:
    """Arbiter 통계"""

    cycles: int = 0
    claimed: int = 0
    promoted: int = 0
    stale_dropped: int = 0
    dropped: int = 0  # 미분류 기록 비활성화로 버린 건수
    released: int = 0  # 장소 종료 시 타이머 경로로 넘긴 건수

    def to_dict(self) -> dict[str, int]:
        return {
            "cycles": self.cycles,
            "claimed": self.claimed,
            "promoted": self.promoted,
            "stale_dropped": self.stale_dropped,
            "dropped": self.dropped,
            "released": self.released,
        }


class Arbiter:
    """미분류 잔고 변화 중재자

    Args:
        host: 게임 호스트 (시작 잔고 조회)
        emitter: Transaction 기록기
        schedule: 지연 콜백 예약 함수 (delay, callback, label)
        clock: 스케줄러 시계
        config: 타임아웃/만료/최소 변화량 설정
        record_unclaimed: False면 미분류 변화를 기록하지 않고 로그만 남김

    사용 예시:
    ```python
    arbiter = Arbiter(host, emitter, dispatcher.defer, scheduler.now, ArbiterConfig())
    arbiter.start()

    cycle = await arbiter.observe(host.get_balance(), deferred=False)
    ...
    arbiter.claim()  # Tracker가 기록한 경우
    ```
    """

    def __init__(
        self,
        host: IGameHost,
        emitter: TransactionEmitter,
        schedule: Callable[[float, TimerCallback, str], TimerHandle],
        clock: Callable[[], float],
        config: ArbiterConfig | None = None,
        record_unclaimed: bool = True,
    ):
        self.host = host
        self.emitter = emitter
        self.config = config or ArbiterConfig()
        self.record_unclaimed = record_unclaimed
        self._schedule = schedule
        self._clock = clock

        self._baseline: int | None = None
        self._pending: PendingAttribution | None = None
        self._carried = 0
        self._cycle_no = 0
        self.stats = ArbiterStats()

    # -------------------------------------------------------------------------
    # 상태
    # -------------------------------------------------------------------------

    @property
    def baseline(self) -> int | None:
        return self._baseline

    @property
    def pending(self) -> PendingAttribution | None:
        """진행 중인 사이클 (청구된 사이클 포함)"""
        return self._pending

    @property
    def carried(self) -> int:
        """보류 후 청구되지 않아 넘겨받을 금액"""
        return self._carried

    @property
    def outstanding(self) -> int:
        """아직 기록/폐기되지 않은 금액 합계"""
        amount = self._carried
        if self._pending is not None and not self._pending.claimed:
            amount += self._pending.amount
        return amount

    def start(self, balance: int | None = None) -> int:
        """기준 잔고 설정"""
        self._baseline = self.host.get_balance() if balance is None else balance
        return self._baseline

    # -------------------------------------------------------------------------
    # 사이클
    # -------------------------------------------------------------------------

    async def observe(self, balance: int, deferred: bool) -> PendingAttribution | None:
        """잔고 변화 신호 처리

        Args:
            balance: 현재 잔고
            deferred: 장소가 열려 있으면 True (타이머 없이 보류)

        Returns:
            새 사이클 (변화량이 최소값 미만이면 None)
        """
        if self._baseline is None:
            self._baseline = balance
            return None

        delta = balance - self._baseline
        self._baseline = balance

        if abs(delta) < self.config.min_change:
            if delta:
                logger.debug(f"최소 변화량 미만 무시: {delta}")
            return None

        return await self.begin_cycle(delta, deferred)

    async def begin_cycle(self, amount: int, deferred: bool = False) -> PendingAttribution:
        """새 사이클 시작

        이전 사이클이 남아 있으면 먼저 정리 (덮어쓰지 않음).
        보류 사이클이 시작되면 타이머가 돌던 미청구 사이클도 보류 금액으로 이월.
        """
        await self._supersede(deferred)

        self._cycle_no += 1
        self.stats.cycles += 1
        pending = PendingAttribution(
            amount=amount,
            observed_at=self._clock(),
            cycle=self._cycle_no,
            deferred=deferred,
        )

        if not deferred:
            pending.handle = self._schedule(
                self.config.claim_timeout_sec,
                lambda: self._on_timeout(pending),
                f"arbiter:cycle-{pending.cycle}",
            )

        self._pending = pending
        logger.debug(
            f"사이클 시작: {format_money(amount, signed=True)}",
            extra={"cycle": pending.cycle, "deferred": deferred},
        )
        return pending

    def claim(self) -> bool:
        """진행 중인 사이클 청구

        Returns:
            청구 성공 여부 (사이클이 없거나 이미 청구됨이면 False)
        """
        pending = self._pending
        if pending is None or pending.claimed:
            return False

        pending.claimed = True
        self.stats.claimed += 1
        logger.debug("사이클 청구됨", extra={"cycle": pending.cycle})
        return True

    def claim_amount(self, amount: int, now: float | None = None) -> bool:
        """특정 금액 청구 (진행 중 사이클 또는 이월 금액)

        진행 중 사이클과 금액이 다르면 부호가 같은 이월 금액에서 차감.

        Returns:
            청구 성공 여부
        """
        pending = self.claimable(amount, now)
        if pending is not None and pending.amount == amount:
            return self.claim()

        carried = self._carried
        if carried and (carried > 0) == (amount > 0) and abs(carried) >= abs(amount):
            self._carried -= amount
            self.stats.claimed += 1
            logger.debug(
                f"이월 금액 청구: {format_money(amount, signed=True)}",
                extra={"carried": self._carried},
            )
            return True
        return False

    def claimable(self, sign: int = 0, now: float | None = None) -> PendingAttribution | None:
        """늦게 도착한 액션 신호가 청구할 수 있는 사이클

        Args:
            sign: 기대 부호 (0이면 부호 무관)
            now: 기준 시각

        Returns:
            청구되지 않았고, 만료되지 않았고, 부호가 맞는 사이클 또는 None
        """
        pending = self._pending
        if pending is None or pending.claimed:
            return None
        if sign and pending.sign != (1 if sign > 0 else -1):
            return None

        now = self._clock() if now is None else now
        if pending.age(now) > self.config.stale_after_sec:
            return None
        return pending

    async def resolve(self, pending: PendingAttribution) -> Transaction | None:
        """사이클 판정

        Returns:
            기록된 미분류 Transaction (폐기된 경우 None)
        """
        if self._pending is pending:
            self._pending = None

        if pending.claimed:
            return None

        age = pending.age(self._clock())
        if age > self.config.stale_after_sec:
            self.stats.stale_dropped += 1
            logger.warning(
                f"만료된 잔고 변화 폐기: {format_money(pending.amount, signed=True)}",
                extra={"cycle": pending.cycle, "age_sec": round(age, 3)},
            )
            return None

        return await self._promote(pending.amount, pending.cycle)

    async def _on_timeout(self, pending: PendingAttribution) -> None:
        if self._pending is not pending:
            # 이미 다른 경로로 정리됨
            return
        await self.resolve(pending)

    async def _supersede(self, deferred: bool) -> None:
        old = self._pending
        self._pending = None
        if old is None:
            return

        if old.handle is not None:
            old.handle.cancel()

        if old.claimed:
            return

        if old.deferred or deferred:
            self._carried += old.amount
            logger.debug(
                f"보류 금액 이월: {format_money(old.amount, signed=True)}",
                extra={"cycle": old.cycle, "carried": self._carried},
            )
        else:
            await self._promote(old.amount, old.cycle)

    async def release_deferred(self) -> PendingAttribution | None:
        """보류 금액을 타이머 경로로 전환 (마지막 장소가 닫힐 때)

        Returns:
            새 사이클 (넘길 금액이 없으면 None)
        """
        amount = self._carried
        self._carried = 0

        pending = self._pending
        if pending is not None and pending.deferred:
            self._pending = None
            if not pending.claimed:
                amount += pending.amount

        if abs(amount) < self.config.min_change:
            return None

        self.stats.released += 1
        logger.debug(f"보류 금액 전환: {format_money(amount, signed=True)}")
        return await self.begin_cycle(amount, deferred=False)

    async def flush(self) -> Transaction | None:
        """종료 시 남은 금액 즉시 판정"""
        pending = self._pending
        self._pending = None
        amount = self._carried
        self._carried = 0

        if pending is not None:
            if pending.handle is not None:
                pending.handle.cancel()
            if not pending.claimed:
                amount += pending.amount

        if abs(amount) < self.config.min_change:
            return None
        return await self._promote(amount, self._cycle_no)

    async def _promote(self, amount: int, cycle: int) -> Transaction | None:
        if not self.record_unclaimed:
            self.stats.dropped += 1
            logger.info(
                f"미분류 변화 기록 생략: {format_money(amount, signed=True)}",
                extra={"cycle": cycle},
            )
            return None

        kind = TransactionKind.UNCLAIMED_INCOME if amount > 0 else TransactionKind.UNCLAIMED_EXPENSE
        self.stats.promoted += 1
        return await self.emitter.emit(kind, amount, source=Defaults.UNKNOWN_SOURCE)

    def get_stats(self) -> dict[str, Any]:
        return {
            **self.stats.to_dict(),
            "carried": self._carried,
            "pending": self._pending.amount if self._pending else None,
        }
