"""
분류 결과 타입

Tracker의 평가 함수는 잔고 변화 1건에 대해 아래 중 하나를 반환:

- Confirmed: 액션 신호로 확인된 분류 (높은 신뢰도)
- Inferred: 가방 비교 등으로 추론한 분류 (신뢰도 포함)
- Unattributed: 설명 불가 (Arbiter에 위임)

Dispatcher는 Confirmed > Inferred 우선순위로 하나만 채택.
"""

from dataclasses import dataclass
from typing import Union

from core.ledger.types import TransactionKind
from core.types import Confidence


@dataclass(frozen=True)
class Allocation:
    """Transaction 1건으로 기록될 분배 항목"""

    kind: TransactionKind
    value: int
    item_id: int | None = None
    item_link: str | None = None
    quantity: int | None = None
    source: str | None = None


@dataclass(frozen=True)
class Confirmed:
    """액션 신호로 확인된 분류

    Attributes:
        allocations: 기록할 항목 (합계 = 관측된 변화량)
        expected: 액션이 예고한 금액 (동률 판정용, 기록에는 사용 안 함)
    """

    allocations: tuple[Allocation, ...]
    expected: int | None = None

    @property
    def amount(self) -> int:
        return sum(a.value for a in self.allocations)


@dataclass(frozen=True)
class Inferred:
    """추론된 분류"""

    allocations: tuple[Allocation, ...]
    confidence: Confidence = Confidence.MEDIUM
    expected: int | None = None

    @property
    def amount(self) -> int:
        return sum(a.value for a in self.allocations)


@dataclass(frozen=True)
class Unattributed:
    """설명 불가 (Arbiter에 위임)"""

    reason: str = ""


ClassificationResult = Union[Confirmed, Inferred, Unattributed]

UNATTRIBUTED = Unattributed()


def confirmed(kind: TransactionKind, value: int, expected: int | None = None, **fields) -> Confirmed:
    """단일 항목 Confirmed 생성"""
    return Confirmed((Allocation(kind, value, **fields),), expected=expected)


def rank(result: ClassificationResult) -> int:
    """우선순위 (높을수록 우선)"""
    if isinstance(result, Confirmed):
        return 2
    if isinstance(result, Inferred):
        return 1
    return 0


def closeness(result: ClassificationResult, delta: int) -> float:
    """예고 금액과 관측 변화량의 차이 (예고 없으면 무한대)"""
    expected = getattr(result, "expected", None)
    if expected is None:
        return float("inf")
    return float(abs(expected - delta))


# -----------------------------------------------------------------------------
# 금액 분배 (합계 보존)
# -----------------------------------------------------------------------------


def split_evenly(total: int, count: int) -> list[int]:
    """total을 count개로 균등 분배 (합계 = total)

    나머지는 앞쪽부터 1씩 배분. 음수 total은 절대값으로 분배 후 부호 복원.
    """
    if count <= 0:
        raise ValueError(f"분배 대상이 없습니다: {count}")

    sign = -1 if total < 0 else 1
    base, remainder = divmod(abs(total), count)
    return [sign * (base + (1 if i < remainder else 0)) for i in range(count)]


def split_proportionally(total: int, weights: list[int]) -> list[int]:
    """가중치 비례 분배 (합계 = total)

    버림 후 남은 금액은 버림된 소수부가 큰 순서(동률이면 앞쪽)로 1씩 배분.
    가중치 합이 0이면 균등 분배.
    """
    if not weights:
        raise ValueError("분배 대상이 없습니다")
    if any(w < 0 for w in weights):
        raise ValueError(f"가중치는 음수일 수 없습니다: {weights}")

    weight_sum = sum(weights)
    if weight_sum == 0:
        return split_evenly(total, len(weights))

    sign = -1 if total < 0 else 1
    amount = abs(total)

    shares = [amount * w // weight_sum for w in weights]
    remainder = amount - sum(shares)
    order = sorted(
        range(len(weights)),
        key=lambda i: (-(amount * weights[i] % weight_sum), i),
    )
    for i in order[:remainder]:
        shares[i] += 1

    return [sign * share for share in shares]
