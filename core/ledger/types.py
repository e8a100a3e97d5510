"""
Ledger 타입 정의

TransactionKind, Transaction 레코드, 조회 필터/집계 결과 등
Ledger 시스템에서 사용하는 타입 정의.

부호 규칙:
- 양수: 수입 (캐릭터 지갑으로 들어온 금액)
- 음수: 지출
- 0: 아이템만 이동 (골드 변화 없음)

명명 규칙: "-in"은 항상 캐릭터(가방/지갑) 방향, "-out"은 캐릭터 밖으로.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from core.utils.timezone import now_utc, to_timestamp_ms, utc_from_timestamp_ms


class TransactionValidationError(ValueError):
    """Transaction 불변식 위반 (값 부호, 수량 등)"""

    pass


class TransactionKind(str, Enum):
    """거래 유형

    str을 상속하여 JSON/DB 직렬화 가능.
    """

    # 상점
    SALE = "sale"
    PURCHASE = "purchase"
    BUYBACK = "buyback"

    # 전리품
    LOOT = "loot"
    LOOT_GOLD = "loot-gold"

    # 경매장
    AUCTION_SOLD = "auction-sold"
    AUCTION_BOUGHT = "auction-bought"
    DEPOSIT_FEE = "deposit-fee"
    DEPOSIT_REFUND = "deposit-refund"
    AUCTION_FEE = "auction-fee"

    # 우편
    MAIL_ITEM_IN = "mail-item-in"
    MAIL_ITEM_OUT = "mail-item-out"
    MAIL_GOLD_IN = "mail-gold-in"
    MAIL_GOLD_OUT = "mail-gold-out"
    MAIL_POSTAGE = "mail-postage"

    # 거래창
    TRADE_GOLD_IN = "trade-gold-in"
    TRADE_GOLD_OUT = "trade-gold-out"

    # 은행 (아이템)
    BANK_ITEM_IN = "bank-item-in"
    BANK_ITEM_OUT = "bank-item-out"
    WARBANK_ITEM_IN = "warbank-item-in"
    WARBANK_ITEM_OUT = "warbank-item-out"
    GUILDBANK_ITEM_IN = "guildbank-item-in"
    GUILDBANK_ITEM_OUT = "guildbank-item-out"

    # 은행 (골드)
    WARBANK_GOLD_IN = "warbank-gold-in"
    WARBANK_GOLD_OUT = "warbank-gold-out"
    GUILDBANK_GOLD_IN = "guildbank-gold-in"
    GUILDBANK_GOLD_OUT = "guildbank-gold-out"

    # 서비스 비용
    REPAIR = "repair"
    REPAIR_GUILD = "repair-guild"
    FLIGHT_COST = "flight-cost"
    TRANSMOG_COST = "transmog-cost"
    BARBER_COST = "barber-cost"
    BLACK_MARKET_BID = "black-market-bid"

    # 보상
    QUEST_GOLD = "quest-gold"

    # 미분류 (Arbiter)
    UNCLAIMED_INCOME = "unclaimed-income"
    UNCLAIMED_EXPENSE = "unclaimed-expense"


@dataclass(frozen=True)
class KindInfo:
    """거래 유형 메타데이터

    Attributes:
        label: 표시용 라벨
        sign: 허용 부호 (1: value >= 0, -1: value <= 0, 0: value == 0)
        is_transfer: 본인 자금 이동 여부 (수입/지출 집계 제외)
    """

    label: str
    sign: int
    is_transfer: bool = False

    def accepts(self, value: int) -> bool:
        """값 부호가 유형과 일치하는지 확인"""
        if self.sign > 0:
            return value >= 0
        if self.sign < 0:
            return value <= 0
        return value == 0


_INCOME = 1
_EXPENSE = -1
_NEUTRAL = 0

KIND_INFO: dict[TransactionKind, KindInfo] = {
    TransactionKind.SALE: KindInfo("SOLD", _INCOME),
    TransactionKind.PURCHASE: KindInfo("BOUGHT", _EXPENSE),
    TransactionKind.BUYBACK: KindInfo("BUYBACK", _EXPENSE),
    TransactionKind.LOOT: KindInfo("LOOT", _NEUTRAL),
    TransactionKind.LOOT_GOLD: KindInfo("LOOT GOLD", _INCOME),
    TransactionKind.AUCTION_SOLD: KindInfo("AH SOLD", _INCOME),
    TransactionKind.AUCTION_BOUGHT: KindInfo("AH BOUGHT", _EXPENSE),
    TransactionKind.DEPOSIT_FEE: KindInfo("AH DEPOSIT", _EXPENSE),
    TransactionKind.DEPOSIT_REFUND: KindInfo("AH REFUND", _INCOME),
    TransactionKind.AUCTION_FEE: KindInfo("AH FEE", _EXPENSE),
    TransactionKind.MAIL_ITEM_IN: KindInfo("MAIL IN", _NEUTRAL),
    TransactionKind.MAIL_ITEM_OUT: KindInfo("MAIL OUT", _NEUTRAL),
    TransactionKind.MAIL_GOLD_IN: KindInfo("MAIL GOLD", _INCOME),
    TransactionKind.MAIL_GOLD_OUT: KindInfo("SENT GOLD", _EXPENSE),
    TransactionKind.MAIL_POSTAGE: KindInfo("POSTAGE", _EXPENSE),
    TransactionKind.TRADE_GOLD_IN: KindInfo("TRADE IN", _INCOME),
    TransactionKind.TRADE_GOLD_OUT: KindInfo("TRADE OUT", _EXPENSE),
    TransactionKind.BANK_ITEM_IN: KindInfo("BANK WITHDRAW", _NEUTRAL),
    TransactionKind.BANK_ITEM_OUT: KindInfo("BANK DEPOSIT", _NEUTRAL),
    TransactionKind.WARBANK_ITEM_IN: KindInfo("WARBANK WITHDRAW", _NEUTRAL),
    TransactionKind.WARBANK_ITEM_OUT: KindInfo("WARBANK DEPOSIT", _NEUTRAL),
    TransactionKind.GUILDBANK_ITEM_IN: KindInfo("GBANK WITHDRAW", _NEUTRAL),
    TransactionKind.GUILDBANK_ITEM_OUT: KindInfo("GBANK DEPOSIT", _NEUTRAL),
    TransactionKind.WARBANK_GOLD_IN: KindInfo("TRANSFER IN", _INCOME, is_transfer=True),
    TransactionKind.WARBANK_GOLD_OUT: KindInfo("TRANSFER OUT", _EXPENSE, is_transfer=True),
    TransactionKind.GUILDBANK_GOLD_IN: KindInfo("GBANK WITHDRAW", _INCOME),
    TransactionKind.GUILDBANK_GOLD_OUT: KindInfo("GBANK DEPOSIT", _EXPENSE),
    TransactionKind.REPAIR: KindInfo("REPAIR", _EXPENSE),
    TransactionKind.REPAIR_GUILD: KindInfo("REPAIR(G)", _NEUTRAL),
    TransactionKind.FLIGHT_COST: KindInfo("FLIGHT", _EXPENSE),
    TransactionKind.TRANSMOG_COST: KindInfo("TRANSMOG", _EXPENSE),
    TransactionKind.BARBER_COST: KindInfo("BARBER", _EXPENSE),
    TransactionKind.BLACK_MARKET_BID: KindInfo("BMAH", _EXPENSE),
    TransactionKind.QUEST_GOLD: KindInfo("QUEST", _INCOME),
    TransactionKind.UNCLAIMED_INCOME: KindInfo("OTHER IN", _INCOME),
    TransactionKind.UNCLAIMED_EXPENSE: KindInfo("OTHER OUT", _EXPENSE),
}

# 본인 자금 이동 (수입/지출 집계 제외)
TRANSFER_KINDS: frozenset[TransactionKind] = frozenset(
    kind for kind, info in KIND_INFO.items() if info.is_transfer
)

# 유형 필터 프리셋 (label, kinds). kinds가 None이면 전체
TYPE_PRESETS: list[tuple[str, frozenset[TransactionKind] | None]] = [
    ("All Types", None),
    ("Vendor", frozenset({
        TransactionKind.SALE, TransactionKind.BUYBACK, TransactionKind.PURCHASE,
    })),
    ("Auction House", frozenset({
        TransactionKind.AUCTION_SOLD, TransactionKind.AUCTION_BOUGHT,
        TransactionKind.DEPOSIT_FEE, TransactionKind.DEPOSIT_REFUND,
        TransactionKind.AUCTION_FEE,
    })),
    ("Black Market AH", frozenset({TransactionKind.BLACK_MARKET_BID})),
    ("Mail", frozenset({
        TransactionKind.MAIL_ITEM_IN, TransactionKind.MAIL_ITEM_OUT,
        TransactionKind.MAIL_GOLD_IN, TransactionKind.MAIL_GOLD_OUT,
        TransactionKind.MAIL_POSTAGE,
    })),
    ("Trade", frozenset({TransactionKind.TRADE_GOLD_IN, TransactionKind.TRADE_GOLD_OUT})),
    ("Loot", frozenset({TransactionKind.LOOT, TransactionKind.LOOT_GOLD})),
    ("Quest", frozenset({TransactionKind.QUEST_GOLD})),
    ("Repair", frozenset({TransactionKind.REPAIR, TransactionKind.REPAIR_GUILD})),
    ("Travel", frozenset({TransactionKind.FLIGHT_COST})),
    ("Cosmetic", frozenset({TransactionKind.TRANSMOG_COST, TransactionKind.BARBER_COST})),
    ("Bank", frozenset({
        TransactionKind.BANK_ITEM_IN, TransactionKind.BANK_ITEM_OUT,
        TransactionKind.WARBANK_ITEM_IN, TransactionKind.WARBANK_ITEM_OUT,
        TransactionKind.WARBANK_GOLD_IN, TransactionKind.WARBANK_GOLD_OUT,
        TransactionKind.GUILDBANK_GOLD_IN, TransactionKind.GUILDBANK_GOLD_OUT,
        TransactionKind.GUILDBANK_ITEM_IN, TransactionKind.GUILDBANK_ITEM_OUT,
    })),
    ("Other/Unknown", frozenset({
        TransactionKind.UNCLAIMED_INCOME, TransactionKind.UNCLAIMED_EXPENSE,
    })),
]


def get_kind_info(kind: TransactionKind | str) -> KindInfo:
    """유형 메타데이터 조회

    Args:
        kind: 거래 유형 (문자열 허용)

    Returns:
        KindInfo

    Raises:
        ValueError: 알 수 없는 유형
    """
    return KIND_INFO[TransactionKind(kind)]


@dataclass(frozen=True)
class Transaction:
    """Ledger 거래 레코드 (불변)

    저장 후에도 수정하지 않음. 정정은 새 레코드 추가로 처리.

    Attributes:
        kind: 거래 유형
        character_key: 캐릭터 키 ("Name-Realm")
        value: 금액 (copper, 부호 있음)
        timestamp: 발생 시간 (UTC)
        item_id: 아이템 ID (아이템 거래만)
        item_link: 아이템 링크
        quantity: 수량
        source: 거래 장소/상대방
        seq: 저장 순서 (저장 전 None)
    """

    kind: TransactionKind
    character_key: str
    value: int
    timestamp: datetime = field(default_factory=now_utc)
    item_id: int | None = None
    item_link: str | None = None
    quantity: int | None = None
    source: str | None = None
    seq: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, TransactionKind):
            object.__setattr__(self, "kind", TransactionKind(self.kind))

        if not self.character_key:
            raise TransactionValidationError("character_key가 비어 있습니다")

        info = KIND_INFO[self.kind]
        if not info.accepts(self.value):
            raise TransactionValidationError(
                f"{self.kind.value} 유형에 맞지 않는 금액 부호: {self.value}"
            )

        if self.quantity is not None and self.quantity <= 0:
            raise TransactionValidationError(f"수량은 양수여야 합니다: {self.quantity}")

        if self.timestamp.tzinfo is None:
            object.__setattr__(
                self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc)
            )

    @property
    def label(self) -> str:
        """표시용 라벨"""
        return KIND_INFO[self.kind].label

    @property
    def is_transfer(self) -> bool:
        """본인 자금 이동 여부"""
        return KIND_INFO[self.kind].is_transfer

    @property
    def is_unclaimed(self) -> bool:
        """Arbiter가 생성한 미분류 거래 여부"""
        return self.kind in (
            TransactionKind.UNCLAIMED_INCOME,
            TransactionKind.UNCLAIMED_EXPENSE,
        )

    def with_seq(self, seq: int) -> "Transaction":
        """저장 순서가 할당된 사본 반환"""
        return replace(self, seq=seq)

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환 (JSON 직렬화용)"""
        return {
            "seq": self.seq,
            "kind": self.kind.value,
            "label": self.label,
            "character_key": self.character_key,
            "value": self.value,
            "timestamp": self.timestamp.isoformat(),
            "ts_ms": to_timestamp_ms(self.timestamp),
            "item_id": self.item_id,
            "item_link": self.item_link,
            "quantity": self.quantity,
            "source": self.source,
        }

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> "Transaction":
        """DB 행에서 생성

        행 순서: seq, ts_ms, kind, character_key, value,
                 item_id, item_link, quantity, source
        """
        return cls(
            seq=row[0],
            timestamp=utc_from_timestamp_ms(row[1]),
            kind=TransactionKind(row[2]),
            character_key=row[3],
            value=row[4],
            item_id=row[5],
            item_link=row[6],
            quantity=row[7],
            source=row[8],
        )


@dataclass(frozen=True)
class LedgerFilter:
    """Ledger 조회 필터

    Attributes:
        since: 시작 시간 (포함)
        until: 종료 시간 (포함)
        character_key: 캐릭터 키
        kinds: 유형 집합 (None이면 전체)
        search: 아이템 링크/출처 검색어 (대소문자 무시)
        limit: 최대 개수 (0이면 무제한)
        offset: 건너뛸 개수
    """

    since: datetime | None = None
    until: datetime | None = None
    character_key: str | None = None
    kinds: frozenset[TransactionKind] | None = None
    search: str | None = None
    limit: int = 0
    offset: int = 0


@dataclass
class LedgerSummary:
    """Ledger 집계 결과

    이체 유형(TRANSFER_KINDS)은 수입/지출에서 제외하고 별도 집계.
    """

    total_income: int = 0
    total_expense: int = 0
    transfers_in: int = 0
    transfers_out: int = 0
    count: int = 0
    counts_by_kind: dict[str, int] = field(default_factory=dict)

    @property
    def net(self) -> int:
        """순수익 (수입 - 지출)"""
        return self.total_income - self.total_expense

    def add(self, transaction: Transaction) -> None:
        """거래 1건 누적"""
        value = transaction.value
        kind = transaction.kind.value
        self.counts_by_kind[kind] = self.counts_by_kind.get(kind, 0) + 1
        self.count += 1

        if transaction.is_transfer:
            if value > 0:
                self.transfers_in += value
            else:
                self.transfers_out += abs(value)
        elif value > 0:
            self.total_income += value
        else:
            self.total_expense += abs(value)

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환"""
        return {
            "total_income": self.total_income,
            "total_expense": self.total_expense,
            "transfers_in": self.transfers_in,
            "transfers_out": self.transfers_out,
            "net": self.net,
            "count": self.count,
            "counts_by_kind": dict(self.counts_by_kind),
        }
