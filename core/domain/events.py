"""
Host Event 도메인 모델

호스트(게임 클라이언트)가 전달하는 신호를 표준화한 불변 이벤트.
잔고/인벤토리 값 자체는 이벤트에 싣지 않고 IGameHost에서 조회.
"""

from dataclasses import dataclass, field
from typing import Any

from core.types import InventoryScope, Venue


@dataclass(frozen=True)
class HostEvent:
    """호스트 이벤트

    Attributes:
        event_type: 이벤트 타입 (HostEventTypes 상수)
        venue: 관련 장소 (없으면 None)
        payload: 이벤트 상세 데이터
        received_at: 수신 시각 (스케줄러 단조 시계, 초)
    """

    event_type: str
    venue: Venue | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    received_at: float = 0.0

    def __post_init__(self) -> None:
        if not HostEventTypes.is_valid_type(self.event_type):
            raise ValueError(f"알 수 없는 이벤트 타입: {self.event_type}")
        if self.venue is not None and not isinstance(self.venue, Venue):
            object.__setattr__(self, "venue", Venue(self.venue))

    @staticmethod
    def create(
        event_type: str,
        venue: Venue | str | None = None,
        received_at: float = 0.0,
        **payload: Any,
    ) -> "HostEvent":
        """새 이벤트 생성

        Args:
            event_type: 이벤트 타입
            venue: 관련 장소
            received_at: 수신 시각
            **payload: 이벤트 상세 데이터

        Returns:
            HostEvent 인스턴스
        """
        return HostEvent(
            event_type=event_type,
            venue=Venue(venue) if venue is not None else None,
            payload=dict(payload),
            received_at=received_at,
        )

    def stamped(self, received_at: float) -> "HostEvent":
        """수신 시각이 채워진 사본"""
        return HostEvent(
            event_type=self.event_type,
            venue=self.venue,
            payload=self.payload,
            received_at=received_at,
        )

    @property
    def scope(self) -> InventoryScope:
        """INVENTORY_CHANGED의 인벤토리 범위 (기본: 가방)"""
        return InventoryScope(self.payload.get("scope", InventoryScope.BAGS.value))

    def get_int(self, key: str, default: int = 0) -> int:
        """payload 정수 필드 조회 (없거나 None이면 default)"""
        value = self.payload.get(key)
        if value is None:
            return default
        return int(value)

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환 (직렬화용)"""
        return {
            "event_type": self.event_type,
            "venue": self.venue.value if self.venue else None,
            "payload": self.payload,
            "received_at": self.received_at,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "HostEvent":
        """딕셔너리에서 생성 (역직렬화용)"""
        return HostEvent.create(
            data["event_type"],
            venue=data.get("venue"),
            received_at=float(data.get("received_at", 0.0)),
            **(data.get("payload") or {}),
        )


class HostEventTypes:
    """Host Event Type 상수"""

    # 공통 신호
    VENUE_OPENED: str = "VenueOpened"
    VENUE_CLOSED: str = "VenueClosed"
    BALANCE_CHANGED: str = "BalanceChanged"
    INVENTORY_CHANGED: str = "InventoryChanged"  # payload: scope

    # 상점
    VENDOR_ITEM_PURCHASED: str = "VendorItemPurchased"  # item_id, link, quantity, cost
    VENDOR_BUYBACK: str = "VendorBuyback"  # item_id, link, quantity, cost

    # 수리
    REPAIR_REQUESTED: str = "RepairRequested"  # cost, use_guild_funds

    # 경매장
    AUCTION_ITEM_POSTED: str = "AuctionItemPosted"  # item_id, link, quantity, deposit
    AUCTION_BID_PLACED: str = "AuctionBidPlaced"  # item_id, link, quantity, amount
    AUCTION_COMMODITY_PURCHASED: str = "AuctionCommodityPurchased"  # item_id, link, quantity, unit_price
    AUCTION_CANCELLED: str = "AuctionCancelled"  # item_id, link, quantity, cost
    AUCTION_EXPIRED: str = "AuctionExpired"  # item_id, link, quantity, deposit
    AUCTION_SOLD: str = "AuctionSold"  # item_id, link, quantity, amount (대금은 우편으로 도착)

    # 암시장
    BLACK_MARKET_BID_PLACED: str = "BlackMarketBidPlaced"  # item_id, link, amount

    # 우편
    MAIL_SENT: str = "MailSent"  # recipient, money, items[]
    MAIL_MONEY_TAKEN: str = "MailMoneyTaken"  # sender, amount, invoice
    MAIL_ITEM_TAKEN: str = "MailItemTaken"  # sender, item_id, link, quantity, cod

    # 거래창
    TRADE_MONEY_CHANGED: str = "TradeMoneyChanged"  # player_money, target_money, target
    TRADE_COMPLETED: str = "TradeCompleted"  # target

    # 은행 (은행 자체 잔고 변화)
    GUILD_BANK_MONEY_CHANGED: str = "GuildBankMoneyChanged"  # balance 또는 delta
    WARBAND_MONEY_CHANGED: str = "WarbandMoneyChanged"  # balance 또는 delta

    # 서비스
    FLIGHT_TAKEN: str = "FlightTaken"  # destination, cost

    # 보상
    QUEST_TURNED_IN: str = "QuestTurnedIn"  # quest_id, title, money
    LOOT_RECEIVED: str = "LootReceived"  # item_id, link, quantity, source
    LOOT_MONEY: str = "LootMoney"  # amount 또는 message, source

    @classmethod
    def all_types(cls) -> list[str]:
        """모든 이벤트 타입 목록 반환"""
        return [
            value
            for name, value in vars(cls).items()
            if not name.startswith("_") and isinstance(value, str) and name.isupper()
        ]

    @classmethod
    def is_valid_type(cls, event_type: str) -> bool:
        """유효한 이벤트 타입인지 확인"""
        return event_type in cls.all_types()
