"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class Venue(str, Enum):
    """상호작용 장소 (호스트 UI 창 단위)"""

    VENDOR = "VENDOR"
    REPAIR = "REPAIR"
    AUCTION_HOUSE = "AUCTION_HOUSE"
    BLACK_MARKET = "BLACK_MARKET"
    MAILBOX = "MAILBOX"
    TRADE = "TRADE"
    BANK = "BANK"
    GUILD_BANK = "GUILD_BANK"
    WARBAND_BANK = "WARBAND_BANK"
    BARBER = "BARBER"
    TRANSMOG = "TRANSMOG"
    FLIGHT_MASTER = "FLIGHT_MASTER"
    # 창이 없는 상시 추적 대상
    QUEST = "QUEST"
    LOOT = "LOOT"


class InventoryScope(str, Enum):
    """인벤토리 열거 범위"""

    BAGS = "BAGS"
    BANK = "BANK"
    WARBAND_BANK = "WARBAND_BANK"
    GUILD_BANK = "GUILD_BANK"


class ItemDirection(str, Enum):
    """아이템 수량 변화 방향 (가방 기준)"""

    REMOVED = "removed"
    ADDED = "added"


class Confidence(str, Enum):
    """추론 결과 신뢰도"""

    HIGH = "HIGH"      # 단일 아이템
    MEDIUM = "MEDIUM"  # 알려진 가치 비례 분배
    LOW = "LOW"        # 균등 분배 (최후 수단)
