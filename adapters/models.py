"""
어댑터 공통 데이터 모델

호스트(게임 클라이언트) 조회 결과를 표준화한 도메인 모델.
모든 금액은 copper 단위 정수.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class InventorySlot:
    """인벤토리 슬롯 1칸

    Attributes:
        item_id: 아이템 식별자
        quantity: 슬롯 내 수량
        link: 아이템 링크 (표시용, 없을 수 있음)
    """

    item_id: int
    quantity: int
    link: str | None = None


@dataclass(frozen=True)
class ItemMetadata:
    """아이템 메타데이터

    Attributes:
        item_id: 아이템 식별자
        name: 아이템 이름
        vendor_unit_value: 상점 판매가 (개당, copper). 0이면 판매 불가
        class_id: 아이템 분류
        subclass_id: 아이템 세부 분류
    """

    item_id: int
    name: str
    vendor_unit_value: int = 0
    class_id: int = 0
    subclass_id: int = 0

    @property
    def is_sellable(self) -> bool:
        """상점 판매 가능 여부"""
        return self.vendor_unit_value > 0
