"""
Mock 게임 호스트

테스트용 IGameHost 구현.
잔고/인벤토리/아이템 메타데이터를 직접 설정하고 조회 기록을 검증.
"""

from collections import Counter

from adapters.models import InventorySlot, ItemMetadata
from core.types import InventoryScope


class MockGameHost:
    """Mock 게임 호스트

    IGameHost Protocol 구현.

    사용 예시:
    ```python
    host = MockGameHost(balance=1000)
    host.set_inventory(InventoryScope.BAGS, [InventorySlot(item_id=101, quantity=1)])
    host.add_item_metadata(ItemMetadata(item_id=101, name="Linen Cloth", vendor_unit_value=300))

    # 두 번 "미준비" 응답 후 메타데이터 반환
    host.set_pending(101, 2)

    host.balance = 1300
    ```
    """

    def __init__(self, balance: int = 0):
        self.balance = balance
        self._inventory: dict[InventoryScope, list[InventorySlot]] = {}
        self._metadata: dict[int, ItemMetadata] = {}
        self._pending_answers: dict[int, int] = {}

        # 조회 기록
        self.balance_reads = 0
        self.metadata_lookups: Counter[int] = Counter()

    # -------------------------------------------------------------------------
    # IGameHost
    # -------------------------------------------------------------------------

    def get_balance(self) -> int:
        self.balance_reads += 1
        return self.balance

    def enumerate_inventory(self, scope: InventoryScope) -> list[InventorySlot]:
        return list(self._inventory.get(scope, []))

    def lookup_item_metadata(self, item_id: int) -> ItemMetadata | None:
        self.metadata_lookups[item_id] += 1

        remaining = self._pending_answers.get(item_id, 0)
        if remaining > 0:
            self._pending_answers[item_id] = remaining - 1
            return None

        # 등록되지 않은 아이템은 계속 미준비
        return self._metadata.get(item_id)

    # -------------------------------------------------------------------------
    # 테스트 설정
    # -------------------------------------------------------------------------

    def set_inventory(self, scope: InventoryScope, slots: list[InventorySlot]) -> None:
        """범위 전체 슬롯 교체"""
        self._inventory[scope] = list(slots)

    def set_bags(self, items: dict[int, int]) -> None:
        """가방을 {item_id: quantity}로 교체 (아이템당 1슬롯)"""
        self.set_inventory(
            InventoryScope.BAGS,
            [
                InventorySlot(item_id=item_id, quantity=quantity, link=f"[item:{item_id}]")
                for item_id, quantity in items.items()
                if quantity > 0
            ],
        )

    def add_item_metadata(self, metadata: ItemMetadata) -> None:
        """아이템 메타데이터 등록"""
        self._metadata[metadata.item_id] = metadata

    def set_pending(self, item_id: int, answers: int) -> None:
        """다음 answers회 조회는 None(미준비) 반환"""
        self._pending_answers[item_id] = answers
