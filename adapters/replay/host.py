"""
Replay 게임 호스트

기록된 세션의 상태 블록을 적용받아 IGameHost 조회에 응답.
"""

from adapters.models import InventorySlot, ItemMetadata
from adapters.replay.session import HostState
from core.types import InventoryScope


class ReplayHost:
    """세션 재생용 IGameHost 구현

    Args:
        balance: 시작 소지금
        catalog: 아이템 메타데이터 (없는 아이템은 항상 미준비)
    """

    def __init__(
        self,
        balance: int = 0,
        catalog: dict[int, ItemMetadata] | None = None,
    ):
        self._balance = balance
        self._catalog = dict(catalog or {})
        self._inventory: dict[InventoryScope, tuple[InventorySlot, ...]] = {}

    def apply(self, state: HostState | None) -> None:
        """상태 블록 반영"""
        if state is None:
            return
        if state.balance is not None:
            self._balance = state.balance
        if state.inventory:
            self._inventory.update(state.inventory)

    def get_balance(self) -> int:
        return self._balance

    def enumerate_inventory(self, scope: InventoryScope) -> list[InventorySlot]:
        return list(self._inventory.get(scope, ()))

    def lookup_item_metadata(self, item_id: int) -> ItemMetadata | None:
        return self._catalog.get(item_id)
