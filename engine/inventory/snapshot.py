"""
Bag Snapshot / Differ

인벤토리 슬롯을 아이템별 수량 맵으로 집계하고,
두 맵을 비교하여 추가/제거된 수량을 계산하는 순수 함수 모음.

슬롯 위치는 비교에 사용하지 않음. 같은 슬롯의 아이템이 바뀐 경우
"이전 아이템 제거 + 새 아이템 추가"로 나타남.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping

from adapters.interfaces import IGameHost
from adapters.models import InventorySlot
from core.types import InventoryScope, ItemDirection


class SnapshotInvariantError(AssertionError):
    """스냅샷/차이 불변식 위반 (음수 수량 등)

    정상 동작에서는 발생하지 않는 프로그래밍 오류로, 삼키지 않고 전파.
    """

    pass


@dataclass(frozen=True)
class ItemStack:
    """아이템별 합계 수량과 대표 링크"""

    quantity: int
    link: str | None = None


ItemQuantityMap = Mapping[int, ItemStack]


@dataclass(frozen=True)
class ItemDelta:
    """아이템 수량 변화 1건

    Attributes:
        item_id: 아이템 식별자
        link: 대표 링크 (제거는 이전 스냅샷, 추가는 이후 스냅샷 기준)
        quantity: 변화 수량 (항상 양수)
        direction: removed / added
    """

    item_id: int
    link: str | None
    quantity: int
    direction: ItemDirection

    @property
    def signed_quantity(self) -> int:
        """가방 기준 부호 있는 수량 (추가 +, 제거 -)"""
        return self.quantity if self.direction == ItemDirection.ADDED else -self.quantity


def build_snapshot(slots: Iterable[InventorySlot]) -> dict[int, ItemStack]:
    """슬롯 목록을 아이템별 수량 맵으로 집계

    빈 슬롯(수량 0)은 무시. 대표 링크는 처음 발견한 링크.

    Raises:
        SnapshotInvariantError: 음수 수량 슬롯
    """
    totals: dict[int, int] = {}
    links: dict[int, str | None] = {}

    for slot in slots:
        if slot.quantity < 0:
            raise SnapshotInvariantError(
                f"음수 수량 슬롯: item={slot.item_id} quantity={slot.quantity}"
            )
        if slot.quantity == 0:
            continue
        totals[slot.item_id] = totals.get(slot.item_id, 0) + slot.quantity
        if links.get(slot.item_id) is None:
            links[slot.item_id] = slot.link

    return {
        item_id: ItemStack(quantity=quantity, link=links.get(item_id))
        for item_id, quantity in totals.items()
    }


def take_snapshot(
    host: IGameHost,
    scope: InventoryScope = InventoryScope.BAGS,
) -> dict[int, ItemStack]:
    """호스트 인벤토리 스냅샷"""
    return build_snapshot(host.enumerate_inventory(scope))


def _check(snapshot: ItemQuantityMap, name: str) -> None:
    for item_id, stack in snapshot.items():
        if stack.quantity < 0:
            raise SnapshotInvariantError(
                f"{name} 스냅샷에 음수 수량: item={item_id} quantity={stack.quantity}"
            )


def diff(before: ItemQuantityMap, after: ItemQuantityMap) -> list[ItemDelta]:
    """두 스냅샷의 차이

    입력 순서와 무관하게 같은 결과 (item_id 오름차순, 제거 먼저).

    Args:
        before: 이전 스냅샷
        after: 이후 스냅샷

    Returns:
        변화 목록 (변화 없으면 빈 목록)

    Raises:
        SnapshotInvariantError: 음수 수량 포함
    """
    _check(before, "이전")
    _check(after, "이후")

    removed: list[ItemDelta] = []
    added: list[ItemDelta] = []

    for item_id in sorted(set(before) | set(after)):
        old = before.get(item_id)
        new = after.get(item_id)
        old_qty = old.quantity if old else 0
        new_qty = new.quantity if new else 0

        if new_qty < old_qty:
            removed.append(
                ItemDelta(item_id, old.link if old else None, old_qty - new_qty, ItemDirection.REMOVED)
            )
        elif new_qty > old_qty:
            link = new.link if new and new.link else (old.link if old else None)
            added.append(ItemDelta(item_id, link, new_qty - old_qty, ItemDirection.ADDED))

    return removed + added


def apply_inverse(after: ItemQuantityMap, deltas: Iterable[ItemDelta]) -> dict[int, ItemStack]:
    """차이를 되돌려 이전 스냅샷 복원

    diff(before, after)의 결과를 after에 역적용하면 before와 같은 수량 맵.

    Raises:
        SnapshotInvariantError: 복원 결과가 음수가 되는 경우
    """
    restored = {item_id: stack for item_id, stack in after.items()}

    for delta in deltas:
        current = restored.get(delta.item_id)
        quantity = (current.quantity if current else 0) - delta.signed_quantity
        if quantity < 0:
            raise SnapshotInvariantError(
                f"역적용 결과 음수 수량: item={delta.item_id} quantity={quantity}"
            )
        if quantity == 0:
            restored.pop(delta.item_id, None)
        else:
            link = delta.link if delta.direction == ItemDirection.REMOVED else (
                current.link if current else delta.link
            )
            restored[delta.item_id] = ItemStack(quantity=quantity, link=link)

    return restored


def removed_items(deltas: Iterable[ItemDelta]) -> list[ItemDelta]:
    return [d for d in deltas if d.direction == ItemDirection.REMOVED]


def added_items(deltas: Iterable[ItemDelta]) -> list[ItemDelta]:
    return [d for d in deltas if d.direction == ItemDirection.ADDED]
