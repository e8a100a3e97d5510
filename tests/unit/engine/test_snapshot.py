"""
engine/inventory/snapshot.py 테스트
"""

import pytest

from adapters.models import InventorySlot
from core.types import ItemDirection
from engine.inventory.snapshot import (
    ItemStack,
    SnapshotInvariantError,
    added_items,
    apply_inverse,
    build_snapshot,
    diff,
    removed_items,
)


def stacks(**items: int) -> dict[int, ItemStack]:
    """{"i101": 2} -> {101: ItemStack(2)}"""
    return {int(k[1:]): ItemStack(quantity=v, link=f"[{k}]") for k, v in items.items()}


class TestBuildSnapshot:
    """스냅샷 집계 테스트"""

    def test_sums_across_slots(self) -> None:
        slots = [
            InventorySlot(item_id=2589, quantity=20, link="[Linen Cloth]"),
            InventorySlot(item_id=2589, quantity=5, link=None),
            InventorySlot(item_id=118, quantity=1),
        ]

        snapshot = build_snapshot(slots)

        assert snapshot[2589] == ItemStack(quantity=25, link="[Linen Cloth]")
        assert snapshot[118].quantity == 1

    def test_empty_slots_ignored(self) -> None:
        assert build_snapshot([InventorySlot(item_id=1, quantity=0)]) == {}

    def test_negative_quantity_rejected(self) -> None:
        with pytest.raises(SnapshotInvariantError):
            build_snapshot([InventorySlot(item_id=1, quantity=-1)])


class TestDiff:
    """스냅샷 비교 테스트"""

    def test_no_change(self) -> None:
        before = stacks(i1=3, i2=1)

        assert diff(before, dict(before)) == []

    def test_removed_then_added_sorted(self) -> None:
        before = stacks(i5=2, i3=1)
        after = stacks(i5=1, i9=4)

        changes = diff(before, after)

        assert [(c.item_id, c.quantity, c.direction) for c in changes] == [
            (3, 1, ItemDirection.REMOVED),
            (5, 1, ItemDirection.REMOVED),
            (9, 4, ItemDirection.ADDED),
        ]
        assert [c.item_id for c in removed_items(changes)] == [3, 5]
        assert [c.item_id for c in added_items(changes)] == [9]

    def test_removed_link_from_before(self) -> None:
        changes = diff(stacks(i7=1), {})

        assert changes[0].link == "[i7]"
        assert changes[0].signed_quantity == -1

    def test_swapped_slot_is_remove_plus_add(self) -> None:
        """같은 자리의 아이템이 바뀌면 제거 + 추가"""
        changes = diff(stacks(i1=1), stacks(i2=1))

        assert [c.direction for c in changes] == [ItemDirection.REMOVED, ItemDirection.ADDED]

    def test_negative_input_rejected(self) -> None:
        with pytest.raises(SnapshotInvariantError):
            diff({1: ItemStack(quantity=-2)}, {})

    def test_inverse_restores_before(self) -> None:
        before = stacks(i1=3, i2=1, i4=7)
        after = stacks(i1=1, i3=2, i4=7)

        restored = apply_inverse(after, diff(before, after))

        assert {k: v.quantity for k, v in restored.items()} == {1: 3, 2: 1, 4: 7}

    def test_inverse_negative_rejected(self) -> None:
        changes = diff({}, stacks(i1=2))

        with pytest.raises(SnapshotInvariantError):
            apply_inverse({}, changes)
