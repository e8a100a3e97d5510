"""
인벤토리 비교 / 아이템 메타데이터
"""

from engine.inventory.catalog import ItemCatalog
from engine.inventory.snapshot import (
    ItemDelta,
    ItemQuantityMap,
    ItemStack,
    SnapshotInvariantError,
    added_items,
    apply_inverse,
    build_snapshot,
    diff,
    removed_items,
    take_snapshot,
)

__all__ = [
    "ItemCatalog",
    "ItemDelta",
    "ItemQuantityMap",
    "ItemStack",
    "SnapshotInvariantError",
    "added_items",
    "apply_inverse",
    "build_snapshot",
    "diff",
    "removed_items",
    "take_snapshot",
]
