"""
어댑터 레이어

외부 시스템(게임 호스트, DB, 기록된 세션)과의 연동을 담당.
Protocol 기반 인터페이스로 Mock 교체 가능.
"""

from adapters.interfaces import (
    IGameHost,
    ITransactionSink,
)
from adapters.models import (
    InventorySlot,
    ItemMetadata,
)

__all__ = [
    # Interfaces
    "IGameHost",
    "ITransactionSink",
    # Models
    "InventorySlot",
    "ItemMetadata",
]
