"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from typing import Protocol, runtime_checkable

from adapters.models import InventorySlot, ItemMetadata
from core.ledger.types import Transaction
from core.types import InventoryScope


@runtime_checkable
class IGameHost(Protocol):
    """호스트(게임 클라이언트) 조회 인터페이스

    모든 조회는 동기 호출이며 호스트 상태를 변경하지 않음.
    금액은 copper 단위 정수.
    """

    def get_balance(self) -> int:
        """현재 캐릭터 소지금 (권위 있는 값)

        Returns:
            소지금 (copper)
        """
        ...

    def enumerate_inventory(self, scope: InventoryScope) -> list[InventorySlot]:
        """인벤토리 슬롯 열거

        Args:
            scope: 열거 범위 (가방, 은행 등)

        Returns:
            비어 있지 않은 슬롯 목록 (같은 아이템이 여러 슬롯에 있을 수 있음)
        """
        ...

    def lookup_item_metadata(self, item_id: int) -> ItemMetadata | None:
        """아이템 메타데이터 조회

        Args:
            item_id: 아이템 식별자

        Returns:
            메타데이터 또는 None (호스트 캐시 미준비, 재시도 필요)
        """
        ...


@runtime_checkable
class ITransactionSink(Protocol):
    """분류된 Transaction 수신 인터페이스

    LedgerStore가 기본 구현. 테스트에서는 리스트 수집기로 교체.
    """

    async def append(self, transaction: Transaction) -> Transaction:
        """Transaction 저장

        Args:
            transaction: 저장할 거래

        Returns:
            저장된 거래 (seq 할당)
        """
        ...
