"""
Transaction Emitter

분류 결과(Allocation)를 Transaction으로 만들어 Ledger에 추가.
캐릭터 키와 기록 시각은 여기서 채움.
"""

import logging
from datetime import datetime
from typing import Callable, Iterable

from adapters.interfaces import ITransactionSink
from core.ledger.types import Transaction, TransactionKind
from core.utils.money import format_money
from core.utils.timezone import now_utc
from engine.classification import Allocation

logger = logging.getLogger(__name__)


class TransactionEmitter:
    """Transaction 생성 및 기록

    Args:
        sink: 저장 대상 (LedgerStore)
        character_key: 기록 대상 캐릭터 키
        clock: 기록 시각 함수 (UTC)
    """

    def __init__(
        self,
        sink: ITransactionSink,
        character_key: str,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.sink = sink
        self.character_key = character_key
        self._clock = clock
        self.emitted_count = 0
        self.total_value = 0

    async def emit(
        self,
        kind: TransactionKind,
        value: int,
        item_id: int | None = None,
        item_link: str | None = None,
        quantity: int | None = None,
        source: str | None = None,
    ) -> Transaction:
        """Transaction 1건 기록

        Raises:
            TransactionValidationError: 유형과 금액 부호 불일치 등
        """
        transaction = Transaction(
            kind=kind,
            character_key=self.character_key,
            value=value,
            timestamp=self._clock(),
            item_id=item_id,
            item_link=item_link,
            quantity=quantity,
            source=source,
        )

        saved = await self.sink.append(transaction)
        self.emitted_count += 1
        self.total_value += value

        logger.info(
            f"[{saved.label}] {format_money(value, signed=True)}"
            + (f" {item_link or item_id}" if item_id or item_link else "")
            + (f" x{quantity}" if quantity and quantity > 1 else ""),
            extra={"kind": saved.kind.value, "seq": saved.seq, "source": source},
        )
        return saved

    async def emit_allocation(self, allocation: Allocation) -> Transaction:
        return await self.emit(
            allocation.kind,
            allocation.value,
            item_id=allocation.item_id,
            item_link=allocation.item_link,
            quantity=allocation.quantity,
            source=allocation.source,
        )

    async def emit_allocations(self, allocations: Iterable[Allocation]) -> list[Transaction]:
        """여러 항목 기록 (순서 유지)"""
        return [await self.emit_allocation(a) for a in allocations]
