"""
Mock Ledger Sink

테스트용 ITransactionSink 구현.
추가된 Transaction을 메모리에 순서대로 보관.
"""

from core.ledger.types import Transaction, TransactionKind


class MemoryLedgerSink:
    """메모리 Ledger

    사용 예시:
    ```python
    sink = MemoryLedgerSink()
    emitter = TransactionEmitter(sink, "Alice-Realm")

    ...
    assert sink.kinds() == [TransactionKind.SALE]
    assert sink.total() == 300
    ```
    """

    def __init__(self) -> None:
        self.transactions: list[Transaction] = []

    async def append(self, transaction: Transaction) -> Transaction:
        saved = transaction.with_seq(len(self.transactions) + 1)
        self.transactions.append(saved)
        return saved

    def kinds(self) -> list[TransactionKind]:
        return [t.kind for t in self.transactions]

    def values(self) -> list[int]:
        return [t.value for t in self.transactions]

    def total(self) -> int:
        """금액 합계 (보존 검증용)"""
        return sum(t.value for t in self.transactions)

    def of_kind(self, kind: TransactionKind) -> list[Transaction]:
        return [t for t in self.transactions if t.kind == kind]

    def clear(self) -> None:
        self.transactions.clear()

    def __len__(self) -> int:
        return len(self.transactions)
