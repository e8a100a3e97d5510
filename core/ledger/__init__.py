"""
거래 Ledger 시스템

캐릭터 골드/아이템 이동을 분류된 Transaction으로 기록하는 추가 전용 저장소.

사용 예시:
```python
from core.ledger import LedgerStore, LedgerFilter, Transaction, TransactionKind

ledger_store = LedgerStore(db)

await ledger_store.append(Transaction(
    kind=TransactionKind.REPAIR,
    character_key="Alice-Realm",
    value=-1250,
    source="Blacksmith",
))

summary = await ledger_store.aggregate(LedgerFilter(character_key="Alice-Realm"))
print(summary.net)
```
"""

from core.ledger.formatting import date_presets, export_to_string, summary_line
from core.ledger.schema import init_ledger_schema
from core.ledger.store import LedgerStore
from core.ledger.types import (
    KIND_INFO,
    TRANSFER_KINDS,
    TYPE_PRESETS,
    KindInfo,
    LedgerFilter,
    LedgerSummary,
    Transaction,
    TransactionKind,
    TransactionValidationError,
    get_kind_info,
)

__all__ = [
    # Store
    "LedgerStore",
    "init_ledger_schema",
    # Types
    "KIND_INFO",
    "TRANSFER_KINDS",
    "TYPE_PRESETS",
    "KindInfo",
    "LedgerFilter",
    "LedgerSummary",
    "Transaction",
    "TransactionKind",
    "TransactionValidationError",
    "get_kind_info",
    # Formatting
    "date_presets",
    "export_to_string",
    "summary_line",
]
