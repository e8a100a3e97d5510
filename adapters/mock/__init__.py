"""
Mock 어댑터

테스트용 Mock 구현체 제공.
Protocol 준수하여 실제 구현체와 교체 가능.
"""

from adapters.mock.host import MockGameHost
from adapters.mock.ledger import MemoryLedgerSink

__all__ = [
    "MockGameHost",
    "MemoryLedgerSink",
]
