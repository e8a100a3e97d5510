"""
Ledger 스키마 초기화

Engine/Web 시작 시 자동으로 ledger_transaction 테이블 생성.
CREATE IF NOT EXISTS 패턴으로 안전하게 동작.

저장 순서(seq)가 유일한 키. ts는 필드일 뿐 정렬 보조 인덱스만 둔다.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


async def init_ledger_schema(db: "SQLiteAdapter") -> None:
    """Ledger 스키마 초기화

    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        db: SQLiteAdapter 인스턴스
    """
    await db.execute("""
        CREATE TABLE IF NOT EXISTS ledger_transaction (
            seq              INTEGER PRIMARY KEY AUTOINCREMENT,
            ts               TEXT NOT NULL,
            ts_ms            INTEGER NOT NULL,
            kind             TEXT NOT NULL,
            character_key    TEXT NOT NULL,
            value            INTEGER NOT NULL DEFAULT 0,

            item_id          INTEGER,
            item_link        TEXT,
            quantity         INTEGER,
            source           TEXT,

            created_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_ledger_transaction_ts
        ON ledger_transaction(ts_ms)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_ledger_transaction_character
        ON ledger_transaction(character_key, ts_ms)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_ledger_transaction_kind
        ON ledger_transaction(kind)
    """)

    await db.commit()
    logger.info("Ledger 스키마 초기화 완료")
