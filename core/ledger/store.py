"""
Ledger 저장소

분류된 Transaction을 추가 전용(append-only)으로 저장하고
조회/집계/정리(purge)/내보내기를 제공.
"""

from __future__ import annotations

import inspect
import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from core.constants import SECONDS_PER_DAY
from core.ledger.formatting import export_to_string
from core.ledger.types import LedgerFilter, LedgerSummary, Transaction
from core.utils.timezone import now_utc, to_timestamp_ms

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

TransactionListener = Callable[[Transaction], Awaitable[None] | None]

_SELECT_COLUMNS = """
    seq, ts_ms, kind, character_key, value,
    item_id, item_link, quantity, source
"""


class LedgerStore:
    """Ledger 저장소

    저장된 Transaction은 수정하지 않음. 삭제는 purge_older_than()만 수행.

    Args:
        db: SQLite 어댑터

    사용 예시:
    ```python
    store = LedgerStore(db)
    store.subscribe(on_new_transaction)

    saved = await store.append(Transaction(
        kind=TransactionKind.SALE,
        character_key="Alice-Realm",
        value=300,
    ))

    summary = await store.aggregate(LedgerFilter(character_key="Alice-Realm"))
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self._listeners: list[TransactionListener] = []

    # -------------------------------------------------------------------------
    # 구독
    # -------------------------------------------------------------------------

    def subscribe(self, listener: TransactionListener) -> None:
        """새 Transaction 수신 콜백 등록 (표시/내보내기 소비자용)"""
        self._listeners.append(listener)

    def unsubscribe(self, listener: TransactionListener) -> None:
        """콜백 해제"""
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _notify(self, transaction: Transaction) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(transaction)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    f"Ledger 구독자 처리 실패: {e}",
                    extra={"seq": transaction.seq, "kind": transaction.kind.value},
                    exc_info=True,
                )

    # -------------------------------------------------------------------------
    # 추가
    # -------------------------------------------------------------------------

    async def append(self, transaction: Transaction) -> Transaction:
        """Transaction 추가

        Args:
            transaction: 저장할 거래 (seq 없음)

        Returns:
            seq가 할당된 Transaction
        """
        async with self.db.transaction():
            seq = await self.db.insert(
                """
                INSERT INTO ledger_transaction (
                    ts, ts_ms, kind, character_key, value,
                    item_id, item_link, quantity, source
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    transaction.timestamp.isoformat(),
                    to_timestamp_ms(transaction.timestamp),
                    transaction.kind.value,
                    transaction.character_key,
                    transaction.value,
                    transaction.item_id,
                    transaction.item_link,
                    transaction.quantity,
                    transaction.source,
                ),
            )

        saved = transaction.with_seq(seq)

        logger.debug(
            f"Transaction 저장: {saved.kind.value} {saved.value}",
            extra={"seq": seq, "source": saved.source},
        )

        await self._notify(saved)
        return saved

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    @staticmethod
    def _build_where(flt: LedgerFilter) -> tuple[str, list[Any]]:
        """필터를 WHERE 절로 변환"""
        clauses: list[str] = []
        params: list[Any] = []

        if flt.since is not None:
            clauses.append("ts_ms >= ?")
            params.append(to_timestamp_ms(flt.since))

        if flt.until is not None:
            clauses.append("ts_ms <= ?")
            params.append(to_timestamp_ms(flt.until))

        if flt.character_key:
            clauses.append("character_key = ?")
            params.append(flt.character_key)

        if flt.kinds is not None:
            if not flt.kinds:
                # 빈 유형 집합은 아무것도 매칭하지 않음
                clauses.append("0")
            else:
                kinds = sorted(k.value for k in flt.kinds)
                placeholders = ", ".join("?" for _ in kinds)
                clauses.append(f"kind IN ({placeholders})")
                params.extend(kinds)

        if flt.search:
            term = flt.search.lower()
            clauses.append(
                "(instr(lower(coalesce(item_link, '')), ?) > 0 "
                "OR instr(lower(coalesce(source, '')), ?) > 0)"
            )
            params.extend([term, term])

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    async def query(
        self,
        flt: LedgerFilter | None = None,
        oldest_first: bool = False,
    ) -> list[Transaction]:
        """필터 조회

        Args:
            flt: 조회 필터 (None이면 전체)
            oldest_first: True면 저장 순서대로, False면 최신순

        Returns:
            Transaction 목록
        """
        flt = flt or LedgerFilter()
        where, params = self._build_where(flt)
        order = "ASC" if oldest_first else "DESC"

        sql = f"SELECT {_SELECT_COLUMNS} FROM ledger_transaction {where} ORDER BY seq {order}"

        if flt.limit > 0:
            sql += " LIMIT ? OFFSET ?"
            params.extend([flt.limit, max(flt.offset, 0)])
        elif flt.offset > 0:
            sql += " LIMIT -1 OFFSET ?"
            params.append(flt.offset)

        rows = await self.db.fetchall(sql, tuple(params))
        return [Transaction.from_row(row) for row in rows]

    async def count(self, flt: LedgerFilter | None = None) -> int:
        """필터에 매칭되는 전체 건수 (페이지네이션 무시)"""
        where, params = self._build_where(flt or LedgerFilter())
        row = await self.db.fetchone(
            f"SELECT COUNT(*) FROM ledger_transaction {where}",
            tuple(params),
        )
        return row[0] if row else 0

    async def aggregate(self, flt: LedgerFilter | None = None) -> LedgerSummary:
        """수입/지출/이체 집계

        페이지네이션(limit/offset)은 무시하고 필터 전체를 집계.
        """
        flt = flt or LedgerFilter()
        unpaged = LedgerFilter(
            since=flt.since,
            until=flt.until,
            character_key=flt.character_key,
            kinds=flt.kinds,
            search=flt.search,
        )

        summary = LedgerSummary()
        for transaction in await self.query(unpaged, oldest_first=True):
            summary.add(transaction)
        return summary

    async def characters(self) -> list[str]:
        """기록된 캐릭터 키 목록 (정렬)"""
        rows = await self.db.fetchall(
            "SELECT DISTINCT character_key FROM ledger_transaction ORDER BY character_key"
        )
        return [row[0] for row in rows]

    async def get(self, seq: int) -> Transaction | None:
        """단건 조회"""
        row = await self.db.fetchone(
            f"SELECT {_SELECT_COLUMNS} FROM ledger_transaction WHERE seq = ?",
            (seq,),
        )
        return Transaction.from_row(row) if row else None

    # -------------------------------------------------------------------------
    # 정리 / 내보내기
    # -------------------------------------------------------------------------

    async def purge_older_than(
        self,
        max_age_days: int,
        now: datetime | None = None,
    ) -> int:
        """보관 기간이 지난 Transaction 삭제

        유일한 삭제 경로. 보관 기간 이내이거나 미래 시각(음수 나이)인
        레코드는 삭제하지 않음.

        Args:
            max_age_days: 보관 일수 (0 이하면 정리 비활성화)
            now: 기준 시각 (None이면 현재 UTC)

        Returns:
            삭제된 건수
        """
        if max_age_days <= 0:
            return 0

        now = now or now_utc()
        cutoff = now - timedelta(seconds=max_age_days * SECONDS_PER_DAY)
        cutoff_ms = to_timestamp_ms(cutoff)

        async with self.db.transaction():
            purged = await self.db.delete(
                "DELETE FROM ledger_transaction WHERE ts_ms < ?",
                (cutoff_ms,),
            )

        if purged > 0:
            logger.info(
                f"Ledger 정리: {purged}건 삭제",
                extra={"max_age_days": max_age_days, "cutoff": cutoff.isoformat()},
            )
        return purged

    async def export_text(
        self,
        flt: LedgerFilter | None = None,
        now: datetime | None = None,
    ) -> str:
        """텍스트 내보내기 (클립보드/파일용)"""
        transactions = await self.query(flt)
        return export_to_string(transactions, now=now)
