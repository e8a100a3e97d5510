"""
Ledger 조회 서비스

쿼리 파라미터 → LedgerFilter 변환, LedgerStore 조회 결과를 응답 형태로 변환.
"""

import logging
from datetime import datetime
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger import (
    KIND_INFO,
    TYPE_PRESETS,
    LedgerFilter,
    LedgerStore,
    Transaction,
    TransactionKind,
    date_presets,
    summary_line,
)
from core.storage.config_store import ConfigStore
from core.utils.money import format_money

logger = logging.getLogger(__name__)


class LedgerService:
    """Ledger 조회 서비스

    Args:
        db: SQLite 어댑터 (읽기 전용)
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self.ledger_store = LedgerStore(db)
        self.config_store = ConfigStore(db)

    # -------------------------------------------------------------------------
    # 필터
    # -------------------------------------------------------------------------

    async def build_filter(
        self,
        since: datetime | None = None,
        until: datetime | None = None,
        period: str | None = None,
        character: str | None = None,
        kinds: list[str] | None = None,
        preset: str | None = None,
        search: str | None = None,
        limit: int = 0,
        offset: int = 0,
    ) -> LedgerFilter:
        """쿼리 파라미터로 LedgerFilter 생성

        Args:
            period: 기간 프리셋 라벨 ("Today", "Last 7 Days" 등). since보다 우선.
            kinds: 거래 유형 값 목록 ("sale", "repair" 등)
            preset: 유형 프리셋 라벨 ("Vendor", "Mail" 등). kinds와 교집합.

        Raises:
            ValueError: 알 수 없는 유형/프리셋/기간
        """
        if period:
            since = await self._resolve_period(period)

        kind_set: frozenset[TransactionKind] | None = None
        if kinds:
            try:
                kind_set = frozenset(TransactionKind(k) for k in kinds)
            except ValueError as e:
                raise ValueError(f"알 수 없는 거래 유형: {e}") from e

        if preset:
            preset_kinds = _find_preset(preset)
            if preset_kinds is not None:
                kind_set = preset_kinds if kind_set is None else kind_set & preset_kinds

        return LedgerFilter(
            since=since,
            until=until,
            character_key=character or None,
            kinds=kind_set,
            search=search or None,
            limit=limit,
            offset=offset,
        )

    async def _resolve_period(self, period: str) -> datetime | None:
        session_start = None
        status = await self.config_store.get("engine_status")
        if status.get("started_at"):
            session_start = datetime.fromisoformat(status["started_at"])

        for label, since in date_presets(session_start=session_start):
            if label.lower() == period.lower():
                return since
        raise ValueError(f"알 수 없는 기간: {period}")

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def list_transactions(self, flt: LedgerFilter) -> dict[str, Any]:
        """거래 목록 (최신순) + 전체 건수"""
        transactions = await self.ledger_store.query(flt)
        total_count = await self.ledger_store.count(flt)
        return {
            "transactions": [to_response_dict(t) for t in transactions],
            "total_count": total_count,
            "limit": flt.limit,
            "offset": flt.offset,
        }

    async def get_summary(self, flt: LedgerFilter) -> dict[str, Any]:
        summary = await self.ledger_store.aggregate(flt)
        return {**summary.to_dict(), "text": summary_line(summary)}

    async def export_text(self, flt: LedgerFilter) -> str:
        return await self.ledger_store.export_text(flt)

    async def get_characters(self) -> list[str]:
        return await self.ledger_store.characters()

    @staticmethod
    def get_kinds() -> dict[str, Any]:
        """유형 메타데이터 + 프리셋"""
        return {
            "kinds": [
                {
                    "kind": kind.value,
                    "label": info.label,
                    "sign": info.sign,
                    "is_transfer": info.is_transfer,
                }
                for kind, info in KIND_INFO.items()
            ],
            "type_presets": [
                {
                    "label": label,
                    "kinds": sorted(k.value for k in kinds) if kinds is not None else None,
                }
                for label, kinds in TYPE_PRESETS
            ],
            "date_presets": [label for label, _ in date_presets()],
        }


def _find_preset(label: str) -> frozenset[TransactionKind] | None:
    for preset_label, kinds in TYPE_PRESETS:
        if preset_label.lower() == label.lower():
            return kinds
    raise ValueError(f"알 수 없는 유형 프리셋: {label}")


def to_response_dict(transaction: Transaction) -> dict[str, Any]:
    """Transaction → TransactionResponse 필드"""
    data = transaction.to_dict()
    data.pop("ts_ms", None)
    data["money"] = format_money(transaction.value, signed=True)
    return data
