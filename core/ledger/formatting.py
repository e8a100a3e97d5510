"""
Ledger 표시/내보내기 포맷

텍스트 내보내기, 요약 문자열, 날짜 필터 프리셋.
"""

from datetime import datetime, timedelta, tzinfo

from core.ledger.types import LedgerSummary, Transaction
from core.utils.money import format_money
from core.utils.timezone import format_local, now_utc, start_of_local_day

EXPORT_TITLE = "Gold Ledger Transaction Export"
EXPORT_COLUMNS = "Date/Time | Type | Character | Item | Qty | Value"


def describe_subject(transaction: Transaction) -> str:
    """아이템 링크 → 출처 → "---" 순으로 표시 대상 결정"""
    if transaction.item_link:
        return transaction.item_link
    if transaction.item_id is not None:
        return f"Item #{transaction.item_id}"
    if transaction.source:
        return transaction.source
    return "---"


def format_line(transaction: Transaction, tz: tzinfo | None = None) -> str:
    """내보내기용 한 줄"""
    value = format_money(transaction.value, signed=True) if transaction.value else ""
    return " | ".join([
        format_local(transaction.timestamp, "%Y-%m-%d %H:%M", tz),
        transaction.label,
        transaction.character_key,
        describe_subject(transaction),
        f"x{transaction.quantity or 1}",
        value,
    ])


def export_to_string(
    transactions: list[Transaction],
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> str:
    """Transaction 목록을 텍스트로 내보내기

    Args:
        transactions: 내보낼 목록 (표시 순서 그대로)
        now: 내보내기 시각 (None이면 현재)
        tz: 표시 타임존 (None이면 시스템 로컬)

    Returns:
        줄바꿈으로 구분된 문자열
    """
    now = now or now_utc()
    lines = [
        EXPORT_TITLE,
        f"Exported: {format_local(now, '%Y-%m-%d %H:%M:%S', tz)}",
        f"Entries: {len(transactions)}",
        "",
        EXPORT_COLUMNS,
        "-" * 80,
    ]
    lines.extend(format_line(t, tz) for t in transactions)
    return "\n".join(lines)


def summary_line(summary: LedgerSummary) -> str:
    """요약 문자열

    Example:
        "Income: 1g 0s 0c | Expenses: 50s 0c | Net: +50s 0c (3 entries)"
    """
    sign = "+" if summary.net >= 0 else "-"
    return (
        f"Income: {format_money(summary.total_income)} | "
        f"Expenses: {format_money(summary.total_expense)} | "
        f"Net: {sign}{format_money(abs(summary.net))} "
        f"({summary.count} entries)"
    )


def date_presets(
    now: datetime | None = None,
    session_start: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[tuple[str, datetime | None]]:
    """날짜 필터 프리셋 (label, since)

    "Today"는 로컬 자정 기준.
    """
    now = now or now_utc()
    return [
        ("This Session", session_start),
        ("Today", start_of_local_day(now, tz)),
        ("Last 7 Days", now - timedelta(days=7)),
        ("Last 30 Days", now - timedelta(days=30)),
        ("All Time", None),
    ]
