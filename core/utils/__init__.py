"""
유틸리티 패키지

타임존 처리, 화폐 표기, 재시도 등 공통 유틸리티
"""

from core.utils.money import format_money, parse_money
from core.utils.retry import RetryPolicy, retry_until_ready
from core.utils.timezone import (
    to_local,
    format_local,
    start_of_local_day,
    now_utc,
    utc_from_timestamp_ms,
    to_timestamp_ms,
)

__all__ = [
    "format_money",
    "parse_money",
    "RetryPolicy",
    "retry_until_ready",
    "to_local",
    "format_local",
    "start_of_local_day",
    "now_utc",
    "utc_from_timestamp_ms",
    "to_timestamp_ms",
]
