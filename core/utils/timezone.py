"""
타임존 유틸리티

내부 저장: UTC | 외부 표시: 로컬 시간 원칙 준수를 위한 헬퍼 함수
"""

from datetime import datetime, timezone, tzinfo


def to_local(dt: datetime, tz: tzinfo | None = None) -> datetime:
    """UTC datetime을 로컬(또는 지정) 타임존으로 변환

    Args:
        dt: datetime 객체 (UTC 권장, naive면 UTC로 간주)
        tz: 대상 타임존 (None이면 시스템 로컬)

    Returns:
        변환된 datetime
    """
    if dt.tzinfo is None:
        # naive datetime은 UTC로 간주
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz)


def format_local(
    dt: datetime,
    fmt: str = "%Y-%m-%d %H:%M",
    tz: tzinfo | None = None,
) -> str:
    """UTC datetime을 로컬 시간 문자열로 포맷

    Args:
        dt: datetime 객체 (UTC 권장)
        fmt: strftime 포맷 문자열
        tz: 대상 타임존 (None이면 시스템 로컬)

    Returns:
        포맷된 문자열
    """
    return to_local(dt, tz).strftime(fmt)


def start_of_local_day(dt: datetime, tz: tzinfo | None = None) -> datetime:
    """로컬 기준 자정 시각을 UTC로 반환

    "오늘" 필터는 UTC 자정이 아닌 로컬 자정 기준.
    """
    local = to_local(dt, tz)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(timezone.utc)


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def utc_from_timestamp_ms(ts_ms: int) -> datetime:
    """밀리초 타임스탬프를 UTC datetime으로 변환

    Args:
        ts_ms: Unix 타임스탬프 (밀리초)

    Returns:
        UTC datetime

    Example:
        >>> utc_from_timestamp_ms(1708444800000)
        datetime(2024, 2, 20, 16, 0, 0, tzinfo=timezone.utc)
    """
    return datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc)


def to_timestamp_ms(dt: datetime) -> int:
    """datetime을 밀리초 타임스탬프로 변환

    Args:
        dt: datetime 객체 (타임존 포함 권장)

    Returns:
        Unix 타임스탬프 (밀리초)
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)
