"""
화폐 표기 유틸리티

copper 정수 ↔ "12g 3s 4c" 문자열 변환.
호스트 메시지("5 Gold, 3 Silver, 2 Copper")에서 금액 추출.
"""

import re

from core.constants import COPPER_PER_GOLD, COPPER_PER_SILVER

_UNIT_PATTERNS = {
    COPPER_PER_GOLD: re.compile(r"(\d[\d,]*)\s*(?:gold\b|g\b)", re.IGNORECASE),
    COPPER_PER_SILVER: re.compile(r"(\d+)\s*(?:silver\b|s\b)", re.IGNORECASE),
    1: re.compile(r"(\d+)\s*(?:copper\b|c\b)", re.IGNORECASE),
}


def format_money(copper: int, signed: bool = False) -> str:
    """copper 금액을 "Xg Ys Zc" 형식으로 변환

    Args:
        copper: 금액 (copper)
        signed: True면 음수에 "-" 접두사 (False면 절대값 표기)

    Returns:
        포맷된 문자열 (0이면 "0c")

    Example:
        >>> format_money(123456)
        '12g 34s 56c'
    """
    if not copper:
        return "0c"

    amount = abs(copper)
    gold, rest = divmod(amount, COPPER_PER_GOLD)
    silver, remainder = divmod(rest, COPPER_PER_SILVER)

    parts = []
    if gold > 0:
        parts.append(f"{gold:,}g")
    if silver > 0 or gold > 0:
        parts.append(f"{silver}s")
    parts.append(f"{remainder}c")

    text = " ".join(parts)
    if signed and copper < 0:
        return f"-{text}"
    return text


def parse_money(message: str | None) -> int:
    """문자열에서 금액 추출

    "5 Gold, 3 Silver, 2 Copper", "5g 3s 2c" 형식 모두 지원.
    금액이 없으면 0.

    Args:
        message: 호스트 메시지 또는 금액 문자열

    Returns:
        금액 (copper)
    """
    if not message:
        return 0

    total = 0
    for unit, pattern in _UNIT_PATTERNS.items():
        match = pattern.search(message)
        if match:
            total += int(match.group(1).replace(",", "")) * unit
    return total
