"""
core/utils/money.py 테스트

copper ↔ 문자열 변환
"""

import pytest

from core.utils.money import format_money, parse_money


class TestFormatMoney:
    """format_money 테스트"""

    def test_zero(self) -> None:
        assert format_money(0) == "0c"

    def test_copper_only(self) -> None:
        assert format_money(42) == "42c"

    def test_silver_and_copper(self) -> None:
        assert format_money(5_003) == "50s 3c"

    def test_full(self) -> None:
        """gold가 있으면 silver/copper 자리 항상 표시"""
        assert format_money(123_456) == "12g 34s 56c"
        assert format_money(10_000) == "1g 0s 0c"

    def test_thousands_separator(self) -> None:
        assert format_money(12_345_000_00) == "123,450g 0s 0c"

    def test_negative_unsigned(self) -> None:
        """signed=False면 절대값"""
        assert format_money(-300) == "3s 0c"

    def test_negative_signed(self) -> None:
        assert format_money(-300, signed=True) == "-3s 0c"

    def test_positive_signed_has_no_plus(self) -> None:
        assert format_money(300, signed=True) == "3s 0c"


class TestParseMoney:
    """parse_money 테스트"""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("5 Gold, 3 Silver, 2 Copper", 50_302),
            ("5g 3s 2c", 50_302),
            ("You loot 12 Silver", 1_200),
            ("1,250 gold", 12_500_000),
            ("75 copper", 75),
        ],
    )
    def test_parse(self, text: str, expected: int) -> None:
        assert parse_money(text) == expected

    def test_empty(self) -> None:
        assert parse_money("") == 0
        assert parse_money(None) == 0

    def test_no_amount(self) -> None:
        assert parse_money("You receive item: Linen Cloth") == 0

    def test_matches_format_money_output(self) -> None:
        assert parse_money(format_money(987_654)) == 987_654
