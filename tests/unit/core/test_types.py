"""
core/types.py 테스트

모든 Enum이 문자열 직렬화 가능한지 확인
"""

from core.types import Confidence, InventoryScope, ItemDirection, Venue


class TestVenue:
    """Venue 테스트"""

    def test_str_enum(self) -> None:
        assert Venue.VENDOR == "VENDOR"
        assert Venue("MAILBOX") is Venue.MAILBOX

    def test_ambient_venues_present(self) -> None:
        assert Venue.QUEST.value == "QUEST"
        assert Venue.LOOT.value == "LOOT"


class TestInventoryScope:
    """InventoryScope 테스트"""

    def test_values(self) -> None:
        assert {s.value for s in InventoryScope} == {"BAGS", "BANK", "WARBAND_BANK", "GUILD_BANK"}


class TestItemDirection:
    """ItemDirection 테스트"""

    def test_values(self) -> None:
        assert ItemDirection.REMOVED == "removed"
        assert ItemDirection.ADDED == "added"


class TestConfidence:
    """Confidence 테스트"""

    def test_values(self) -> None:
        assert [c.value for c in Confidence] == ["HIGH", "MEDIUM", "LOW"]
