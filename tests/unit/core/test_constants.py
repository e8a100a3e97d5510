"""
core/constants.py 테스트

모든 경로가 pathlib.Path 타입이고, 상수가 정상적으로 접근 가능한지 확인
"""

from pathlib import Path

from core.constants import (
    COPPER_PER_GOLD,
    COPPER_PER_SILVER,
    PROJECT_ROOT,
    Defaults,
    LedgerDefaults,
    Paths,
    Timing,
)


class TestProjectRoot:
    """PROJECT_ROOT 테스트"""

    def test_project_root_is_path(self) -> None:
        """PROJECT_ROOT가 Path 타입인지 확인"""
        assert isinstance(PROJECT_ROOT, Path)

    def test_project_root_is_absolute(self) -> None:
        """PROJECT_ROOT가 절대 경로인지 확인"""
        assert PROJECT_ROOT.is_absolute()

    def test_project_root_contains_core_directory(self) -> None:
        """PROJECT_ROOT에 core 디렉토리가 있는지 확인"""
        assert (PROJECT_ROOT / "core").is_dir()


class TestPaths:
    """Paths 테스트"""

    def test_all_paths_are_path_type(self) -> None:
        for name in ("CONFIG_DIR", "DATA_DIR", "LOGS_DIR", "SETTINGS_FILE", "LEDGER_DB"):
            assert isinstance(getattr(Paths, name), Path), name

    def test_settings_under_config(self) -> None:
        assert Paths.SETTINGS_FILE.parent == Paths.CONFIG_DIR


class TestValues:
    """상수 값 테스트"""

    def test_currency_units(self) -> None:
        assert COPPER_PER_SILVER == 100
        assert COPPER_PER_GOLD == 10_000

    def test_timing_windows(self) -> None:
        assert Timing.CLAIM_TIMEOUT_SEC == 0.5
        assert Timing.STALE_AFTER_SEC >= Timing.CLAIM_TIMEOUT_SEC
        assert Timing.REPAIR_RECHECK_SEC == 0.1

    def test_defaults(self) -> None:
        assert Defaults.UNKNOWN_SOURCE == "Unknown"
        assert 0 < Defaults.AUCTION_CUT_RATIO < 1
        assert LedgerDefaults.MAX_AGE_DAYS == 30
