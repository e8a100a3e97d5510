"""
pytest 공통 fixture 정의
"""

import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.mock import MemoryLedgerSink, MockGameHost
from core.config.loader import Settings
from engine.scheduler import ManualScheduler
from tests.helpers import EngineHarness


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    db_path = (temp_dir / "ledger.db").as_posix()
    settings_content = f"""# 테스트용 settings.yaml
character: "Alice-Realm"
db_path: "{db_path}"

arbiter:
  claim_timeout_sec: 0.5
  stale_after_sec: 2.0
  min_change: 1

tracking:
  black_market: false
  unclaimed: true

web:
  host: "127.0.0.1"
  port: 8100
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture(autouse=True)
def reset_settings():
    """Settings 싱글톤 초기화"""
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def host() -> MockGameHost:
    return MockGameHost(balance=1000)


@pytest.fixture
def sink() -> MemoryLedgerSink:
    return MemoryLedgerSink()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest_asyncio.fixture
async def harness() -> EngineHarness:
    """시작된 엔진 하네스 (잔고 1000)"""
    h = EngineHarness(balance=1000)
    h.start()
    yield h
    await h.stop()
