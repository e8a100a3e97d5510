"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → goldledger/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent

# 화폐 단위 (copper 기준)
COPPER_PER_SILVER: int = 100
COPPER_PER_GOLD: int = 10_000

SECONDS_PER_DAY: int = 86_400

VERSION: str = "1.0.0"


class Defaults:
    """기본값 상수"""

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # 최소 감지 금액 (1 copper 미만 변화는 무시)
    MIN_CHANGE: int = 1

    # 판매 금액 허용 오차 (예상 합계의 10%)
    VALUE_TOLERANCE_RATIO: float = 0.1

    # 비행 비용 허용 오차 (copper)
    FLIGHT_COST_TOLERANCE: int = 1

    # 길드 수리: 실제 차감액이 예상의 50% 미만이면 길드 자금 사용으로 판단
    GUILD_REPAIR_RATIO: float = 0.5

    # 경매장 수수료 (판매 금액의 5%)
    AUCTION_CUT_RATIO: float = 0.05

    UNKNOWN_SOURCE: str = "Unknown"
    GUILD_FUNDS_SOURCE: str = "Guild Funds"
    AUCTION_HOUSE_SOURCE: str = "Auction House"
    LOOT_GOLD_SOURCE: str = "Gold Loot"


class Timing:
    """타이밍 상수 (초 단위)

    호스트 신호 순서가 보장되지 않으므로 짧은 매칭 윈도우 사용.
    """

    # Arbiter: 청구 대기 시간 / 만료 상한
    CLAIM_TIMEOUT_SEC: float = 0.5
    STALE_AFTER_SEC: float = 2.0

    # 대기 액션 유효 시간
    PENDING_ACTION_TTL_SEC: float = 2.0
    AUCTION_SALE_TTL_SEC: float = 5.0
    BLACK_MARKET_TTL_SEC: float = 5.0

    # 지연 재확인 / 디바운스
    REPAIR_RECHECK_SEC: float = 0.1
    INVENTORY_DEBOUNCE_SEC: float = 0.1

    # 미해결 판매 유지 시간 (가방 갱신이 잔고보다 늦게 도착하는 경우)
    UNRESOLVED_SALE_TTL_SEC: float = 1.0


class Retry:
    """아이템 메타데이터 재시도 설정"""

    MAX_ATTEMPTS: int = 10
    BASE_DELAY_SEC: float = 0.05
    BACKOFF: float = 2.0
    MAX_DELAY_SEC: float = 0.5


class LedgerDefaults:
    """Ledger 보관/정리 기본값"""

    MAX_AGE_DAYS: int = 30
    PURGE_INTERVAL_SEC: int = 600
    INITIAL_PURGE_DELAY_SEC: int = 5
    QUERY_LIMIT: int = 100


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    ENGINE_LOGS_DIR: Path = LOGS_DIR / "engine"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    LEDGER_DB: Path = DATA_DIR / "ledger.db"
