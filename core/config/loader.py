"""
설정 로더

settings.yaml 로드 및 엔진 설정 생성
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths, PROJECT_ROOT, Timing
from core.types import Venue


class ConfigLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


@dataclass(frozen=True)
class ArbiterConfig:
    """미분류 변화 Arbiter 설정

    claim_timeout_sec 안에 Claim이 없으면 unclaimed 거래로 기록.
    stale_after_sec를 넘긴 변화는 조용히 폐기.
    """

    claim_timeout_sec: float = Timing.CLAIM_TIMEOUT_SEC
    stale_after_sec: float = Timing.STALE_AFTER_SEC
    min_change: int = Defaults.MIN_CHANGE

    def __post_init__(self) -> None:
        if self.claim_timeout_sec <= 0:
            raise ValueError(f"claim_timeout_sec는 양수여야 합니다: {self.claim_timeout_sec}")
        if self.stale_after_sec < self.claim_timeout_sec:
            raise ValueError(
                "stale_after_sec는 claim_timeout_sec 이상이어야 합니다: "
                f"{self.stale_after_sec} < {self.claim_timeout_sec}"
            )
        if self.min_change < 1:
            raise ValueError(f"min_change는 1 이상이어야 합니다: {self.min_change}")


@dataclass(frozen=True)
class TrackingConfig:
    """장소별 추적 활성화 여부

    비활성화된 장소의 Tracker는 등록하지 않음 (해당 변화는 Arbiter가 처리).
    unclaimed=False면 Arbiter가 미분류 변화를 기록하지 않음.
    """

    vendor: bool = True
    repairs: bool = True
    auction: bool = True
    black_market: bool = True
    mail: bool = True
    trade: bool = True
    bank: bool = True
    guild_bank: bool = True
    warbank: bool = True
    barber: bool = True
    transmog: bool = True
    flights: bool = True
    quests: bool = True
    loot: bool = True
    unclaimed: bool = True

    def is_enabled(self, venue: Venue) -> bool:
        """장소 추적 여부"""
        return getattr(self, _VENUE_TOGGLES[venue])


_VENUE_TOGGLES: dict[Venue, str] = {
    Venue.VENDOR: "vendor",
    Venue.REPAIR: "repairs",
    Venue.AUCTION_HOUSE: "auction",
    Venue.BLACK_MARKET: "black_market",
    Venue.MAILBOX: "mail",
    Venue.TRADE: "trade",
    Venue.BANK: "bank",
    Venue.GUILD_BANK: "guild_bank",
    Venue.WARBAND_BANK: "warbank",
    Venue.BARBER: "barber",
    Venue.TRANSMOG: "transmog",
    Venue.FLIGHT_MASTER: "flights",
    Venue.QUEST: "quests",
    Venue.LOOT: "loot",
}


@dataclass(frozen=True)
class WebConfig:
    """Web 조회 서버 설정"""

    host: str = Defaults.WEB_HOST
    port: int = Defaults.WEB_PORT


@dataclass(frozen=True)
class EngineConfig:
    """엔진 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    character_key: str
    db_path: Path = Paths.LEDGER_DB
    arbiter: ArbiterConfig = field(default_factory=ArbiterConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    web: WebConfig = field(default_factory=WebConfig)


def _section(data: dict[str, Any], name: str, cls: type) -> Any:
    """YAML 섹션을 dataclass로 변환 (알 수 없는 키는 오류)"""
    raw = data.get(name) or {}
    if not isinstance(raw, dict):
        raise ConfigLoadError(f"settings.yaml의 '{name}' 섹션은 매핑이어야 합니다")

    known = {f.name for f in fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise ConfigLoadError(
            f"settings.yaml의 '{name}' 섹션에 알 수 없는 키: {sorted(unknown)}"
        )
    return cls(**raw)


def validate_character_key(character_key: str | None) -> str:
    """캐릭터 키 검증 ("Name-Realm" 형식)

    Raises:
        ConfigLoadError: 비어 있거나 realm이 없는 경우
    """
    if not character_key or not isinstance(character_key, str):
        raise ConfigLoadError("settings.yaml에 'character' 필드가 없습니다")

    name, sep, realm = character_key.partition("-")
    if not sep or not name or not realm:
        raise ConfigLoadError(
            f"character는 'Name-Realm' 형식이어야 합니다: '{character_key}'"
        )
    return character_key


def load_engine_config(path: Path | None = None) -> EngineConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        EngineConfig 인스턴스

    Raises:
        ConfigLoadError: 파일이 없거나 형식이 잘못된 경우
        ValueError: 설정 값이 범위를 벗어난 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise ConfigLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise ConfigLoadError("settings.yaml이 비어 있습니다")
    if not isinstance(data, dict):
        raise ConfigLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    character_key = validate_character_key(data.get("character"))

    db_path = Paths.LEDGER_DB
    if data.get("db_path"):
        db_path = Path(data["db_path"])
        if not db_path.is_absolute():
            db_path = PROJECT_ROOT / db_path

    try:
        return EngineConfig(
            character_key=character_key,
            db_path=db_path,
            arbiter=_section(data, "arbiter", ArbiterConfig),
            tracking=_section(data, "tracking", TrackingConfig),
            web=_section(data, "web", WebConfig),
        )
    except TypeError as e:
        raise ConfigLoadError(f"settings.yaml 값 형식 오류: {e}") from e


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: EngineConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_engine_config(settings_path)

    @property
    def config(self) -> EngineConfig:
        """전체 설정"""
        assert self._config is not None
        return self._config

    @property
    def character_key(self) -> str:
        """기록 대상 캐릭터 키"""
        return self.config.character_key

    @property
    def db_path(self) -> Path:
        """Ledger DB 경로"""
        return self.config.db_path

    @property
    def arbiter(self) -> ArbiterConfig:
        """Arbiter 설정"""
        return self.config.arbiter

    @property
    def tracking(self) -> TrackingConfig:
        """장소별 추적 설정"""
        return self.config.tracking

    @property
    def web(self) -> WebConfig:
        """Web 설정"""
        return self.config.web

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
