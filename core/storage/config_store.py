"""
ConfigStore - 런타임 설정 저장소

config_store 테이블을 통해 런타임 설정 관리.
Engine과 Web이 공유하는 설정을 저장/조회.

설정 키 구조:
- "ledger": 보관/정리 설정 (max_age_days, purge_interval_sec, initial_purge_delay_sec)
- "engine_status": Engine 프로세스 상태 (Web 조회용)
"""

import copy
import json
import logging
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import LedgerDefaults
from core.utils.timezone import now_utc

logger = logging.getLogger(__name__)


# 기본 설정값
DEFAULT_CONFIGS: dict[str, dict[str, Any]] = {
    "ledger": {
        "max_age_days": LedgerDefaults.MAX_AGE_DAYS,  # 0이면 정리 안 함
        "purge_interval_sec": LedgerDefaults.PURGE_INTERVAL_SEC,
        "initial_purge_delay_sec": LedgerDefaults.INITIAL_PURGE_DELAY_SEC,
    },
    "engine_status": {
        "is_running": False,
        "character_key": None,
        "started_at": None,  # ISO 형식
        "last_purge_at": None,  # ISO 형식
        "events_processed": 0,
    },
}


class ConfigStore:
    """설정 저장소

    config_store 테이블을 읽고 쓰는 클래스.

    Args:
        db: SQLiteAdapter 인스턴스

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        config_store = ConfigStore(db)

        max_age = await config_store.get_value("ledger", "max_age_days", 30)
        await config_store.update_field("ledger", "max_age_days", 14)
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self._cache: dict[str, dict[str, Any]] = {}
        self._cache_version: dict[str, int] = {}

    async def get(self, key: str, use_cache: bool = True) -> dict[str, Any]:
        """설정 조회

        Args:
            key: 설정 키
            use_cache: 캐시 사용 여부 (기본 True)

        Returns:
            설정 값 (dict 사본). 없으면 기본값 사본.
        """
        if use_cache and key in self._cache:
            return copy.deepcopy(self._cache[key])

        try:
            row = await self.db.fetchone(
                """
                SELECT value_json, version
                FROM config_store
                WHERE config_key = ?
                """,
                (key,),
            )

            if row:
                value = json.loads(row[0])
                self._cache[key] = value
                self._cache_version[key] = row[1]
                return copy.deepcopy(value)

        except Exception as e:
            logger.warning(f"설정 조회 실패 '{key}': {e}")

        return copy.deepcopy(DEFAULT_CONFIGS.get(key, {}))

    async def get_value(
        self,
        key: str,
        field: str,
        default: Any = None,
    ) -> Any:
        """설정의 특정 필드 조회

        저장된 값에 필드가 없으면 기본 설정 → default 순으로 사용.
        """
        config = await self.get(key)
        if field in config:
            return config[field]
        return DEFAULT_CONFIGS.get(key, {}).get(field, default)

    async def set(
        self,
        key: str,
        value: dict[str, Any],
        updated_by: str = "engine:system",
    ) -> bool:
        """설정 저장 (UPSERT)

        Args:
            key: 설정 키
            value: 설정 값
            updated_by: 업데이트 주체

        Returns:
            성공 여부
        """
        now = now_utc().isoformat()
        value_json = json.dumps(value, ensure_ascii=False)

        try:
            await self.db.execute(
                """
                INSERT INTO config_store (config_key, value_json, version, updated_by, created_at, updated_at)
                VALUES (?, ?, 1, ?, ?, ?)
                ON CONFLICT(config_key) DO UPDATE SET
                    value_json = excluded.value_json,
                    version = config_store.version + 1,
                    updated_by = excluded.updated_by,
                    updated_at = excluded.updated_at
                """,
                (key, value_json, updated_by, now, now),
            )
            await self.db.commit()

            self._cache.pop(key, None)
            self._cache_version.pop(key, None)

            logger.info(f"설정 '{key}' 갱신 ({updated_by})")
            return True

        except Exception as e:
            logger.error(f"설정 저장 실패 '{key}': {e}")
            return False

    async def update_field(
        self,
        key: str,
        field: str,
        value: Any,
        updated_by: str = "engine:system",
    ) -> bool:
        """설정의 특정 필드만 업데이트"""
        config = await self.get(key, use_cache=False)
        config[field] = value
        return await self.set(key, config, updated_by)

    async def get_all(self) -> dict[str, dict[str, Any]]:
        """모든 설정 조회

        Returns:
            {키: 값} 딕셔너리
        """
        result: dict[str, dict[str, Any]] = {}

        try:
            rows = await self.db.fetchall(
                """
                SELECT config_key, value_json
                FROM config_store
                ORDER BY config_key
                """
            )
            for row in rows:
                result[row[0]] = json.loads(row[1])

        except Exception as e:
            logger.warning(f"전체 설정 조회 실패: {e}")

        return result

    async def ensure_defaults(self) -> None:
        """기본 설정이 없으면 생성

        Engine 시작 시 호출하여 필수 설정이 존재하도록 보장.
        """
        for key, default_value in DEFAULT_CONFIGS.items():
            row = await self.db.fetchone(
                "SELECT 1 FROM config_store WHERE config_key = ?",
                (key,),
            )
            if not row:
                await self.set(key, copy.deepcopy(default_value), updated_by="engine:init")
                logger.info(f"기본 설정 생성: {key}")

    def clear_cache(self) -> None:
        """캐시 초기화"""
        self._cache.clear()
        self._cache_version.clear()

    # =========================================================================
    # Ledger 보관 설정
    # =========================================================================

    async def get_max_age_days(self) -> int:
        """보관 일수 조회 (0 이하면 정리 안 함)"""
        value = await self.get_value("ledger", "max_age_days", LedgerDefaults.MAX_AGE_DAYS)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"잘못된 max_age_days 값: {value!r}, 기본값 사용")
            return LedgerDefaults.MAX_AGE_DAYS

    async def set_max_age_days(self, days: int, updated_by: str = "engine:system") -> bool:
        """보관 일수 저장"""
        if days < 0:
            raise ValueError(f"max_age_days는 음수일 수 없습니다: {days}")
        return await self.update_field("ledger", "max_age_days", days, updated_by)

    # =========================================================================
    # Engine 상태 (Web에서 실행 여부 확인용)
    # =========================================================================

    async def update_engine_status(
        self,
        is_running: bool,
        character_key: str | None = None,
        started_at: str | None = None,
        events_processed: int = 0,
    ) -> bool:
        """Engine 상태 갱신"""
        status = await self.get("engine_status", use_cache=False)
        status.update({
            "is_running": is_running,
            "character_key": character_key,
            "started_at": started_at,
            "events_processed": events_processed,
        })
        return await self.set("engine_status", status, updated_by="engine:status")

    async def mark_purged(self) -> bool:
        """마지막 정리 시각 기록"""
        return await self.update_field(
            "engine_status",
            "last_purge_at",
            now_utc().isoformat(),
            updated_by="engine:purge",
        )


async def init_default_configs(db: SQLiteAdapter) -> None:
    """기본 설정 초기화

    Engine/Web 시작 시 호출하여 기본 설정이 존재하도록 보장.

    Args:
        db: SQLiteAdapter 인스턴스
    """
    config_store = ConfigStore(db)
    await config_store.ensure_defaults()
