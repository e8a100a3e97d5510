"""
Config 서비스

config_store 조회 (보관 기간, Engine 상태)
"""

import json
import logging
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

_SELECT = """
    SELECT config_key, value_json, version, updated_at, updated_by
    FROM config_store
"""


def _row_to_dict(row: tuple[Any, ...]) -> dict[str, Any]:
    value = json.loads(row[1]) if isinstance(row[1], str) else row[1]
    return {
        "key": row[0],
        "value": value,
        "version": row[2],
        "updated_at": row[3],
        "updated_by": row[4],
    }


class ConfigService:
    """Config 서비스

    Args:
        db: SQLite 어댑터 (읽기 전용)
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def get_config(self, key: str) -> dict[str, Any] | None:
        """설정 조회

        Returns:
            설정 정보 또는 None
        """
        row = await self.db.fetchone(f"{_SELECT} WHERE config_key = ?", (key,))
        return _row_to_dict(row) if row else None

    async def get_all_configs(self) -> list[dict[str, Any]]:
        """모든 설정 조회 (키 순)"""
        rows = await self.db.fetchall(f"{_SELECT} ORDER BY config_key")
        return [_row_to_dict(row) for row in rows]
