"""
Config 라우트

설정 조회 API (보관 기간, Engine 상태)
"""

from fastapi import APIRouter, Depends, HTTPException, Path

from adapters.db.sqlite_adapter import SQLiteAdapter
from web.dependencies import get_db
from web.models.responses import ConfigResponse
from web.services.config_service import ConfigService

router = APIRouter(prefix="/api", tags=["Config"])


@router.get("/config", response_model=list[ConfigResponse])
async def get_all_configs(
    db: SQLiteAdapter = Depends(get_db),
) -> list[ConfigResponse]:
    """모든 설정 조회"""
    configs = await ConfigService(db).get_all_configs()
    return [ConfigResponse(**c) for c in configs]


@router.get("/config/{key}", response_model=ConfigResponse)
async def get_config(
    key: str = Path(..., description="설정 키"),
    db: SQLiteAdapter = Depends(get_db),
) -> ConfigResponse:
    """설정 조회"""
    config = await ConfigService(db).get_config(key)

    if not config:
        raise HTTPException(
            status_code=404,
            detail=f"Config not found: {key}"
        )

    return ConfigResponse(**config)
