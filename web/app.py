"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import get_settings
from core.constants import VERSION
from core.logging import setup_logging
from core.storage.config_store import init_default_configs

# 로깅 설정 (콘솔 + 파일)
setup_logging("web")

from web.routes import config, health, ledger  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리

    읽기 전용 연결은 파일을 만들지 않으므로 시작 시 스키마를 먼저 준비.
    """
    settings = get_settings()

    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)
        await init_default_configs(db)

    logger.info(f"Web 시작: {settings.character_key} ({settings.db_path})")
    yield
    logger.info("Web 종료")


app = FastAPI(
    title="Gold Ledger API",
    description="캐릭터 골드/아이템 거래 Ledger 조회 API",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(ledger.router)
app.include_router(config.router)


@app.get("/", include_in_schema=False)
async def home():
    """홈페이지 (API 문서로 리다이렉트)"""
    return RedirectResponse(url="/docs")
