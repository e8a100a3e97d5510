"""
Ledger API 라우트

거래 목록/요약/내보내기/유형/캐릭터 조회
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import LedgerDefaults
from core.ledger import LedgerFilter
from web.dependencies import get_db
from web.models.responses import (
    KindsResponse,
    SummaryResponse,
    TransactionListResponse,
)
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api/ledger", tags=["Ledger"])


class FilterParams:
    """공통 필터 쿼리 파라미터"""

    def __init__(
        self,
        since: datetime | None = Query(default=None, description="시작 시간 (ISO 8601)"),
        until: datetime | None = Query(default=None, description="종료 시간 (ISO 8601)"),
        period: str | None = Query(default=None, description="기간 프리셋 (Today, Last 7 Days ...)"),
        character: str | None = Query(default=None, description="캐릭터 키"),
        kind: list[str] | None = Query(default=None, description="거래 유형 (반복 가능)"),
        preset: str | None = Query(default=None, description="유형 프리셋 (Vendor, Mail ...)"),
        search: str | None = Query(default=None, description="아이템/출처 검색어"),
    ):
        self.since = since
        self.until = until
        self.period = period
        self.character = character
        self.kinds = kind
        self.preset = preset
        self.search = search


async def _build_filter(
    service: LedgerService,
    params: FilterParams,
    limit: int = 0,
    offset: int = 0,
) -> LedgerFilter:
    try:
        return await service.build_filter(
            since=params.since,
            until=params.until,
            period=params.period,
            character=params.character,
            kinds=params.kinds,
            preset=params.preset,
            search=params.search,
            limit=limit,
            offset=offset,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/transactions", response_model=TransactionListResponse)
async def get_transactions(
    params: FilterParams = Depends(),
    limit: int = Query(default=LedgerDefaults.QUERY_LIMIT, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    db: SQLiteAdapter = Depends(get_db),
) -> TransactionListResponse:
    """거래 목록 (최신순)"""
    service = LedgerService(db)
    flt = await _build_filter(service, params, limit, offset)
    return TransactionListResponse(**await service.list_transactions(flt))


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    params: FilterParams = Depends(),
    db: SQLiteAdapter = Depends(get_db),
) -> SummaryResponse:
    """수입/지출/순수익 요약 (이체 유형은 별도 집계)"""
    service = LedgerService(db)
    flt = await _build_filter(service, params)
    return SummaryResponse(**await service.get_summary(flt))


@router.get("/export", response_class=PlainTextResponse)
async def export_transactions(
    params: FilterParams = Depends(),
    db: SQLiteAdapter = Depends(get_db),
) -> str:
    """텍스트 내보내기"""
    service = LedgerService(db)
    flt = await _build_filter(service, params)
    return await service.export_text(flt)


@router.get("/kinds", response_model=KindsResponse)
async def get_kinds() -> KindsResponse:
    """거래 유형 목록 + 유형/기간 프리셋"""
    return KindsResponse(**LedgerService.get_kinds())


@router.get("/characters", response_model=list[str])
async def get_characters(
    db: SQLiteAdapter = Depends(get_db),
) -> list[str]:
    """기록된 캐릭터 목록"""
    return await LedgerService(db).get_characters()
