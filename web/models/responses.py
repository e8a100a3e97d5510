"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    character_key: str = Field(..., description="기록 대상 캐릭터")
    version: str = Field(..., description="버전")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")


class TransactionResponse(BaseModel):
    """거래 1건"""

    seq: int | None = Field(default=None, description="추가 순서")
    kind: str = Field(..., description="거래 유형")
    label: str = Field(..., description="표시 라벨")
    character_key: str = Field(..., description="캐릭터 키")
    value: int = Field(..., description="금액 (copper, 부호 있음)")
    money: str = Field(..., description="금액 표시 (예: +1g 2s 3c)")
    timestamp: datetime = Field(..., description="기록 시간 (UTC)")
    item_id: int | None = Field(default=None, description="아이템 ID")
    item_link: str | None = Field(default=None, description="아이템 링크")
    quantity: int | None = Field(default=None, description="수량")
    source: str | None = Field(default=None, description="출처 (NPC, 상대, 목적지 등)")


class TransactionListResponse(BaseModel):
    """거래 목록 응답"""

    transactions: list[TransactionResponse] = Field(default_factory=list)
    total_count: int = Field(..., description="필터에 매칭되는 전체 건수")
    limit: int = Field(..., description="조회 개수 제한")
    offset: int = Field(..., description="시작 위치")


class SummaryResponse(BaseModel):
    """수입/지출 요약"""

    total_income: int = Field(..., description="총 수입 (copper)")
    total_expense: int = Field(..., description="총 지출 (copper, 양수)")
    transfers_in: int = Field(..., description="본인 자금 입금")
    transfers_out: int = Field(..., description="본인 자금 출금")
    net: int = Field(..., description="순수익")
    count: int = Field(..., description="거래 건수")
    counts_by_kind: dict[str, int] = Field(default_factory=dict)
    text: str = Field(..., description="요약 문자열")


class KindResponse(BaseModel):
    """거래 유형 메타데이터"""

    kind: str
    label: str
    sign: int = Field(..., description="1: 수입, -1: 지출, 0: 금액 없음")
    is_transfer: bool


class PresetResponse(BaseModel):
    """필터 프리셋"""

    label: str
    kinds: list[str] | None = Field(default=None, description="None이면 전체 유형")


class KindsResponse(BaseModel):
    """유형 목록 + 유형/기간 프리셋"""

    kinds: list[KindResponse]
    type_presets: list[PresetResponse]
    date_presets: list[str]


class ConfigResponse(BaseModel):
    """설정 응답"""

    key: str = Field(..., description="설정 키")
    value: dict[str, Any] = Field(..., description="설정 값")
    version: int = Field(..., description="버전")
    updated_at: str = Field(..., description="마지막 업데이트 시간")
    updated_by: str = Field(..., description="마지막 업데이트 주체")
