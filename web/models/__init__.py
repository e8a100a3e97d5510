"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.responses import (
    ConfigResponse,
    HealthResponse,
    KindResponse,
    KindsResponse,
    PresetResponse,
    SummaryResponse,
    TransactionListResponse,
    TransactionResponse,
)

__all__ = [
    "ConfigResponse",
    "HealthResponse",
    "KindResponse",
    "KindsResponse",
    "PresetResponse",
    "SummaryResponse",
    "TransactionListResponse",
    "TransactionResponse",
]
