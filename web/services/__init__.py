"""
Web 서비스 패키지

조회 로직 처리
"""

from web.services.config_service import ConfigService
from web.services.ledger_service import LedgerService

__all__ = [
    "ConfigService",
    "LedgerService",
]
