"""
스토리지 모듈

Config Store 등 런타임 설정 저장소 인터페이스 제공
(거래 기록은 core.ledger.LedgerStore)
"""

from core.storage.config_store import ConfigStore, DEFAULT_CONFIGS, init_default_configs

__all__ = [
    "ConfigStore",
    "DEFAULT_CONFIGS",
    "init_default_configs",
]
