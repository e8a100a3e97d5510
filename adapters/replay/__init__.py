"""
세션 재생 어댑터

기록된 호스트 이벤트(JSONL)를 읽어 엔진에 다시 흘려보내기 위한 호스트 구현.
"""

from adapters.replay.host import ReplayHost
from adapters.replay.session import (
    HostState,
    ReplaySessionError,
    ReplayStep,
    load_catalog,
    load_session,
    parse_step,
)

__all__ = [
    "ReplayHost",
    "HostState",
    "ReplaySessionError",
    "ReplayStep",
    "load_catalog",
    "load_session",
    "parse_step",
]
