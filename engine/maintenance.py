"""
Ledger Purge Poller

보관 기간(ConfigStore "ledger".max_age_days)이 지난 Transaction을 주기적으로 삭제.
시작 후 initial_purge_delay_sec에 첫 실행, 이후 purge_interval_sec마다 실행.
"""

import logging
import time
from typing import Any, Callable

from core.constants import LedgerDefaults
from core.ledger.store import LedgerStore
from core.storage.config_store import ConfigStore

logger = logging.getLogger(__name__)


class LedgerPurgePoller:
    """보관 기간 정리 Poller

    Args:
        ledger_store: Ledger 저장소
        config_store: 설정 저장소 (보관 기간, 실행 간격)
        clock: 단조 시계 (테스트에서 가상 시계로 교체)

    사용 예시:
    ```python
    poller = LedgerPurgePoller(ledger_store, config_store)
    await poller.initialize()

    # 메인 루프에서 주기적 호출
    if await poller.should_poll():
        result = await poller.poll()
    ```
    """

    poller_name = "ledger_purge"

    def __init__(
        self,
        ledger_store: LedgerStore,
        config_store: ConfigStore,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ledger_store = ledger_store
        self.config_store = config_store
        self._clock = clock

        self.interval_sec: float = LedgerDefaults.PURGE_INTERVAL_SEC
        self._next_due: float | None = None
        self._is_running = False
        self.total_purged = 0

    async def initialize(self) -> None:
        """설정 로드 및 첫 실행 시각 예약"""
        config = await self.config_store.get("ledger")
        self.interval_sec = float(config.get("purge_interval_sec", LedgerDefaults.PURGE_INTERVAL_SEC))
        initial_delay = float(
            config.get("initial_purge_delay_sec", LedgerDefaults.INITIAL_PURGE_DELAY_SEC)
        )
        self._next_due = self._clock() + initial_delay

        logger.info(
            f"{self.poller_name} Poller 초기화",
            extra={"interval_sec": self.interval_sec, "initial_delay_sec": initial_delay},
        )

    async def should_poll(self) -> bool:
        """실행 시각 도달 여부"""
        if self._is_running or self._next_due is None:
            return False
        return self._clock() >= self._next_due

    async def poll(self) -> dict[str, Any]:
        """정리 실행

        Returns:
            {"purged": int, "duration_ms": float} (실패 시 "error" 포함)
        """
        if self._is_running:
            logger.warning(f"{self.poller_name} Poller가 이미 실행 중입니다")
            return {"purged": 0, "skipped": True}

        self._is_running = True
        started = self._clock()

        try:
            purged = await self._do_poll()
            self.total_purged += purged
            await self.config_store.mark_purged()

            duration_ms = (self._clock() - started) * 1000
            if purged > 0:
                logger.info(
                    f"{self.poller_name} Poller 완료",
                    extra={"purged": purged, "duration_ms": duration_ms},
                )
            else:
                logger.debug(f"{self.poller_name} Poller 완료: 삭제 대상 없음")
            return {"purged": purged, "duration_ms": duration_ms}

        except Exception as e:
            logger.error(
                f"{self.poller_name} Poller 실패",
                extra={"error": str(e)},
                exc_info=True,
            )
            return {"purged": 0, "error": str(e)}

        finally:
            self._next_due = self._clock() + self.interval_sec
            self._is_running = False

    async def _do_poll(self) -> int:
        max_age_days = await self.config_store.get_max_age_days()
        return await self.ledger_store.purge_older_than(max_age_days)

    async def stop(self) -> None:
        """Poller 정지"""
        self._next_due = None
        logger.info(f"{self.poller_name} Poller 정지", extra={"total_purged": self.total_purged})
