"""
아이템 메타데이터 카탈로그

호스트 메타데이터 조회 결과를 캐시.
호스트가 "미준비(None)"를 반환하면 백그라운드에서 제한 횟수만큼 재시도.

평가 시점에는 peek()만 사용 (캐시에 없으면 "가치 미상"으로 처리).
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable

from adapters.interfaces import IGameHost
from adapters.models import ItemMetadata
from core.utils.retry import RetryPolicy, retry_until_ready

logger = logging.getLogger(__name__)


class ItemCatalog:
    """아이템 메타데이터 캐시

    Args:
        host: 게임 호스트
        policy: 미준비 재시도 정책
        sleep: 재시도 대기 함수 (테스트에서 교체)

    사용 예시:
    ```python
    catalog = ItemCatalog(host)
    catalog.prefetch([2589, 2592])   # 스냅샷 시점에 조회 시작

    meta = catalog.peek(2589)        # 평가 시점: 캐시만 확인
    value = catalog.vendor_value(2589)
    ```
    """

    def __init__(
        self,
        host: IGameHost,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.host = host
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._cache: dict[int, ItemMetadata] = {}
        self._tasks: dict[int, asyncio.Task] = {}
        self._exhausted: set[int] = set()

    def peek(self, item_id: int) -> ItemMetadata | None:
        """캐시 조회만 수행"""
        return self._cache.get(item_id)

    def lookup(self, item_id: int) -> ItemMetadata | None:
        """캐시 → 호스트 1회 조회

        미준비면 백그라운드 재시도를 시작하고 None 반환.
        """
        cached = self._cache.get(item_id)
        if cached is not None:
            return cached

        metadata = self.host.lookup_item_metadata(item_id)
        if metadata is not None:
            self._cache[item_id] = metadata
            return metadata

        self._schedule_retry(item_id)
        return None

    def prefetch(self, item_ids: Iterable[int]) -> None:
        """여러 아이템 조회 시작"""
        for item_id in item_ids:
            self.lookup(item_id)

    def vendor_value(self, item_id: int) -> int | None:
        """상점 판매가 (개당). 미상이면 None"""
        metadata = self.peek(item_id)
        return metadata.vendor_unit_value if metadata else None

    def is_pending(self, item_id: int) -> bool:
        """재시도 진행 중 여부"""
        task = self._tasks.get(item_id)
        return task is not None and not task.done()

    def is_exhausted(self, item_id: int) -> bool:
        """재시도 소진 여부 (최소 정보로만 기록)"""
        return item_id in self._exhausted

    def _schedule_retry(self, item_id: int) -> None:
        if self.is_pending(item_id) or item_id in self._exhausted:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # 동기 호출 (루프 없음): 다음 lookup에서 다시 시도
            return

        task = loop.create_task(self._retry(item_id))
        self._tasks[item_id] = task
        task.add_done_callback(lambda t, i=item_id: self._tasks.pop(i, None))

    async def _retry(self, item_id: int) -> None:
        metadata = await retry_until_ready(
            lambda: self.host.lookup_item_metadata(item_id),
            policy=self.policy,
            sleep=self._sleep,
            label=f"item:{item_id}",
        )
        if metadata is None:
            self._exhausted.add(item_id)
            return

        self._cache[item_id] = metadata
        logger.debug(f"아이템 메타데이터 확보: {metadata.name}", extra={"item_id": item_id})

    async def wait_pending(self) -> None:
        """진행 중인 재시도 완료 대기"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()))

    async def close(self) -> None:
        """재시도 Task 취소"""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    def __len__(self) -> int:
        return len(self._cache)
