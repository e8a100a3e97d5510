"""
재시도 유틸리티

"아직 준비되지 않음(None)"을 반환하는 조회를 제한된 횟수만큼
지수 백오프로 재시도. 아이템 메타데이터 캐시 대기 등에 사용.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from core.constants import Retry

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """재시도 정책

    Attributes:
        max_attempts: 최대 시도 횟수 (첫 시도 포함)
        base_delay: 첫 재시도 전 대기 (초)
        backoff: 대기 배수 (1.0이면 고정 간격)
        max_delay: 대기 상한 (초)
    """

    max_attempts: int = Retry.MAX_ATTEMPTS
    base_delay: float = Retry.BASE_DELAY_SEC
    backoff: float = Retry.BACKOFF
    max_delay: float = Retry.MAX_DELAY_SEC

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts는 1 이상이어야 합니다: {self.max_attempts}")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("대기 시간은 음수일 수 없습니다")
        if self.backoff < 1.0:
            raise ValueError(f"backoff는 1.0 이상이어야 합니다: {self.backoff}")

    def delay_for(self, attempt: int) -> float:
        """attempt번째 실패 후 대기 시간

        Args:
            attempt: 실패한 시도 번호 (1부터)

        Returns:
            대기 시간 (초)
        """
        delay = self.base_delay * (self.backoff ** (attempt - 1))
        return min(delay, self.max_delay)


async def retry_until_ready(
    fetch: Callable[[], T | None | Awaitable[T | None]],
    policy: RetryPolicy | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    label: str = "",
) -> T | None:
    """준비될 때까지 재시도

    fetch가 None이 아닌 값을 반환하면 즉시 반환.
    최대 시도 횟수를 넘기면 None 반환 (예외 아님).

    Args:
        fetch: 조회 함수 (동기/비동기 모두 가능, 미준비 시 None)
        policy: 재시도 정책 (None이면 기본값)
        sleep: 대기 함수 (테스트에서 교체 가능)
        label: 로그용 식별자

    Returns:
        조회 결과 또는 None (재시도 소진)

    사용 예시:
    ```python
    metadata = await retry_until_ready(
        lambda: host.lookup_item_metadata(item_id),
        label=f"item:{item_id}",
    )
    ```
    """
    policy = policy or RetryPolicy()

    for attempt in range(1, policy.max_attempts + 1):
        result = fetch()
        if inspect.isawaitable(result):
            result = await result

        if result is not None:
            if attempt > 1:
                logger.debug(f"재시도 성공: {label}", extra={"attempt": attempt})
            return result

        if attempt < policy.max_attempts:
            await sleep(policy.delay_for(attempt))

    logger.warning(
        f"재시도 소진: {label}",
        extra={"attempts": policy.max_attempts},
    )
    return None
