"""
지연 콜백 스케줄러

모든 "대기"는 블로킹 없이 지연 콜백으로 표현.
콜백은 취소 가능하며, 장소가 닫히면 해당 Tracker의 타이머를 모두 취소.

- AsyncioScheduler: 실행용 (이벤트 루프 타이머)
- ManualScheduler: 테스트/재생용 가상 시계 (advance()로 시간 진행)
"""

import asyncio
import heapq
import itertools
import logging
from typing import Awaitable, Callable, Protocol

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], Awaitable[None]]


class SchedulerError(RuntimeError):
    """닫힌 스케줄러에 예약 시도"""

    pass


class TimerHandle:
    """예약된 콜백 핸들

    Attributes:
        due: 실행 예정 시각 (스케줄러 시계)
        label: 로그용 이름
    """

    __slots__ = ("due", "label", "_callback", "_cancelled", "_fired")

    def __init__(self, due: float, callback: TimerCallback, label: str = ""):
        self.due = due
        self.label = label
        self._callback = callback
        self._cancelled = False
        self._fired = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def active(self) -> bool:
        """아직 실행/취소되지 않음"""
        return not self._cancelled and not self._fired

    def cancel(self) -> bool:
        """취소

        Returns:
            실제로 취소되었으면 True (이미 실행/취소된 경우 False)
        """
        if not self.active:
            return False
        self._cancelled = True
        return True

    async def fire(self) -> None:
        """콜백 실행 (취소된 경우 무시)"""
        if not self.active:
            return
        self._fired = True
        await self._callback()

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "fired" if self._fired else "active"
        return f"TimerHandle({self.label!r}, due={self.due:.3f}, {state})"


class Scheduler(Protocol):
    """스케줄러 인터페이스"""

    def now(self) -> float:
        """단조 시계 (초)"""
        ...

    def call_later(
        self,
        delay: float,
        callback: TimerCallback,
        label: str = "",
    ) -> TimerHandle:
        """delay초 후 callback 실행 예약"""
        ...

    async def close(self) -> None:
        """남은 타이머 모두 취소"""
        ...


class AsyncioScheduler:
    """asyncio 이벤트 루프 기반 스케줄러

    loop.call_later로 예약하고, 만기 시 콜백을 Task로 실행.
    실행 중인 Task는 추적하여 close() 시 정리.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop
        self._handles: set[TimerHandle] = set()
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(
        self,
        delay: float,
        callback: TimerCallback,
        label: str = "",
    ) -> TimerHandle:
        if self._closed:
            raise SchedulerError(f"닫힌 스케줄러에 예약 시도: {label}")

        delay = max(delay, 0.0)
        handle = TimerHandle(self.now() + delay, callback, label)
        self._handles.add(handle)
        self.loop.call_later(delay, self._spawn, handle)
        return handle

    def _spawn(self, handle: TimerHandle) -> None:
        self._handles.discard(handle)
        if not handle.active:
            return
        task = self.loop.create_task(handle.fire())
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"지연 콜백 실패: {error}",
                exc_info=(type(error), error, error.__traceback__),
            )

    @property
    def pending_count(self) -> int:
        """대기 중인 타이머 수"""
        return sum(1 for h in self._handles if h.active)

    async def drain(self) -> None:
        """실행 중인 콜백 Task 완료 대기"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """모든 타이머 취소 및 실행 중 Task 정리"""
        self._closed = True
        for handle in list(self._handles):
            handle.cancel()
        self._handles.clear()

        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()


class ManualScheduler:
    """가상 시계 스케줄러

    advance()가 호출될 때만 시간이 흐름. 만기된 콜백은 정확히 예정 시각에
    (now()가 due와 같은 상태로) 순서대로 실행.

    사용 예시:
    ```python
    scheduler = ManualScheduler()
    scheduler.call_later(0.5, on_timeout)

    await scheduler.advance(0.499)  # 실행 안 됨
    await scheduler.advance(0.002)  # on_timeout 실행
    ```
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()
        self._closed = False

    def now(self) -> float:
        return self._now

    def call_later(
        self,
        delay: float,
        callback: TimerCallback,
        label: str = "",
    ) -> TimerHandle:
        if self._closed:
            raise SchedulerError(f"닫힌 스케줄러에 예약 시도: {label}")

        handle = TimerHandle(self._now + max(delay, 0.0), callback, label)
        heapq.heappush(self._queue, (handle.due, next(self._counter), handle))
        return handle

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, h in self._queue if h.active)

    async def advance(self, seconds: float) -> int:
        """시간 진행

        콜백 안에서 새로 예약된 타이머도 목표 시각 이전이면 실행.

        Args:
            seconds: 진행할 시간 (초, 음수 불가)

        Returns:
            실행된 콜백 수
        """
        if seconds < 0:
            raise ValueError(f"시간을 되돌릴 수 없습니다: {seconds}")
        return await self.advance_to(self._now + seconds)

    async def advance_to(self, target: float) -> int:
        """절대 시각까지 진행"""
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self._now = max(self._now, due)
            await handle.fire()
            fired += 1

        self._now = max(self._now, target)
        return fired

    async def close(self) -> None:
        self._closed = True
        for _, _, handle in self._queue:
            handle.cancel()
        self._queue.clear()


class TimerGroup:
    """Tracker 소유 타이머 묶음

    장소가 닫힐 때 cancel_all()로 한 번에 취소.

    Args:
        schedule: 예약 함수 (delay, callback, label) -> TimerHandle
        owner: 로그용 소유자 이름
    """

    def __init__(
        self,
        schedule: Callable[[float, TimerCallback, str], TimerHandle],
        owner: str = "",
    ):
        self._schedule = schedule
        self._owner = owner
        self._handles: dict[str, TimerHandle] = {}

    def start(self, name: str, delay: float, callback: TimerCallback) -> TimerHandle:
        """이름 있는 타이머 시작 (같은 이름의 기존 타이머는 취소 = 디바운스)"""
        self.cancel(name)
        handle = self._schedule(delay, callback, f"{self._owner}:{name}")
        self._handles[name] = handle
        return handle

    def cancel(self, name: str) -> bool:
        handle = self._handles.pop(name, None)
        return handle.cancel() if handle else False

    def is_active(self, name: str) -> bool:
        handle = self._handles.get(name)
        return handle is not None and handle.active

    def cancel_all(self) -> int:
        """모든 타이머 취소

        Returns:
            실제로 취소된 타이머 수
        """
        cancelled = sum(1 for handle in self._handles.values() if handle.cancel())
        self._handles.clear()
        if cancelled:
            logger.debug(f"{self._owner} 타이머 {cancelled}개 취소")
        return cancelled

    @property
    def active_count(self) -> int:
        return sum(1 for handle in self._handles.values() if handle.active)
