"""
Balance Tracker

장소가 열릴 때 소지금을 기준값으로 저장하고,
잔고 변화 신호마다 (현재 - 기준) 변화량을 계산한 뒤 기준값을 갱신.
호스트 잔고 조회는 권위 있는 동기 호출이므로 변화량은 정확함.
"""

from adapters.interfaces import IGameHost


class BalanceTracker:
    """장소별 잔고 변화량 계산기

    Args:
        host: 게임 호스트

    사용 예시:
    ```python
    tracker = BalanceTracker(host)
    tracker.open()                        # 기준값 = 1000
    delta = tracker.on_balance_changed()  # 1300 - 1000 = 300, 기준값 = 1300
    ```
    """

    def __init__(self, host: IGameHost):
        self.host = host
        self._baseline: int | None = None

    @property
    def baseline(self) -> int | None:
        """현재 기준값 (닫혀 있으면 None)"""
        return self._baseline

    @property
    def is_active(self) -> bool:
        return self._baseline is not None

    def open(self) -> int:
        """현재 잔고를 기준값으로 저장"""
        self._baseline = self.host.get_balance()
        return self._baseline

    def on_balance_changed(self, balance: int | None = None) -> int:
        """변화량 계산 및 기준값 갱신

        Args:
            balance: 이미 조회한 잔고 (None이면 호스트에서 조회)

        Returns:
            현재 - 기준 (기준값이 없으면 기준만 잡고 0)
        """
        current = self.host.get_balance() if balance is None else balance
        if self._baseline is None:
            self._baseline = current
            return 0

        delta = current - self._baseline
        self._baseline = current
        return delta

    def close(self) -> None:
        """기준값 폐기"""
        self._baseline = None
