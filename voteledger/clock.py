# voteledger/clock.py
# Time source for phase checks. Timestamps are integer unix seconds.
import time


class SystemClock:
    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to. Used by tests and dry runs."""

    def __init__(self, now: int = 0):
        self._now = int(now)

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int):
        self._now = int(timestamp)

    def advance(self, seconds: int):
        self._now += int(seconds)
