"""
In-process counter stores.

State lives in plain dicts owned by one event loop. Each method runs without
awaiting in the middle, so single operations are atomic with respect to other
coroutines; sequences of calls (read then append) are not, see RateLimiter.
Counts are per process and reset on restart.
"""

from typing import Dict, List, Tuple

from src.app.services.counter_store import IFailureCounter, IRateWindowStore


class InMemoryRateWindowStore(IRateWindowStore):
    def __init__(self):
        self._windows: Dict[str, List[float]] = {}

    async def recent(self, key: str, since: float) -> List[float]:
        timestamps = [ts for ts in self._windows.get(key, []) if ts > since]
        if timestamps:
            self._windows[key] = timestamps
        else:
            self._windows.pop(key, None)
        return list(timestamps)

    async def append(self, key: str, timestamp: float) -> None:
        self._windows.setdefault(key, []).append(timestamp)

    async def prune(self, since: float, prefix: str = "") -> int:
        removed = 0
        for key in [k for k in self._windows if k.startswith(prefix)]:
            timestamps = [ts for ts in self._windows[key] if ts > since]
            if timestamps:
                self._windows[key] = timestamps
            else:
                del self._windows[key]
                removed += 1
        return removed

    def clear(self) -> None:
        self._windows.clear()


class InMemoryFailureCounter(IFailureCounter):
    def __init__(self):
        # key -> (count, streak start, window length)
        self._streaks: Dict[str, Tuple[int, float, float]] = {}

    def _live(self, key: str, now: float):
        streak = self._streaks.get(key)
        if streak is None:
            return None
        count, started_at, window = streak
        if now - started_at >= window:
            del self._streaks[key]
            return None
        return streak

    async def increment(self, key: str, now: float, window_seconds: float) -> int:
        streak = self._live(key, now)
        if streak is None:
            self._streaks[key] = (1, now, window_seconds)
            return 1
        count, started_at, window = streak
        self._streaks[key] = (count + 1, started_at, window)
        return count + 1

    async def get(self, key: str, now: float) -> int:
        streak = self._live(key, now)
        return streak[0] if streak else 0

    async def reset(self, key: str) -> None:
        self._streaks.pop(key, None)

    def clear(self) -> None:
        self._streaks.clear()
