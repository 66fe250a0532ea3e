"""
Sliding-window 요청 제한기

키(클라이언트 IP / 토큰)별로 최근 window초 동안의 요청 시각을 보관.
키당 최대 limit개만 보관하는 고정 크기 deque — 메모리는 키 수 × limit로 제한.

앱 시작 시 1회 생성해서 주입 (create_app) — 모듈 전역 상태 없음.
만료된 키는 allow() 안에서 window마다 최대 1회 정리 (키 수도 최근 window 안의 클라이언트 수로 제한).
"""

import time
from collections import deque
from typing import Callable


class RateLimiter:
    def __init__(
        self,
        limit: int,
        window: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if limit < 1:
            raise ValueError(f"limit은 1 이상이어야 합니다: {limit}")
        self.limit = limit
        self.window = window
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def _expire(self, hits: deque, now: float):
        window_start = now - self.window
        while hits and hits[0] <= window_start:
            hits.popleft()

    def allow(self, key: str) -> bool:
        """요청 1건 기록. 한도 초과면 False (기록하지 않음)."""
        now = self._clock()
        if now - self._last_sweep >= self.window:
            self.sweep()
        hits = self._hits.get(key)
        if hits is None:
            hits = self._hits[key] = deque(maxlen=self.limit)
        self._expire(hits, now)

        if len(hits) >= self.limit:
            return False
        hits.append(now)
        return True

    def remaining(self, key: str) -> int:
        hits = self._hits.get(key)
        if not hits:
            return self.limit
        self._expire(hits, self._clock())
        return self.limit - len(hits)

    def retry_after(self, key: str) -> float:
        """다음 요청이 허용될 때까지 남은 시간 (초). 지금 허용이면 0."""
        hits = self._hits.get(key)
        if not hits or len(hits) < self.limit:
            return 0.0
        return max(0.0, hits[0] + self.window - self._clock())

    def sweep(self) -> int:
        """만료된 키 정리. 제거한 키 수 반환."""
        now = self._clock()
        self._last_sweep = now
        removed = 0
        for key in list(self._hits):
            hits = self._hits[key]
            self._expire(hits, now)
            if not hits:
                del self._hits[key]
                removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._hits)
