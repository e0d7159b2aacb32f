"""
进程内统计结果缓存
"""
import asyncio
import time
from typing import Dict, Hashable, Optional, Tuple

from slam.cache.base import ResultCache
from slam.schemas.stats import StatSummary


class MemoryResultCache(ResultCache[Hashable]):
    """
    进程内缓存，生命周期与进程相同

    每张表一把锁，读写都串行化；存取时深拷贝，调用方修改返回值不会污染缓存。
    """

    def __init__(self, ttl: Optional[int] = None):
        self.ttl = ttl
        self._entries: Dict[Hashable, Tuple[Optional[float], StatSummary]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: Hashable) -> Optional[StatSummary]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at is not None and expires_at <= time.monotonic():
                del self._entries[key]
                return None
            return value.model_copy(deep=True)

    async def set(self, key: Hashable, value: StatSummary) -> None:
        expires_at = time.monotonic() + self.ttl if self.ttl else None
        async with self._lock:
            self._entries[key] = (expires_at, value.model_copy(deep=True))

    async def invalidate(self, key: Hashable) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)
