"""
统计结果缓存抽象接口

两张独立的表：
    total: 以 uid 为键，缓存全部时间范围的统计
    year:  以 "uid@year" 为键，缓存某一年的统计
月/周统计不缓存。缓存只由统计读取路径写入，所有写操作只做失效。
"""
from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from slam.schemas.stats import StatSummary

K = TypeVar("K")


def year_key(uid: int, year: int) -> str:
    """年度统计缓存键"""
    return f"{uid}@{year}"


class ResultCache(ABC, Generic[K]):
    """统计结果缓存接口"""

    @abstractmethod
    async def get(self, key: K) -> Optional[StatSummary]:
        """读取缓存，未命中返回None"""
        pass

    @abstractmethod
    async def set(self, key: K, value: StatSummary) -> None:
        """写入缓存"""
        pass

    @abstractmethod
    async def invalidate(self, key: K) -> None:
        """
        使缓存失效

        Raises:
            CacheError: 失效失败
        """
        pass
