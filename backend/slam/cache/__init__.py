"""
统计结果缓存
"""
from slam.cache.base import ResultCache, year_key
from slam.cache.memory import MemoryResultCache
from slam.cache.redis import RedisResultCache

__all__ = ["ResultCache", "year_key", "MemoryResultCache", "RedisResultCache"]
