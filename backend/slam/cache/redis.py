"""
Redis 统计结果缓存
"""
import logging
from typing import Hashable, Optional

from pydantic import ValidationError as PydanticValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from slam.cache.base import ResultCache
from slam.exceptions import CacheError
from slam.schemas.stats import StatSummary

logger = logging.getLogger(__name__)


class RedisResultCache(ResultCache[Hashable]):
    """
    以 JSON 形式保存 StatSummary

    读写失败只降级为未命中；失效失败抛出 CacheError，避免静默留下脏数据。
    """

    def __init__(self, redis: Redis, namespace: str, ttl: Optional[int] = None):
        self.redis = redis
        self.namespace = namespace
        self.ttl = ttl

    def _key(self, key: Hashable) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: Hashable) -> Optional[StatSummary]:
        try:
            raw = await self.redis.get(self._key(key))
        except RedisError as e:
            logger.warning(f"读取统计缓存失败: key={self._key(key)} - {str(e)}")
            return None
        if not raw:
            return None
        try:
            return StatSummary.model_validate_json(raw)
        except PydanticValidationError:
            logger.warning(f"统计缓存内容无效，已忽略: key={self._key(key)}")
            return None

    async def set(self, key: Hashable, value: StatSummary) -> None:
        try:
            await self.redis.set(self._key(key), value.model_dump_json(by_alias=True), ex=self.ttl)
        except RedisError as e:
            logger.warning(f"写入统计缓存失败: key={self._key(key)} - {str(e)}")

    async def invalidate(self, key: Hashable) -> None:
        try:
            await self.redis.delete(self._key(key))
        except RedisError as e:
            raise CacheError(f"统计缓存失效失败: key={self._key(key)} - {str(e)}")
