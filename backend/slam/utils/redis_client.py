"""
Redis客户端
"""
from typing import Optional
from redis.asyncio import Redis
from slam.config import settings


def create_redis(url: Optional[str] = None) -> Redis:
    """创建Redis异步客户端（连接在首次使用时建立）"""
    return Redis.from_url(
        url or settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
    )
