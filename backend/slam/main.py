"""
应用装配：日志、存储、缓存、服务

所有组件在启动时显式构建并注入，缓存生命周期与进程相同。
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Tuple

from slam.ai.base import ChatClient
from slam.ai.providers.openai_compat import OpenAICompatibleChatClient
from slam.cache.base import ResultCache
from slam.cache.memory import MemoryResultCache
from slam.cache.redis import RedisResultCache
from slam.config import Settings, settings as default_settings
from slam.database.base import Base
from slam.database.session import create_engine, create_session_factory
from slam.repositories.sport import SqlSportRepository
from slam.services.recognition_service import SportRecognitionService
from slam.services.sport_service import SportService
from slam.utils.redis_client import create_redis

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings = default_settings) -> None:
    """配置日志"""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@dataclass
class AppState:
    """进程级组件"""

    sport_service: SportService
    recognition_service: SportRecognitionService
    chat_client: ChatClient


def create_stats_caches(settings: Settings = default_settings) -> Tuple[ResultCache, ResultCache]:
    """
    创建统计缓存（总量表, 年度表）

    Raises:
        ValueError: 未知的缓存后端
    """
    backend = settings.CACHE_BACKEND.lower()
    if backend == "memory":
        return MemoryResultCache(settings.cache_ttl), MemoryResultCache(settings.cache_ttl)
    if backend == "redis":
        redis = create_redis(settings.REDIS_URL)
        prefix = settings.CACHE_KEY_PREFIX
        return (
            RedisResultCache(redis, f"{prefix}:total", settings.cache_ttl),
            RedisResultCache(redis, f"{prefix}:year", settings.cache_ttl),
        )
    raise ValueError(f"未知的缓存后端: {settings.CACHE_BACKEND}. 可用: memory, redis")


@asynccontextmanager
async def lifespan(
    settings: Settings = default_settings,
    chat_client: Optional[ChatClient] = None,
) -> AsyncIterator[AppState]:
    """
    应用生命周期管理

    Args:
        settings: 应用配置
        chat_client: 外部注入的对话模型客户端（由调用方负责关闭）；缺省时按配置创建并在退出时关闭
    """
    setup_logging(settings)
    logger.info(f"🚀 {settings.APP_NAME} v{settings.APP_VERSION} 启动中...")

    engine = create_engine(settings.DATABASE_URL, settings.DEBUG)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("📊 数据库表检查完成")

    cache_total, cache_year = create_stats_caches(settings)
    repository = SqlSportRepository(create_session_factory(engine))
    owns_client = chat_client is None
    if owns_client:
        chat_client = OpenAICompatibleChatClient(
            api_key=settings.AI_API_KEY,
            base_url=settings.AI_BASE_URL,
            model=settings.AI_MODEL,
        )
    state = AppState(
        sport_service=SportService(repository, cache_total, cache_year),
        recognition_service=SportRecognitionService(chat_client, tz_name=settings.TZ),
        chat_client=chat_client,
    )
    logger.info(f"✅ {settings.APP_NAME} 启动成功！cache={settings.CACHE_BACKEND}")

    try:
        yield state
    finally:
        logger.info(f"👋 {settings.APP_NAME} 关闭中...")
        if owns_client:
            await chat_client.close()
        for cache in (cache_total, cache_year):
            if isinstance(cache, RedisResultCache):
                await cache.redis.aclose()
                break
        await engine.dispose()
        logger.info("✅ 数据库连接已关闭")
