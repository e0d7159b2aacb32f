"""
数据库会话管理
"""
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from slam.config import settings


def create_engine(url: Optional[str] = None, debug: Optional[bool] = None) -> AsyncEngine:
    """创建异步引擎"""
    url = url or settings.DATABASE_URL
    debug = settings.DEBUG if debug is None else debug

    engine_kwargs = {
        "echo": debug,
    }

    # SQLite 与 DEBUG 模式不使用连接池
    if debug or url.startswith("sqlite"):
        engine_kwargs["poolclass"] = NullPool
    else:
        engine_kwargs["pool_pre_ping"] = True
        engine_kwargs["pool_size"] = 10
        engine_kwargs["max_overflow"] = 20

    return create_async_engine(url, **engine_kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """创建异步会话工厂"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
