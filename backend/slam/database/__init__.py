"""
数据库配置和会话管理
"""

from slam.database.session import create_engine, create_session_factory
from slam.database.base import Base

__all__ = ["create_engine", "create_session_factory", "Base"]
