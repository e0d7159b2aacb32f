"""
运动记录存储
"""
from slam.repositories.base import SportRepository, clamp_page
from slam.repositories.memory import MemorySportRepository

__all__ = ["SportRepository", "clamp_page", "MemorySportRepository"]
