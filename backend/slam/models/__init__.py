"""
数据库模型
"""
from slam.models.sport import SportRow

__all__ = [
    "SportRow",
]
