"""
SLAM 运动记录核心：记录模型、解析、统计与缓存
"""

__version__ = "0.3.0"
