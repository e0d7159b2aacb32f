"""
小米运动导出
"""
from slam.integrations.xiaomi.parser import XiaomiParser

__all__ = ["XiaomiParser"]
