"""
厂商导出文件解析基类
"""
from slam.integrations.base.parser import VendorFileParser

__all__ = ["VendorFileParser"]
