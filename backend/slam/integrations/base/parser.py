"""
厂商导出文件解析抽象接口
"""
import csv
from abc import ABC, abstractmethod
from typing import List

from slam.schemas.sport import SportRecord


class VendorFileParser(ABC):
    """厂商CSV解析器抽象接口，每个厂商自行决定列结构与过滤规则"""

    @property
    @abstractmethod
    def name(self) -> str:
        """厂商名称（小写）"""
        pass

    @abstractmethod
    def parse(self, reader: csv.DictReader) -> List[SportRecord]:
        """
        解析CSV行为运动记录

        Args:
            reader: 以表头为键的CSV读取器

        Returns:
            运动记录列表（无法解析的行直接跳过）
        """
        pass
