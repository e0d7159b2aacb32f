"""
厂商解析器工厂 - 按厂商名分发
"""
import csv
import io
import logging
from typing import Dict, List, Type, Union

from slam.exceptions import UnsupportedVendorError
from slam.integrations.base import VendorFileParser
from slam.integrations.xiaomi import XiaomiParser
from slam.schemas.sport import SportRecord

logger = logging.getLogger(__name__)


class VendorParserFactory:
    """厂商解析器工厂"""

    _parsers: Dict[str, Type[VendorFileParser]] = {
        "xiaomi": XiaomiParser,
        # 未来可扩展
        # "huawei": HuaweiParser,
    }

    @classmethod
    def register(cls, vendor: str, parser_class: Type[VendorFileParser]) -> None:
        """注册新厂商解析器"""
        cls._parsers[vendor.lower()] = parser_class

    @classmethod
    def available(cls) -> List[str]:
        return sorted(cls._parsers.keys())

    @classmethod
    def create(cls, vendor: str) -> VendorFileParser:
        """
        创建厂商解析器

        Args:
            vendor: 厂商名称（大小写不敏感）

        Raises:
            UnsupportedVendorError: 未知的厂商
        """
        parser_class = cls._parsers.get((vendor or "").strip().lower())
        if not parser_class:
            logger.error(f"不支持的厂商: {vendor}. 可用: {', '.join(cls.available())}")
            raise UnsupportedVendorError(vendor)
        return parser_class()


def open_csv(data: Union[str, bytes]) -> csv.DictReader:
    """上传内容转为CSV读取器（bytes 按 UTF-8 解码，兼容BOM）"""
    if isinstance(data, bytes):
        data = data.decode("utf-8-sig", errors="replace")
    elif data.startswith("\ufeff"):
        data = data[1:]
    return csv.DictReader(io.StringIO(data))


def parse_sports_from_csv(vendor: str, reader: csv.DictReader) -> List[SportRecord]:
    """
    按厂商解析CSV

    Raises:
        UnsupportedVendorError: 未知的厂商
    """
    return VendorParserFactory.create(vendor).parse(reader)
