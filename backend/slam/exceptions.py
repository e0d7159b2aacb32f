"""
业务异常定义
"""
from typing import Optional


class SlamError(Exception):
    """所有业务异常的基类"""

    code: int = 500

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return self.message


class ParseError(SlamError):
    """XML/文本解析失败，本次录入作废"""

    code = 400


class BadTimestampError(ParseError):
    """时间字符串不符合任何已知格式"""

    def __init__(self, value: str):
        super().__init__(f"时间格式错误: {value!r}")
        self.value = value


class ValidationError(SlamError):
    """调用方参数错误（月份/周数/ID/类型不一致等）"""

    code = 400


class UnsupportedVendorError(SlamError):
    """不支持的导入厂商"""

    code = 400

    def __init__(self, vendor: str):
        super().__init__(f"unsupported vendor: {vendor}")
        self.vendor = vendor


class RepositoryError(SlamError):
    """存储层错误，消息原样透传"""


class RecognitionError(SlamError):
    """AI识别调用失败"""

    code = 502


class CacheError(SlamError):
    """统计缓存失效失败（存储写入已提交，缓存可能残留旧结果）"""
