"""
日期时间辅助函数
"""
from datetime import datetime, timezone
from typing import Optional
import pytz

from slam.config import settings

# datetime 能表示的 epoch 秒上界（9999-12-31 23:59:59 UTC）
MAX_TIMESTAMP = 253402300799
MIN_TIMESTAMP = -62135596800


def server_tz(name: Optional[str] = None):
    """获取服务器时区（默认取配置中的TZ）"""
    return pytz.timezone(name or settings.TZ)


def utc_datetime(ts: int) -> Optional[datetime]:
    """epoch 秒转 UTC datetime，超出可表示范围时返回None"""
    if ts < MIN_TIMESTAMP or ts > MAX_TIMESTAMP:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def year_of_timestamp(ts: int) -> Optional[int]:
    """epoch 秒所在的 UTC 年份"""
    dt = utc_datetime(ts)
    return dt.year if dt else None


def utc_timestamp(year: int, month: int = 1, day: int = 1) -> int:
    """UTC 零点的 epoch 秒"""
    return int(datetime(year, month, day, tzinfo=timezone.utc).timestamp())


def format_local(ts: int, tz_name: Optional[str] = None) -> str:
    """epoch 秒格式化为服务器时区的 YYYY-MM-DD HH:MM:SS"""
    dt = datetime.fromtimestamp(ts, tz=pytz.utc).astimezone(server_tz(tz_name))
    return dt.strftime("%Y-%m-%d %H:%M:%S")
