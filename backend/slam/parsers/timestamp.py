"""
时间字符串解析

按顺序尝试以下格式，第一个成功者胜出：
    YYYY-MM-DD HH:MM:SS
    YYYY-MM-DD HH:MM
    YYYY-MM-DD HH
    YYYY-MM-DD          （当天零点）

本地时间按服务器时区解释；夏令时回拨导致的重复时刻取最早的那个，
跳过（不存在）的时刻视为该格式不匹配。
"""
import logging
from datetime import datetime
from typing import List, Optional

import pytz

from slam.exceptions import BadTimestampError
from slam.utils.datetime_helper import server_tz

logger = logging.getLogger(__name__)

TIMESTAMP_FORMATS: List[str] = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H",
    "%Y-%m-%d",
]


def _earliest_local(naive: datetime, tz) -> Optional[datetime]:
    """本地时间映射到最早的有效时刻"""
    try:
        return tz.localize(naive, is_dst=None)
    except pytz.exceptions.AmbiguousTimeError:
        candidates = [tz.localize(naive, is_dst=True), tz.localize(naive, is_dst=False)]
        return min(candidates, key=lambda dt: dt.timestamp())
    except pytz.exceptions.NonExistentTimeError:
        return None


def parse_timestamp(value: str, tz_name: Optional[str] = None) -> int:
    """
    解析时间字符串为 epoch 秒

    Args:
        value: 时间字符串
        tz_name: 时区名（默认取配置中的TZ）

    Returns:
        epoch 秒

    Raises:
        BadTimestampError: 所有格式均不匹配
    """
    tz = server_tz(tz_name)
    text = (value or "").strip()
    for fmt in TIMESTAMP_FORMATS:
        try:
            naive = datetime.strptime(text, fmt)
        except ValueError:
            continue
        local = _earliest_local(naive, tz)
        if local is not None:
            return int(local.timestamp())
        logger.debug(f"本地时间不存在（夏令时跳变）: {text} fmt={fmt}")
    raise BadTimestampError(value)
