"""
运动统计计算引擎

统计窗口一律为 [start, end) 的 epoch 秒区间，按 UTC 划分：
    Year  -> 当年1月1日 ~ 次年1月1日，按月分桶（1-12）
    Month -> 当月1日 ~ 次月1日，按日分桶
    Week  -> ISO 周一 ~ 下周一，按星期分桶（周一=1）
    Total -> [0, 2^63-1)，不分桶
"""
import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from slam.exceptions import ValidationError
from slam.schemas.sport import SportKind, SportRecord
from slam.schemas.stats import StatBucket, StatKind, StatsParam, StatSummary, TypeBucket
from slam.utils.datetime_helper import utc_datetime, utc_timestamp

logger = logging.getLogger(__name__)

TOTAL_WINDOW: Tuple[int, int] = (0, 2 ** 63 - 1)


def _check_year(year: int) -> None:
    # 次年1月1日也必须可表示
    if not 1 <= year <= 9998:
        raise ValidationError("invalid year")


def resolve_window(param: StatsParam) -> Tuple[int, int]:
    """
    计算统计窗口

    Raises:
        ValidationError: 缺少或非法的月份/周数/年份
    """
    if param.kind == StatKind.TOTAL:
        return TOTAL_WINDOW

    _check_year(param.year)
    year = param.year

    if param.kind == StatKind.YEAR:
        return utc_timestamp(year), utc_timestamp(year + 1)

    if param.kind == StatKind.MONTH:
        month = param.month
        if month is None or not 1 <= month <= 12:
            raise ValidationError("invalid month")
        next_year, next_month = (year + 1, 1) if month == 12 else (year, month + 1)
        return utc_timestamp(year, month), utc_timestamp(next_year, next_month)

    if param.kind == StatKind.WEEK:
        if param.week is None:
            raise ValidationError("invalid week")
        try:
            monday = date.fromisocalendar(year, param.week, 1)
        except ValueError:
            raise ValidationError("invalid iso week")
        start = datetime(monday.year, monday.month, monday.day, tzinfo=timezone.utc)
        end = start + timedelta(days=7)
        return int(start.timestamp()), int(end.timestamp())

    raise ValidationError(f"invalid kind: {param.kind}")


def _group_by_key(items: Iterable[SportRecord], key: Callable[[datetime], int]) -> List[StatBucket]:
    acc: Dict[int, StatBucket] = {}
    for sport in items:
        dt = utc_datetime(sport.start_time)
        if dt is None:
            logger.warning(f"记录时间超出可表示范围，不参与分桶: id={sport.id}, start_time={sport.start_time}")
            continue
        k = key(dt)
        bucket = acc.get(k)
        if bucket is None:
            bucket = acc[k] = StatBucket(date=k)
        bucket.count += 1
        bucket.duration += sport.duration_second
        bucket.calories += sport.calories
    return sorted(acc.values(), key=lambda b: b.date)


def group_by_month(items: Iterable[SportRecord]) -> List[StatBucket]:
    return _group_by_key(items, lambda dt: dt.month)


def group_by_month_day(items: Iterable[SportRecord]) -> List[StatBucket]:
    return _group_by_key(items, lambda dt: dt.day)


def group_by_week_day(items: Iterable[SportRecord]) -> List[StatBucket]:
    return _group_by_key(items, lambda dt: dt.isoweekday())


def group_by_type(items: Iterable[SportRecord]) -> List[TypeBucket]:
    """按运动类型汇总，按类型名排序"""
    acc: Dict[SportKind, TypeBucket] = {}
    for sport in items:
        bucket = acc.get(sport.kind)
        if bucket is None:
            bucket = acc[sport.kind] = TypeBucket(kind=sport.kind)
        bucket.count += 1
        bucket.duration += sport.duration_second
        bucket.calories += sport.calories
        bucket.distance_meter += sport.distance_meter
    return sorted(acc.values(), key=lambda b: b.kind.value)


TIME_GROUPERS: Dict[StatKind, Callable[[Iterable[SportRecord]], List[StatBucket]]] = {
    StatKind.YEAR: group_by_month,
    StatKind.MONTH: group_by_month_day,
    StatKind.WEEK: group_by_week_day,
}


def summarize(kind: StatKind, sports: List[SportRecord], earliest_year: Optional[int] = None) -> StatSummary:
    """
    汇总窗口内的记录

    Args:
        kind: 统计范围
        sports: 窗口内的全部记录
        earliest_year: 用户最早记录所在年份（仅年度统计）

    Returns:
        统计结果；Total 范围不携带明细
    """
    grouper = TIME_GROUPERS.get(kind)
    return StatSummary(
        buckets=grouper(sports) if grouper else [],
        type_buckets=group_by_type(sports),
        total_count=len(sports),
        total_calories=sum(s.calories for s in sports),
        total_duration_second=sum(s.duration_second for s in sports),
        total_distance_meter=sum(s.distance_meter for s in sports),
        sports=[] if kind == StatKind.TOTAL else list(sports),
        earliest_year=earliest_year if kind == StatKind.YEAR else None,
    )
