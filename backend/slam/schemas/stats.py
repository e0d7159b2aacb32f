"""
统计 Schemas
"""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from slam.schemas.sport import SportKind, SportRecord


class StatKind(str, Enum):
    """统计范围"""

    YEAR = "year"
    MONTH = "month"
    WEEK = "week"
    TOTAL = "total"


class StatsParam(BaseModel):
    """统计请求参数"""

    kind: StatKind
    year: int = 0
    month: Optional[int] = None
    week: Optional[int] = None  # ISO 周序号


class StatBucket(BaseModel):
    """时间分桶（月份 / 日 / 星期几）"""

    date: int
    duration: int = 0
    calories: int = 0
    count: int = 0


class TypeBucket(BaseModel):
    """按运动类型汇总"""

    model_config = ConfigDict(populate_by_name=True)

    kind: SportKind = Field(alias="type")
    duration: int = 0
    calories: int = 0
    count: int = 0
    distance_meter: int = 0


class StatSummary(BaseModel):
    """统计结果"""

    buckets: List[StatBucket] = Field(default_factory=list)
    type_buckets: List[TypeBucket] = Field(default_factory=list)
    total_count: int = 0
    total_calories: int = 0
    total_duration_second: int = 0
    total_distance_meter: int = 0
    sports: List[SportRecord] = Field(default_factory=list)  # Total 范围不返回明细
    earliest_year: Optional[int] = None  # 仅年度统计填充
