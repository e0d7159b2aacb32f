"""
AI识别XML的原始结构

LLM 可能漏读任意字段，因此 extra 的所有字段都是可选的；
顶层的 type、start_time 与数值字段必须存在。
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class XMLSportExtra(BaseModel):
    """extra 原始字段（游泳与跑步字段的并集）"""

    main_stroke: Optional[str] = None
    stroke_avg: Optional[int] = None
    swolf_avg: Optional[int] = None
    speed_avg: Optional[float] = None
    cadence_avg: Optional[int] = None
    stride_length_avg: Optional[int] = None
    steps_total: Optional[int] = None
    pace_min: Optional[str] = None
    pace_max: Optional[str] = None


class XMLSportTrack(BaseModel):
    """分段原始结构"""

    distance_meter: int = 0
    duration_second: int = 0
    pace_average: str = ""
    extra: Optional[XMLSportExtra] = None


class SportXML(BaseModel):
    """<sport> 根元素"""

    type: str
    start_time: str
    calories: int
    distance_meter: int
    duration_second: int
    heart_rate_avg: int
    heart_rate_max: int
    pace_average: str = ""
    extra: Optional[XMLSportExtra] = None
    tracks: List[XMLSportTrack] = Field(default_factory=list)
