"""
运动记录 Schemas（规范模型）

所有录入路径（XML识别、厂商CSV、数据库兼容读取）最终都产出这里的 SportRecord。
extra 是按运动类型区分的联合体：游泳 -> Swimming，跑步 -> Running，其余类型没有 extra。
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Annotated, Dict, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator

from slam.exceptions import ValidationError


class SportKind(str, Enum):
    """运动类型，解码时大小写不敏感，无法识别的一律视为 Unknown"""

    UNKNOWN = "Unknown"
    SWIMMING = "Swimming"
    RUNNING = "Running"
    CYCLING = "Cycling"

    @classmethod
    def _missing_(cls, value: object) -> "SportKind":
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return cls.UNKNOWN

    @classmethod
    def from_str(cls, value: Optional[str]) -> "SportKind":
        return cls(value if value is not None else cls.UNKNOWN.value)

    def as_str(self) -> str:
        return self.value


# 泳姿归一化：按顺序做大小写不敏感的子串匹配，先命中者胜
STROKE_UNKNOWN = "unknown"
STROKE_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("medley", ("medley", "mixed", "混合")),
    ("breaststroke", ("breast", "蛙")),
    ("backstroke", ("back", "仰")),
    ("butterfly", ("butterfly", "fly", "蝶")),
    ("freestyle", ("freestyle", "free", "crawl", "自由", "爬")),
]


def normalize_stroke(value: Optional[str]) -> str:
    """
    将任意泳姿描述归一化为固定词表

    Args:
        value: 原始泳姿（中英文均可）

    Returns:
        freestyle / backstroke / breaststroke / butterfly / medley / unknown
    """
    if not value:
        return STROKE_UNKNOWN
    lowered = value.strip().lower()
    for stroke, keywords in STROKE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return stroke
    return STROKE_UNKNOWN


class Swimming(BaseModel):
    """游泳附加数据"""

    main_stroke: str = STROKE_UNKNOWN
    stroke_avg: int = 0
    swolf_avg: int = 0

    @field_validator("main_stroke", mode="before")
    @classmethod
    def _normalize_main_stroke(cls, value: Any) -> str:
        return normalize_stroke(value if isinstance(value, str) else None)


class Running(BaseModel):
    """跑步附加数据"""

    speed_avg: float = 0.0
    cadence_avg: int = 0
    stride_length_avg: int = 0
    steps_total: int = 0
    pace_min: str = ""
    pace_max: str = ""


RUNNING_FIELDS = frozenset(Running.model_fields.keys())


def _extra_variant(value: Any) -> str:
    # 未打标签的 extra 只能按字段判断：出现任何跑步专有字段即为 Running
    if isinstance(value, Running):
        return "Running"
    if isinstance(value, Swimming):
        return "Swimming"
    if isinstance(value, dict) and RUNNING_FIELDS & value.keys():
        return "Running"
    return "Swimming"


ExtraData = Annotated[
    Union[
        Annotated[Swimming, Tag("Swimming")],
        Annotated[Running, Tag("Running")],
    ],
    Discriminator(_extra_variant),
]

# 运动类型 -> 允许携带的 extra 变体
EXTRA_TYPES: Dict[SportKind, Type[BaseModel]] = {
    SportKind.SWIMMING: Swimming,
    SportKind.RUNNING: Running,
}


def extra_kind(extra: Union[Swimming, Running]) -> SportKind:
    """extra 变体对应的运动类型"""
    return SportKind.RUNNING if isinstance(extra, Running) else SportKind.SWIMMING


class Track(BaseModel):
    """分段/单圈记录"""

    distance_meter: int = 0
    duration_second: int = 0
    pace_average: str = ""
    extra: Optional[ExtraData] = None


class SportRecord(BaseModel):
    """运动记录"""

    model_config = ConfigDict(populate_by_name=True)

    id: int = 0  # 0 表示尚未入库
    kind: SportKind = Field(default=SportKind.UNKNOWN, alias="type")
    start_time: int = 0  # epoch 秒
    calories: int = 0
    distance_meter: int = 0
    duration_second: int = 0
    heart_rate_avg: int = 0
    heart_rate_max: int = 0
    pace_average: str = ""
    extra: Optional[ExtraData] = None
    tracks: List[Track] = Field(default_factory=list)

    @field_validator("kind", mode="before")
    @classmethod
    def _decode_kind(cls, value: Any) -> SportKind:
        if isinstance(value, SportKind):
            return value
        return SportKind.from_str(value if isinstance(value, str) else None)

    def validate_type_consistency(self) -> None:
        """
        校验 extra（含每个分段的 extra）与运动类型一致

        Raises:
            ValidationError: 变体与类型不匹配，或不支持 extra 的类型携带了 extra
        """
        expected = EXTRA_TYPES.get(self.kind)
        extras = [("extra", self.extra)]
        extras.extend((f"tracks[{i}].extra", t.extra) for i, t in enumerate(self.tracks))
        for where, extra in extras:
            if extra is None:
                continue
            if expected is None or not isinstance(extra, expected):
                raise ValidationError(
                    f"{where} 类型为 {extra_kind(extra).value}，与记录类型 {self.kind.value} 不一致"
                )
