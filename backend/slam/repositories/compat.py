"""
extra / tracks 列的 JSON 编解码（含历史格式兼容）

当前写入格式：
    extra:  {"type": "Swimming" | "Running", "data": {...}} 或 null
    tracks: [{"distance_meter": .., "duration_second": .., "pace_average": .., "extra": <同上>}, ...]

历史格式：
    extra:  不带标签的 Swimming 对象（最早只支持游泳）
    tracks: 规范模型形态的 Track 数组（extra 不带标签）

读取时按顺序尝试，任一成功即返回；全部失败时降级为 None / 空列表，
单条坏数据不能导致整页读取失败。
"""
from __future__ import annotations

import json
import logging
from typing import Annotated, Callable, List, Literal, Optional, Tuple, TypeVar, Union

from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from slam.schemas.sport import Running, Swimming, Track

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DbSwimmingExtra(BaseModel):
    type: Literal["Swimming"] = "Swimming"
    data: Swimming


class DbRunningExtra(BaseModel):
    type: Literal["Running"] = "Running"
    data: Running


DbSportExtra = Annotated[Union[DbSwimmingExtra, DbRunningExtra], Field(discriminator="type")]


class DbSportTrack(BaseModel):
    """分段的当前存储格式"""

    distance_meter: int = 0
    duration_second: int = 0
    pace_average: str = ""
    extra: Optional[DbSportExtra] = None


_tagged_extra_adapter = TypeAdapter(Optional[DbSportExtra])
_tagged_tracks_adapter = TypeAdapter(List[DbSportTrack])
_legacy_tracks_adapter = TypeAdapter(List[Track])


def to_db_extra(extra: Optional[Union[Swimming, Running]]):
    if extra is None:
        return None
    if isinstance(extra, Running):
        return DbRunningExtra(data=extra)
    return DbSwimmingExtra(data=extra)


def from_db_extra(extra) -> Optional[Union[Swimming, Running]]:
    return extra.data if extra is not None else None


def _decode_tagged_extra(raw: str):
    return from_db_extra(_tagged_extra_adapter.validate_json(raw))


def _decode_legacy_swimming(raw: str):
    return Swimming.model_validate_json(raw)


def _decode_tagged_tracks(raw: str) -> List[Track]:
    return [
        Track(
            distance_meter=t.distance_meter,
            duration_second=t.duration_second,
            pace_average=t.pace_average,
            extra=from_db_extra(t.extra),
        )
        for t in _tagged_tracks_adapter.validate_json(raw)
    ]


def _decode_legacy_tracks(raw: str) -> List[Track]:
    return _legacy_tracks_adapter.validate_json(raw)


# 解码尝试顺序：当前格式在前，历史格式在后
EXTRA_DECODERS: List[Tuple[str, Callable[[str], Optional[Union[Swimming, Running]]]]] = [
    ("tagged", _decode_tagged_extra),
    ("legacy_swimming", _decode_legacy_swimming),
]

TRACKS_DECODERS: List[Tuple[str, Callable[[str], List[Track]]]] = [
    ("tagged", _decode_tagged_tracks),
    ("legacy_tracks", _decode_legacy_tracks),
]


def _first_success(raw: str, decoders: List[Tuple[str, Callable[[str], T]]], column: str) -> Tuple[bool, Optional[T]]:
    for index, (name, decode) in enumerate(decoders):
        try:
            value = decode(raw)
        except (PydanticValidationError, ValueError):
            continue
        if index > 0:
            logger.warning(f"{column} 列按历史格式解码: format={name}")
        return True, value
    logger.warning(f"{column} 列无法解码，已忽略: {raw[:200]!r}")
    return False, None


def parse_extra_compat(extra_json: Optional[str]) -> Optional[Union[Swimming, Running]]:
    """
    解码 extra 列，失败时返回None（不抛异常）
    """
    if not extra_json or not extra_json.strip():
        return None
    _, value = _first_success(extra_json, EXTRA_DECODERS, "extra")
    return value


def parse_tracks_compat(tracks_json: Optional[str]) -> List[Track]:
    """
    解码 tracks 列，失败时返回空列表（不抛异常）
    """
    if not tracks_json or not tracks_json.strip():
        return []
    ok, value = _first_success(tracks_json, TRACKS_DECODERS, "tracks")
    return value if ok and value is not None else []


def encode_extra(extra: Optional[Union[Swimming, Running]]) -> str:
    """extra 序列化为当前存储格式"""
    db_extra = to_db_extra(extra)
    return db_extra.model_dump_json() if db_extra is not None else "null"


def encode_tracks(tracks: List[Track]) -> str:
    """tracks 序列化为当前存储格式"""
    db_tracks = [
        DbSportTrack(
            distance_meter=t.distance_meter,
            duration_second=t.duration_second,
            pace_average=t.pace_average,
            extra=to_db_extra(t.extra),
        )
        for t in tracks
    ]
    return json.dumps([t.model_dump(mode="json") for t in db_tracks], ensure_ascii=False)
