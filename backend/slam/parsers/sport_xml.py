"""
AI识别结果（XML）解析

XML 先解码为字段全可选的原始结构 SportXML，再按声明的运动类型转换为规范模型：
extra 的变体只由 type 决定，与实际填了哪些字段无关。
"""
import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from slam.exceptions import ParseError
from slam.parsers.timestamp import parse_timestamp
from slam.schemas.sport import Running, SportKind, SportRecord, Swimming, Track
from slam.schemas.sport_xml import SportXML, XMLSportExtra, XMLSportTrack
from slam.utils.datetime_helper import format_local

logger = logging.getLogger(__name__)

ROOT_TAG = "sport"


def extra_from_raw(kind: SportKind, raw: XMLSportExtra):
    """
    按运动类型把原始 extra 转为规范变体

    Args:
        kind: 记录声明的运动类型
        raw: 原始 extra

    Returns:
        Swimming / Running，其余类型返回None（即使原始字段有值）
    """
    if kind == SportKind.SWIMMING:
        return Swimming(
            main_stroke=raw.main_stroke or "",
            stroke_avg=raw.stroke_avg or 0,
            swolf_avg=raw.swolf_avg or 0,
        )
    if kind == SportKind.RUNNING:
        return Running(
            speed_avg=raw.speed_avg or 0.0,
            cadence_avg=raw.cadence_avg or 0,
            stride_length_avg=raw.stride_length_avg or 0,
            steps_total=raw.steps_total or 0,
            pace_min=raw.pace_min or "",
            pace_max=raw.pace_max or "",
        )
    return None


# 配速为自由文本，原样保留；其余字段去掉首尾空白
RAW_TEXT_FIELDS = frozenset({"pace_average", "pace_min", "pace_max"})


def _text(elem: ET.Element) -> str:
    text = elem.text or ""
    return text if elem.tag in RAW_TEXT_FIELDS else text.strip()


def _optional_fields(elem: ET.Element) -> Dict[str, str]:
    # 空元素视为未识别
    return {child.tag: _text(child) for child in elem if _text(child)}


def _track_elements(elem: ET.Element) -> List[ET.Element]:
    # 兼容 <tracks><track>..</track></tracks> 的包裹写法
    if len(elem) and all(child.tag == "track" for child in elem):
        return list(elem)
    return [elem]


def _to_raw_dict(root: ET.Element) -> Dict[str, Any]:
    data: Dict[str, Any] = {"tracks": []}
    for child in root:
        if child.tag == "extra":
            data["extra"] = _optional_fields(child)
        elif child.tag == "tracks":
            for track_elem in _track_elements(child):
                track: Dict[str, Any] = {}
                for field in track_elem:
                    if field.tag == "extra":
                        track["extra"] = _optional_fields(field)
                    elif _text(field):
                        track[field.tag] = _text(field)
                data["tracks"].append(track)
        else:
            data[child.tag] = _text(child)
    return data


def parse_raw_sport_xml(xml: str) -> SportXML:
    """
    XML 解码为原始结构

    Raises:
        ParseError: XML 不合法或缺少必填字段
    """
    try:
        root = ET.fromstring(xml.strip())
    except ET.ParseError as e:
        raise ParseError(f"XML解析失败: {e}")
    if root.tag != ROOT_TAG:
        raise ParseError(f"XML解析失败: 根元素应为 <{ROOT_TAG}>，实际为 <{root.tag}>")
    try:
        return SportXML.model_validate(_to_raw_dict(root))
    except PydanticValidationError as e:
        raise ParseError(f"XML解析失败: {e}")


def parse_sport_xml(xml: str, tz_name: Optional[str] = None) -> SportRecord:
    """
    解析 AI 识别得到的 XML 为运动记录

    Args:
        xml: XML 文本
        tz_name: 解释 start_time 的时区（默认取配置中的TZ）

    Returns:
        未入库的运动记录（id=0）

    Raises:
        ParseError: XML 不合法或缺少必填字段
        BadTimestampError: start_time 无法识别
    """
    data = parse_raw_sport_xml(xml)
    kind = SportKind.from_str(data.type)
    start_time = parse_timestamp(data.start_time, tz_name)

    extra = extra_from_raw(kind, data.extra) if data.extra is not None else None
    tracks = [_track_from_raw(kind, t) for t in data.tracks]

    logger.debug(f"XML解析成功: type={kind.value}, start_time={start_time}, tracks={len(tracks)}")
    return SportRecord(
        id=0,
        kind=kind,
        start_time=start_time,
        calories=data.calories,
        distance_meter=data.distance_meter,
        duration_second=data.duration_second,
        heart_rate_avg=data.heart_rate_avg,
        heart_rate_max=data.heart_rate_max,
        pace_average=data.pace_average,
        extra=extra,
        tracks=tracks,
    )


def _track_from_raw(kind: SportKind, raw: XMLSportTrack) -> Track:
    return Track(
        distance_meter=raw.distance_meter,
        duration_second=raw.duration_second,
        pace_average=raw.pace_average,
        extra=extra_from_raw(kind, raw.extra) if raw.extra is not None else None,
    )


def _append(parent: ET.Element, tag: str, value: Any) -> ET.Element:
    elem = ET.SubElement(parent, tag)
    elem.text = str(value)
    return elem


def _append_extra(parent: ET.Element, extra) -> None:
    elem = ET.SubElement(parent, "extra")
    for name, value in extra.model_dump().items():
        _append(elem, name, value)


def sport_to_xml(record: SportRecord, tz_name: Optional[str] = None) -> str:
    """
    运动记录序列化为 XML（与识别结果同构）

    Args:
        record: 运动记录
        tz_name: 渲染 start_time 的时区（默认取配置中的TZ）

    Returns:
        XML 文本
    """
    root = ET.Element(ROOT_TAG)
    _append(root, "type", record.kind.value)
    _append(root, "start_time", format_local(record.start_time, tz_name))
    for name in ("calories", "distance_meter", "duration_second",
                 "heart_rate_avg", "heart_rate_max", "pace_average"):
        _append(root, name, getattr(record, name))
    if record.extra is not None:
        _append_extra(root, record.extra)
    for track in record.tracks:
        track_elem = ET.SubElement(root, "tracks")
        _append(track_elem, "distance_meter", track.distance_meter)
        _append(track_elem, "duration_second", track.duration_second)
        _append(track_elem, "pace_average", track.pace_average)
        if track.extra is not None:
            _append_extra(track_elem, track.extra)
    return ET.tostring(root, encoding="unicode")
