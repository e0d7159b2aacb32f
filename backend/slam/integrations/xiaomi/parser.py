"""
小米运动健康导出CSV解析

导出文件为通用的 (Time, Category, Value) 结构，Value 是一个 JSON 对象。
目前只导入游泳记录。
"""
import csv
import logging
from typing import Dict, List, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from slam.config import settings
from slam.integrations.base import VendorFileParser
from slam.schemas.sport import SportKind, SportRecord, Swimming

logger = logging.getLogger(__name__)

# main_posture 编码 -> 泳姿
POSTURE_STROKES: Dict[int, str] = {
    1: "freestyle",
    2: "backstroke",
    3: "breaststroke",
    4: "butterfly",
}


class XiaomiCsvRow(BaseModel):
    """CSV行中用到的列"""

    time: int
    category: str
    value: str


class XiaomiValue(BaseModel):
    """Value 列的JSON内容（其余字段忽略）"""

    calories: Optional[int] = None
    total_cal: Optional[int] = None
    distance: Optional[int] = None
    duration: Optional[int] = None
    valid_duration: Optional[int] = None
    avg_swolf: Optional[int] = None
    main_posture: Optional[int] = None
    max_stroke_freq: Optional[int] = None


class XiaomiParser(VendorFileParser):
    """小米导出解析器"""

    CATEGORY = "swimming"

    def __init__(self, ms_threshold: Optional[int] = None):
        self.ms_threshold = ms_threshold or settings.XIAOMI_MS_THRESHOLD

    @property
    def name(self) -> str:
        return "xiaomi"

    def parse(self, reader: csv.DictReader) -> List[SportRecord]:
        sports: List[SportRecord] = []
        skipped = 0
        for line_no, raw in enumerate(reader, start=2):
            row = self._parse_row(raw)
            if row is None:
                skipped += 1
                logger.warning(f"小米CSV第{line_no}行无法解析，已跳过")
                continue
            if row.category.strip().lower() != self.CATEGORY:
                continue
            sports.append(self._to_record(row))

        logger.info(f"小米CSV解析完成: swimming={len(sports)}, skipped={skipped}")
        return sports

    def _parse_row(self, raw: Dict[str, Optional[str]]) -> Optional[XiaomiCsvRow]:
        try:
            return XiaomiCsvRow(
                time=(raw.get("Time") or "").strip(),
                category=raw.get("Category"),
                value=raw.get("Value"),
            )
        except PydanticValidationError:
            return None

    def _to_record(self, row: XiaomiCsvRow) -> SportRecord:
        start_time = row.time
        # 毫秒时间戳（启发式阈值）
        if start_time > self.ms_threshold:
            start_time //= 1000

        try:
            value = XiaomiValue.model_validate_json(row.value)
        except PydanticValidationError:
            value = XiaomiValue()

        calories = value.calories if value.calories is not None else value.total_cal
        duration = value.valid_duration if value.valid_duration is not None else value.duration

        return SportRecord(
            id=0,
            kind=SportKind.SWIMMING,
            start_time=start_time,
            calories=calories or 0,
            distance_meter=value.distance or 0,
            duration_second=duration or 0,
            heart_rate_avg=0,
            heart_rate_max=0,
            pace_average="",
            extra=Swimming(
                main_stroke=POSTURE_STROKES.get(value.main_posture or 0, "unknown"),
                stroke_avg=value.max_stroke_freq or 0,
                swolf_avg=value.avg_swolf or 0,
            ),
            tracks=[],
        )
