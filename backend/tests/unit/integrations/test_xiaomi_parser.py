"""Tests for vendor CSV parsing."""

import json

import pytest

from slam.exceptions import UnsupportedVendorError
from slam.integrations.base import VendorFileParser
from slam.integrations.factory import VendorParserFactory, open_csv, parse_sports_from_csv
from slam.integrations.xiaomi import XiaomiParser
from slam.schemas.sport import SportKind, Swimming

HEADER = "Uid,Sid,Key,Time,Category,Value,UpdateTime\n"


def _csv(*rows):
    lines = [HEADER]
    for time, category, value in rows:
        if not isinstance(value, str):
            value = json.dumps(value)
        value = '"' + value.replace('"', '""') + '"'
        lines.append(f"1,2,k,{time},{category},{value},0\n")
    return "".join(lines)


def _parse(*rows):
    return XiaomiParser().parse(open_csv(_csv(*rows)))


SWIM_VALUE = {
    "calories": 320,
    "distance": 1500,
    "valid_duration": 2400,
    "duration": 2700,
    "avg_swolf": 75,
    "main_posture": 3,
    "max_stroke_freq": 31,
    "pool_width": 25,
}


# ======================================================================
# Row mapping
# ======================================================================


class TestXiaomiRows:

    def test_swimming_row(self):
        sports = _parse((1763337600, "swimming", SWIM_VALUE))

        assert len(sports) == 1
        sport = sports[0]
        assert sport.id == 0
        assert sport.kind is SportKind.SWIMMING
        assert sport.start_time == 1763337600
        assert sport.calories == 320
        assert sport.distance_meter == 1500
        assert sport.duration_second == 2400
        assert sport.heart_rate_avg == 0
        assert sport.pace_average == ""
        assert sport.tracks == []
        assert sport.extra == Swimming(main_stroke="breaststroke", stroke_avg=31, swolf_avg=75)

    def test_other_categories_ignored(self):
        sports = _parse(
            (1000, "running", SWIM_VALUE),
            (2000, "heart_rate", {"bpm": 70}),
            (3000, "swimming", SWIM_VALUE),
        )
        assert [s.start_time for s in sports] == [3000]

    def test_millisecond_time(self):
        sports = _parse((1763337600123, "swimming", SWIM_VALUE))
        assert sports[0].start_time == 1763337600

    def test_threshold_boundary_is_seconds(self):
        sports = XiaomiParser(ms_threshold=5000).parse(open_csv(_csv(
            (5000, "swimming", {}),
            (5001000, "swimming", {}),
        )))
        assert [s.start_time for s in sports] == [5000, 5001]

    def test_fallback_fields(self):
        sports = _parse((1000, "swimming", {"total_cal": 88, "duration": 900}))
        assert sports[0].calories == 88
        assert sports[0].duration_second == 900

    def test_primary_fields_win(self):
        sports = _parse((1000, "swimming", {"calories": 1, "total_cal": 2, "valid_duration": 3, "duration": 4}))
        assert sports[0].calories == 1
        assert sports[0].duration_second == 3

    @pytest.mark.parametrize("posture,stroke", [
        (1, "freestyle"),
        (2, "backstroke"),
        (3, "breaststroke"),
        (4, "butterfly"),
        (0, "unknown"),
        (9, "unknown"),
    ])
    def test_posture_mapping(self, posture, stroke):
        sports = _parse((1000, "swimming", {"main_posture": posture}))
        assert sports[0].extra.main_stroke == stroke

    def test_invalid_value_json_defaults(self):
        sports = _parse((1000, "swimming", "{not json"))
        assert len(sports) == 1
        assert sports[0].calories == 0
        assert sports[0].extra == Swimming(main_stroke="unknown")

    def test_bad_rows_skipped(self):
        sports = _parse(
            ("yesterday", "swimming", SWIM_VALUE),
            ("", "swimming", SWIM_VALUE),
            (4000, "swimming", SWIM_VALUE),
        )
        assert [s.start_time for s in sports] == [4000]

    def test_missing_value_column_skips_rows(self):
        assert XiaomiParser().parse(open_csv("Time,Category\n1700000000,swimming\n")) == []

    def test_short_row_skipped(self):
        sports = XiaomiParser().parse(open_csv("Time,Category,Value\n1700000000,swimming\n"))
        assert sports == []

    def test_empty_value_cell_defaults(self):
        sports = XiaomiParser().parse(open_csv("Time,Category,Value\n1700000000,swimming,\n"))
        assert len(sports) == 1
        assert sports[0].calories == 0

    def test_empty_file(self):
        assert XiaomiParser().parse(open_csv(HEADER)) == []


# ======================================================================
# Factory
# ======================================================================


class TestVendorFactory:

    @pytest.mark.parametrize("vendor", ["xiaomi", "Xiaomi", " XIAOMI "])
    def test_create_case_insensitive(self, vendor):
        parser = VendorParserFactory.create(vendor)
        assert isinstance(parser, XiaomiParser)
        assert parser.name == "xiaomi"

    @pytest.mark.parametrize("vendor", ["huawei", "", None])
    def test_unsupported(self, vendor):
        with pytest.raises(UnsupportedVendorError):
            VendorParserFactory.create(vendor)

    def test_register(self):
        class EmptyParser(VendorFileParser):
            @property
            def name(self):
                return "empty"

            def parse(self, reader):
                return []

        VendorParserFactory.register("Empty", EmptyParser)
        try:
            assert "empty" in VendorParserFactory.available()
            assert parse_sports_from_csv("empty", open_csv(HEADER)) == []
        finally:
            VendorParserFactory._parsers.pop("empty")

    def test_bytes_with_bom(self):
        data = ("\ufeff" + _csv((1000, "swimming", SWIM_VALUE))).encode("utf-8")
        sports = parse_sports_from_csv("xiaomi", open_csv(data))
        assert len(sports) == 1

    def test_str_with_bom(self):
        reader = open_csv("\ufeff" + _csv((1000, "swimming", SWIM_VALUE)))
        assert reader.fieldnames[0] == "Uid"
