"""Tests for display formatting of job fields."""

from datetime import date, datetime, timezone

import pytest

from freightdesk.models.job import Incoterm, JobStatus
from freightdesk.services.fields import (
    EpochSeconds,
    IsoString,
    JOB_COLUMNS,
    NativeDate,
    decode_date_value,
)
from freightdesk.services.formatting import format_container_numbers, format_field


class Unprintable:
    def __str__(self):
        raise RuntimeError("cannot render")

    __repr__ = __str__


@pytest.mark.unit
class TestFormatField:

    def test_container_numbers_scenario(self):
        assert format_field({"containerFlightNumbers": ["A", "B"]}, "containerFlightNumbers") == "A, B"

    def test_snake_and_camel_keys_are_equivalent(self):
        record = {"container_flight_numbers": ["MSKU1", "TGHU2"]}
        assert format_field(record, "container_flight_numbers") == "MSKU1, TGHU2"
        assert format_field(record, "containerFlightNumbers") == "MSKU1, TGHU2"

    def test_none_and_missing_are_empty(self):
        assert format_field({"remarks": None}, "remarks") == ""
        assert format_field({}, "remarks") == ""
        assert format_field({"containerFlightNumbers": None}, "containerFlightNumbers") == ""
        assert format_field(None, "job_number") == ""

    def test_legacy_string_container_value(self):
        assert format_field({"containerFlightNumbers": "MSKU1"}, "containerFlightNumbers") == "MSKU1"
        assert format_field({"containerFlightNumbers": "   "}, "containerFlightNumbers") == ""

    def test_native_dates(self):
        record = {"created_at": datetime(2025, 4, 15, 13, 45), "hbl_date": date(2025, 3, 1)}
        assert format_field(record, "created_at") == "15/04/2025"
        assert format_field(record, "hblDate") == "01/03/2025"

    def test_provider_timestamps(self):
        ts = {"seconds": 1744675200, "nanoseconds": 0}  # 2025-04-15T00:00:00Z
        assert format_field({"createdAt": ts}, "createdAt") == "15/04/2025"

        class Timestamp:
            seconds = 1744675200
            nanoseconds = 500

        assert format_field({"eta_pod": Timestamp()}, "eta_pod") == "15/04/2025"

    def test_iso_strings(self):
        assert format_field({"mbl_date": "2025-04-15"}, "mbl_date") == "15/04/2025"
        assert format_field({"etaPod": "2025-04-15T10:00:00+05:30"}, "etaPod") == "15/04/2025"

    def test_unparseable_date_string_is_returned_unchanged(self):
        assert format_field({"hbl_date": "next tuesday"}, "hbl_date") == "next tuesday"
        assert format_field({"hbl_date": ""}, "hbl_date") == ""

    def test_timestamp_shaped_object_in_plain_field(self):
        ts = {"seconds": 1744675200, "nanoseconds": 1}
        assert format_field({"remarks": ts}, "remarks") == "15/04/2025"

    def test_other_objects_are_dumped(self):
        assert format_field({"remarks": {"note": "fragile"}}, "remarks") == '{"note": "fragile"}'

    def test_enums_render_their_value(self):
        record = {"status": JobStatus.COMPLETED, "terms": Incoterm.FOB}
        assert format_field(record, "status") == "Completed"
        assert format_field(record, "terms") == "FOB"

    def test_scalars_are_stringified(self):
        assert format_field({"gross_weight": 10148.5}, "gross_weight") == "10148.5"
        assert format_field({"total_packages": "15 PLTS"}, "totalPackages") == "15 PLTS"

    def test_unprintable_values_render_empty(self):
        assert format_field({"remarks": {"k": Unprintable()}}, "remarks") == ""
        assert format_field({"remarks": Unprintable()}, "remarks") == ""

    def test_unknown_key_is_read_directly(self):
        assert format_field({"customField": 7}, "customField") == "7"
        assert format_field({}, "no_such_field") == ""

    @pytest.mark.parametrize("value", [
        None, "", "garbage", "2025-13-45", [], [None, "A"], {}, {"seconds": "x"},
        {"seconds": 10 ** 20, "nanoseconds": 0}, object(), 0, False, b"bytes",
        Unprintable(), [Unprintable()], {"k": Unprintable()}, {"k": {"nested": Unprintable()}},
    ])
    def test_never_raises(self, value):
        for column in JOB_COLUMNS + ("updated_at", "unknownKey"):
            assert isinstance(format_field({column: value}, column), str)


@pytest.mark.unit
class TestContainerNumbers:

    def test_prefers_list(self):
        assert format_container_numbers({"containerFlightNumbers": ["A", "B"], "containerFlightNo": "OLD"}) == "A, B"

    def test_falls_back_to_legacy_field(self):
        assert format_container_numbers({"containerFlightNumbers": [], "containerFlightNo": " OLD1 "}) == "OLD1"

    def test_nothing_recorded(self):
        assert format_container_numbers({}) == ""


@pytest.mark.unit
class TestDecodeDateValue:

    def test_shapes(self):
        assert isinstance(decode_date_value(date(2025, 1, 1)), NativeDate)
        assert isinstance(decode_date_value("2025-01-01"), IsoString)
        assert decode_date_value({"seconds": 0, "nanoseconds": 0}) == EpochSeconds(0, 0)
        assert decode_date_value(42) is None
        assert decode_date_value({"name": "x"}) is None

    def test_epoch_is_read_as_utc(self):
        late = datetime(2025, 4, 15, 23, 30, tzinfo=timezone.utc).timestamp()
        assert decode_date_value({"seconds": late, "nanoseconds": 0}).as_date() == date(2025, 4, 15)
