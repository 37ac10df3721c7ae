"""
Tests for Neo4j value coercion.
"""

from datetime import date, datetime, timedelta, timezone

import pytest
from neo4j.time import Date as Neo4jDate
from neo4j.time import DateTime as Neo4jDateTime

from app.db.coercion import ValueKind, classify, coerce, format_temporal


class TestClassify:
    def test_primitives_are_scalars(self):
        for value in ("text", 1, 1.5, True, b"raw"):
            assert classify(value) is ValueKind.SCALAR

    def test_native_datetimes_pass_through(self):
        assert classify(datetime(2024, 1, 1)) is ValueKind.SCALAR
        assert classify(date(2024, 1, 1)) is ValueKind.SCALAR

    def test_carriers(self):
        assert classify({"low": 5, "high": 0}) is ValueKind.INTEGER_CARRIER
        assert classify({"year": 2024, "month": 1, "day": 2}) is ValueKind.TEMPORAL
        assert classify(Neo4jDate(2024, 1, 2)) is ValueKind.TEMPORAL
        assert classify(None) is ValueKind.NULL

    def test_mapping_with_extra_keys_is_not_an_integer_carrier(self):
        assert classify({"low": 1, "high": 0, "label": "x"}) is ValueKind.MAPPING


class TestCoerce:
    def test_integer_carrier_becomes_int(self):
        assert coerce({"low": 42, "high": 0}) == 42

    def test_integer_carrier_uses_both_words(self):
        assert coerce({"low": 0, "high": 1}) == 2**32
        assert coerce({"low": 0xFFFFFFFF, "high": -1}) == -1

    def test_integer_carrier_with_negative_low_word(self):
        # low is transported as a signed 32-bit value
        assert coerce({"low": -1, "high": 0}) == 0xFFFFFFFF

    def test_integer_carrier_object(self):
        class Carrier:
            low = 7
            high = 0

        assert coerce(Carrier()) == 7

    def test_neo4j_datetime_is_rendered_in_utc(self):
        value = Neo4jDateTime(2024, 3, 5, 16, 30, 15, tzinfo=timezone(timedelta(hours=2)))

        assert coerce(value) == "2024-03-05T14:30:15Z"

    def test_neo4j_date_defaults_time_to_midnight(self):
        assert coerce(Neo4jDate(2024, 3, 5)) == "2024-03-05T00:00:00Z"

    def test_temporal_mapping(self):
        value = {"year": 2024, "month": 2, "day": 29, "hour": 9, "minute": 5, "second": 1}

        assert coerce(value) == "2024-02-29T09:05:01Z"

    @pytest.mark.parametrize(
        "value",
        [
            {"year": 2024, "month": 13, "day": 1},
            {"year": 2024, "month": 1, "day": 32},
            {"year": 2024, "month": 1, "day": 1, "hour": 24},
            {"year": 2024, "month": 1, "day": 1, "minute": 60},
        ],
    )
    def test_out_of_range_temporal_is_null(self, value):
        assert format_temporal(value) is None
        assert coerce(value) is None

    def test_nested_structures_keep_their_shape(self):
        value = {
            "user": {"userId": "u1", "messageCount": {"low": 3, "high": 0}},
            "timeline": [
                {"timestamp": Neo4jDate(2024, 1, 2), "reactions": [{"low": 1, "high": 0}]},
                None,
            ],
            "tags": ("a", "b"),
        }

        assert coerce(value) == {
            "user": {"userId": "u1", "messageCount": 3},
            "timeline": [
                {"timestamp": "2024-01-02T00:00:00Z", "reactions": [1]},
                None,
            ],
            "tags": ["a", "b"],
        }

    def test_unknown_values_pass_through(self):
        marker = object()
        native = datetime(2024, 1, 1, tzinfo=timezone.utc)

        assert coerce(marker) is marker
        assert coerce(native) is native
        assert coerce("2024-01-01T00:00:00Z") == "2024-01-01T00:00:00Z"

    def test_malformed_carriers_never_raise(self):
        assert coerce({"low": "x", "high": None}) == {"low": "x", "high": None}
        assert coerce({"year": "2024", "month": 1, "day": 1}) is None

    @pytest.mark.parametrize(
        "value",
        [
            None,
            {"low": 9, "high": 2},
            Neo4jDateTime(2023, 12, 31, 23, 59, 59, tzinfo=timezone.utc),
            {"year": 2024, "month": 0, "day": 1},
            [[{"nested": [{"low": 1, "high": 0}]}]],
            {"low": "a", "high": "b"},
            {"a": {"b": {"c": Neo4jDate(2020, 6, 1)}}},
        ],
    )
    def test_idempotent(self, value):
        once = coerce(value)

        assert coerce(once) == once

    def test_deeply_nested_lists_are_walked_without_recursion(self):
        value = {"low": 5, "high": 0}
        for _ in range(5000):
            value = [value]

        result = coerce(value)

        for _ in range(5000):
            assert isinstance(result, list) and len(result) == 1
            result = result[0]
        assert result == 5

    def test_deeply_nested_mappings_keep_key_order(self):
        value = None
        for depth in range(6000):
            value = {"depth": depth, "child": value, "stamp": Neo4jDate(2024, 1, 1)}

        result = coerce(value)

        for depth in reversed(range(6000)):
            assert list(result) == ["depth", "child", "stamp"]
            assert result["depth"] == depth
            assert result["stamp"] == "2024-01-01T00:00:00Z"
            result = result["child"]
        assert result is None
