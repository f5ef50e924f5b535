"""
tests/core/plugin/test_plugin_transform.py - 컬럼 변환 체인 테스트
"""

from datetime import datetime, timezone

import pytest

from core.plugin.transform import (
    camel_case,
    from_,
    from_camel,
    from_constant,
    from_field,
    from_value,
    get_field,
    parse_timestamp,
    to_lower,
    to_string,
)


class TestCamelCase:
    @pytest.mark.parametrize(
        "name, expected",
        [("name", "name"), ("resource_group", "resourceGroup"), ("provisioning_state", "provisioningState")],
    )
    def test_convert(self, name, expected):
        assert camel_case(name) == expected


class TestGetField:
    """점 경로 조회"""

    def test_nested_dict(self):
        assert get_field({"properties": {"format": {"type": "JSON"}}}, "properties.format.type") == "JSON"

    def test_missing(self):
        assert get_field({"properties": None}, "properties.enabled") is None
        assert get_field({}, "a.b") is None

    def test_object_attribute(self):
        class Row:
            average = 1.5

        assert get_field(Row(), "average") == 1.5


class TestSources:
    """소스 단계 테스트"""

    def test_from_camel_default(self):
        assert from_camel().execute({"provisioningState": "Succeeded"}, "provisioning_state") == "Succeeded"

    def test_from_field_first_non_none(self):
        transform = from_field("properties.displayName", "name")

        assert transform.execute({"name": "n"}, "title") == "n"
        assert transform.execute({"name": "n", "properties": {"displayName": "d"}}, "title") == "d"

    def test_from_value(self):
        assert from_value().execute("sub-1", "subscription_id") == "sub-1"

    def test_from_constant(self):
        assert from_constant("Security Center").execute({"x": 1}, "title") == "Security Center"

    def test_from_custom_function(self):
        transform = from_(lambda d: len(d.hydrate_item["value"]))
        assert transform.execute({"value": [1, 2, 3]}, "count") == 3


class TestSteps:
    """후처리 단계 체인"""

    def test_to_lower(self):
        assert from_field("location").transform(to_lower).execute({"location": "KoreaCentral"}, "region") == "koreacentral"

    def test_steps_skip_none(self):
        assert from_field("location").transform(to_lower).execute({}, "region") is None
        assert from_field("x").transform(to_string).execute({}, "x") is None

    def test_chain_is_immutable(self):
        base = from_field("name")
        lowered = base.transform(to_lower)

        assert base.execute({"name": "AB"}, "name") == "AB"
        assert lowered.execute({"name": "AB"}, "name") == "ab"

    def test_step_param(self):
        def suffix(d):
            return f"{d.value}{d.param}"

        assert from_field("name").transform(suffix, "-x").execute({"name": "a"}, "name") == "a-x"


class TestParseTimestamp:
    """ARM timestamp 파싱"""

    def test_seven_digit_fraction(self):
        parsed = parse_timestamp("2023-01-02T03:04:05.1234567Z")
        assert parsed == datetime(2023, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)

    def test_offset(self):
        parsed = parse_timestamp("2023-01-02T03:04:05+09:00")
        assert parsed.utcoffset().total_seconds() == 9 * 3600

    def test_naive_is_utc(self):
        assert parse_timestamp("2023-01-02T03:04:05").tzinfo == timezone.utc

    def test_empty(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None

    def test_datetime_passthrough(self):
        value = datetime(2023, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp(value) is value

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_timestamp("not a date")
