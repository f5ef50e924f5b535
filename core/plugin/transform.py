"""
core/plugin/transform.py - 컬럼 변환 체인

hydrate 결과(dict)에서 컬럼 값을 꺼내고 가공하는 변환 체인입니다.
체인은 소스 단계 하나와 0개 이상의 후처리 단계로 구성됩니다.

Example:
    from core.plugin.transform import from_field, to_lower

    region = from_field("location").transform(to_lower)
    region.execute({"location": "KoreaCentral"}, "region")  # "koreacentral"
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass
class TransformData:
    """변환 단계에 전달되는 데이터

    Attributes:
        hydrate_item: 컬럼의 원본 hydrate 결과
        column_name: 컬럼 이름
        value: 직전 단계까지의 값
        param: 단계별 파라미터
    """

    hydrate_item: Any
    column_name: str
    value: Any = None
    param: Any = None


TransformFunc = Callable[[TransformData], Any]


class Transform:
    """소스 단계 + 후처리 단계 체인 (불변)"""

    def __init__(self, source: TransformFunc, steps: tuple[tuple[TransformFunc, Any], ...] = ()):
        self._source = source
        self._steps = steps

    def transform(self, fn: TransformFunc, param: Any = None) -> Transform:
        """후처리 단계를 추가한 새 체인 반환"""
        return Transform(self._source, self._steps + ((fn, param),))

    def execute(self, hydrate_item: Any, column_name: str) -> Any:
        data = TransformData(hydrate_item=hydrate_item, column_name=column_name)
        data.value = self._source(data)
        for fn, param in self._steps:
            data = TransformData(hydrate_item=hydrate_item, column_name=column_name, value=data.value, param=param)
            data.value = fn(data)
        return data.value


# =============================================================================
# 소스
# =============================================================================


def camel_case(name: str) -> str:
    """snake_case → camelCase ("resource_group" → "resourceGroup")"""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def get_field(item: Any, path: str) -> Any:
    """점 경로로 dict/객체 값 조회 (없으면 None)"""
    current = item
    for key in path.split("."):
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(key)
        else:
            current = getattr(current, key, None)
    return current


def from_field(*paths: str) -> Transform:
    """지정 경로 값 (여러 경로면 처음으로 None이 아닌 값)"""

    def source(d: TransformData) -> Any:
        for path in paths:
            value = get_field(d.hydrate_item, path)
            if value is not None:
                return value
        return None

    return Transform(source)


def from_camel() -> Transform:
    """컬럼 이름의 camelCase 키 값 (기본 변환)"""
    return Transform(lambda d: get_field(d.hydrate_item, camel_case(d.column_name)))


def from_value() -> Transform:
    """hydrate 결과 자체"""
    return Transform(lambda d: d.hydrate_item)


def from_constant(value: Any) -> Transform:
    return Transform(lambda d: value)


def from_(fn: Callable[[TransformData], Any]) -> Transform:
    """임의 함수로 값 계산"""
    return Transform(fn)


# =============================================================================
# 후처리 단계
# =============================================================================


def to_string(d: TransformData) -> Any:
    if d.value is None:
        return None
    return str(d.value)


def to_lower(d: TransformData) -> Any:
    if d.value is None:
        return None
    return str(d.value).lower()


_TIMESTAMP_RE = re.compile(r"^(?P<main>[^.]+?)(?:\.(?P<frac>\d+))?(?P<tz>Z|[+-]\d{2}:?\d{2})?$")


def parse_timestamp(value: Any) -> datetime | None:
    """ISO-8601 문자열을 datetime으로 변환

    ARM은 "2023-01-02T03:04:05.1234567Z"처럼 소수점 7자리와 Z 접미사를
    사용하므로 마이크로초 6자리로 자른 뒤 파싱합니다. 시간대가 없으면 UTC로 간주합니다.

    Raises:
        ValueError: 해석할 수 없는 형식
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    text = str(value).strip()
    match = _TIMESTAMP_RE.match(text)
    if not match:
        raise ValueError(f"잘못된 timestamp 형식: {value!r}")

    normalized = match.group("main")
    frac = match.group("frac")
    if frac:
        normalized += "." + frac[:6].ljust(6, "0")
    tz = match.group("tz")
    if tz == "Z":
        normalized += "+00:00"
    elif tz:
        normalized += tz if ":" in tz else f"{tz[:3]}:{tz[3:]}"

    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
