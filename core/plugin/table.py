"""
core/plugin/table.py - 테이블 모델

플러그인 테이블을 선언하는 데이터 클래스입니다.
테이블은 컬럼 목록과 List/Get 설정, 컬럼별 hydrate 설정으로 구성되며
실제 실행은 core/plugin/host.py의 QueryRunner가 담당합니다.

Example:
    def table_azure_lb() -> Table:
        return Table(
            name="azure_lb",
            description="Azure Load Balancer",
            list_config=ListConfig(hydrate=list_load_balancers, tags={"service": "Microsoft.Network"}),
            get_config=GetConfig(key_columns=KeyColumnSet.all(["name", "resource_group"]), hydrate=get_load_balancer),
            columns=[
                Column("name", ColumnType.STRING, "The name of the load balancer."),
                Column("id", ColumnType.STRING, "The resource ID."),
            ],
        )
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from core.exceptions import TableNotFoundError

from .transform import Transform, from_camel, parse_timestamp

if TYPE_CHECKING:
    from .query import HydrateData, QueryData

HydrateFunc = Callable[["QueryData", "HydrateData"], Any]


class ColumnType(Enum):
    """컬럼 타입"""

    BOOL = "bool"
    INT = "int"
    DOUBLE = "double"
    STRING = "string"
    JSON = "json"
    TIMESTAMP = "timestamp"
    IPADDR = "ipaddr"
    CIDR = "cidr"

    def coerce(self, value: Any) -> Any:
        """변환된 값을 컬럼 타입으로 강제 변환

        Raises:
            ValueError: 변환할 수 없는 값
        """
        if value is None:
            return None

        if self is ColumnType.BOOL:
            if isinstance(value, bool):
                return value
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in ("true", "1", "yes"):
                    return True
                if lowered in ("false", "0", "no"):
                    return False
                raise ValueError(f"bool로 변환할 수 없음: {value!r}")
            return bool(value)

        if self is ColumnType.INT:
            return int(value)

        if self is ColumnType.DOUBLE:
            return float(value)

        if self is ColumnType.TIMESTAMP:
            return parse_timestamp(value)

        if self is ColumnType.JSON:
            return value

        # STRING / IPADDR / CIDR
        if isinstance(value, str):
            return value
        if isinstance(value, (dict, list)):
            return json.dumps(value)
        return str(value)


@dataclass
class Column:
    """테이블 컬럼

    Attributes:
        name: 컬럼 이름 (snake_case)
        type: 컬럼 타입
        description: 설명
        transform: 값 추출 변환 (None이면 from_camel())
        hydrate: 값의 출처 hydrate 함수 (None이면 List/Get 항목)
    """

    name: str
    type: ColumnType
    description: str = ""
    transform: Transform | None = None
    hydrate: HydrateFunc | None = None

    def resolve(self, hydrate_item: Any) -> Any:
        """hydrate 결과에서 컬럼 값 추출 후 타입 변환"""
        transform = self.transform or from_camel()
        return self.type.coerce(transform.execute(hydrate_item, self.name))


@dataclass(frozen=True)
class KeyColumnSet:
    """Get에 필요한 키 컬럼 집합"""

    columns: tuple[str, ...]

    @classmethod
    def single(cls, name: str) -> KeyColumnSet:
        return cls((name,))

    @classmethod
    def all(cls, names: list[str]) -> KeyColumnSet:
        return cls(tuple(names))

    def is_satisfied_by(self, quals: Mapping[str, Any]) -> bool:
        """모든 키 컬럼에 비어 있지 않은 equality qual이 있는지"""
        return all(quals.get(name) not in (None, "") for name in self.columns)


@dataclass
class IgnoreConfig:
    """무시할 에러 판정

    Attributes:
        should_ignore_error: 예외를 받아 무시 여부를 반환하는 함수
    """

    should_ignore_error: Callable[[Exception], bool] | None = None

    def should_ignore(self, error: Exception) -> bool:
        if self.should_ignore_error is None:
            return False
        return bool(self.should_ignore_error(error))


@dataclass
class GetConfig:
    key_columns: KeyColumnSet
    hydrate: HydrateFunc
    tags: dict[str, str] = field(default_factory=dict)
    ignore_config: IgnoreConfig | None = None


@dataclass
class ListConfig:
    """List 설정

    parent_hydrate가 있으면 부모 리소스를 먼저 나열하고, 부모 항목마다
    hydrate를 HydrateData(item=부모)로 호출합니다.
    """

    hydrate: HydrateFunc
    parent_hydrate: HydrateFunc | None = None
    tags: dict[str, str] = field(default_factory=dict)
    ignore_config: IgnoreConfig | None = None


@dataclass
class HydrateConfig:
    func: HydrateFunc
    tags: dict[str, str] = field(default_factory=dict)
    ignore_config: IgnoreConfig | None = None


@dataclass
class Table:
    """플러그인 테이블"""

    name: str
    description: str
    columns: list[Column]
    list_config: ListConfig | None = None
    get_config: GetConfig | None = None
    hydrate_config: list[HydrateConfig] = field(default_factory=list)

    def get_column(self, name: str) -> Column | None:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def hydrate_config_for(self, func: HydrateFunc) -> HydrateConfig | None:
        for config in self.hydrate_config:
            if config.func is func:
                return config
        return None

    @property
    def service(self) -> str:
        """rate limiter 키로 쓰는 서비스 태그"""
        for tags in (
            self.list_config.tags if self.list_config else {},
            self.get_config.tags if self.get_config else {},
        ):
            if tags.get("service"):
                return tags["service"]
        return "default"


@dataclass
class Plugin:
    """테이블 레지스트리

    Attributes:
        name: 플러그인 이름
        table_map: {테이블 이름: 테이블 팩토리}
    """

    name: str
    table_map: dict[str, Callable[[], Table]] = field(default_factory=dict)

    def table(self, name: str) -> Table:
        factory = self.table_map.get(name)
        if factory is None:
            raise TableNotFoundError(name)
        return factory()

    def table_names(self) -> list[str]:
        return sorted(self.table_map)

    def tables(self) -> list[Table]:
        return [self.table(name) for name in self.table_names()]
