"""
core/plugin - 테이블 플러그인 모델

테이블 선언(Table, Column, ...), 쿼리 컨텍스트(QueryData), 컬럼 변환,
로컬 호스트(QueryRunner)를 제공합니다.
"""

from .host import QueryRunner, default_client_factory
from .query import UNLIMITED, HydrateData, QueryData
from .table import (
    Column,
    ColumnType,
    GetConfig,
    HydrateConfig,
    IgnoreConfig,
    KeyColumnSet,
    ListConfig,
    Plugin,
    Table,
)
from .transform import (
    Transform,
    TransformData,
    from_,
    from_camel,
    from_constant,
    from_field,
    from_value,
    parse_timestamp,
    to_lower,
    to_string,
)

__all__: list[str] = [
    # Host
    "QueryRunner",
    "default_client_factory",
    # Query
    "QueryData",
    "HydrateData",
    "UNLIMITED",
    # Table
    "Column",
    "ColumnType",
    "GetConfig",
    "HydrateConfig",
    "IgnoreConfig",
    "KeyColumnSet",
    "ListConfig",
    "Plugin",
    "Table",
    # Transform
    "Transform",
    "TransformData",
    "from_",
    "from_camel",
    "from_constant",
    "from_field",
    "from_value",
    "parse_timestamp",
    "to_lower",
    "to_string",
]
