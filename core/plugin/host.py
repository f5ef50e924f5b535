"""
core/plugin/host.py - 로컬 플러그인 호스트

테이블 하나를 연결 하나에 대해 실행하고 결과 행을 만들어 내는 QueryRunner입니다.

실행 흐름:
    1. Get 키 컬럼이 모두 equality qual로 주어지면 Get, 아니면 List
    2. List에 parent_hydrate가 있으면 부모를 나열하고 부모마다 List 호출
    3. 항목마다 필요한 hydrate를 한 번씩 호출 → 컬럼 변환 → 타입 변환
    4. equality qual 후처리 필터 → 행 예산 차감 → 싱크로 전달

무시 규칙(IgnoreConfig 또는 연결의 ignore_error_codes)에 걸린 에러는
Get은 빈 결과, List는 중단, Hydrate는 None 값으로 처리되고 ErrorCollector에
기록됩니다. 나머지 에러는 호출자에게 전파됩니다.

Example:
    from core.plugin import QueryRunner
    from shared.azure.tables import plugin

    runner = QueryRunner(plugin())
    rows = runner.execute("azure_network_watcher", connection, limit=10)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from core.auth.session import get_session
from core.config import ConnectionConfig
from core.exceptions import ValidationError, matches_error_codes
from core.parallel.client import ArmClient, get_client
from core.parallel.errors import ErrorCollector
from core.parallel.quotas import get_quota_tracker
from core.parallel.rate_limiter import get_rate_limiter

from .query import HydrateData, QueryData
from .table import Column, HydrateFunc, IgnoreConfig, Plugin, Table

logger = logging.getLogger(__name__)

Row = dict[str, Any]


def default_client_factory(connection: ConnectionConfig) -> ArmClient:
    """연결 설정으로 세션을 얻어 ArmClient 생성"""
    return get_client(get_session(connection), connection)


class _RowProcessingError(Exception):
    """행 처리(hydrate/변환) 중 발생한 에러

    List 함수의 무시 규칙이 행 처리 에러를 삼키지 않도록 감쌉니다.
    """

    def __init__(self, error: Exception):
        super().__init__(str(error))
        self.error = error


class QueryRunner:
    """테이블 쿼리 실행기

    Attributes:
        plugin: 테이블 레지스트리
        collector: 무시된 에러 수집기
        client_factory: 연결 → ArmClient 팩토리 (테스트에서 교체)
    """

    def __init__(
        self,
        plugin: Plugin,
        collector: ErrorCollector | None = None,
        client_factory: Callable[[ConnectionConfig], ArmClient] | None = None,
    ):
        self.plugin = plugin
        self.collector = collector or ErrorCollector()
        self.client_factory = client_factory or default_client_factory

    # -------------------------------------------------------------------------
    # 진입점
    # -------------------------------------------------------------------------

    def execute(
        self,
        table_name: str,
        connection: ConnectionConfig,
        quals: dict[str, Any] | None = None,
        limit: int | None = None,
        columns: list[str] | None = None,
        sink: Callable[[Row], None] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> list[Row]:
        """테이블 쿼리 실행

        Args:
            table_name: 테이블 이름
            connection: 연결 설정
            quals: {컬럼: 값} equality 조건
            limit: 최대 행 수 (None이면 무제한)
            columns: 반환할 컬럼 (None이면 전체)
            sink: 행 콜백 (None이면 반환 리스트에 모음)
            cancel_event: 취소 이벤트

        Returns:
            sink가 없으면 결과 행 목록, 있으면 빈 리스트

        Raises:
            TableNotFoundError: 등록되지 않은 테이블
            ValidationError: 잘못된 컬럼/limit
        """
        table = self.plugin.table(table_name)
        quals = dict(quals or {})
        selected = list(columns) if columns else table.column_names()

        for name in list(quals) + selected:
            if table.get_column(name) is None:
                raise ValidationError("column", name, f"{table.name}의 컬럼")
        if limit is not None and limit < 0:
            raise ValidationError("limit", limit, "0 이상의 정수")

        rows: list[Row] = []
        emit = sink or rows.append

        client = self.client_factory(connection)
        d = QueryData(
            table=table,
            connection=connection,
            client=client,
            equals_quals=quals,
            limit=limit,
            rate_limiter=get_rate_limiter(table.service, scope=client.subscription_id),
            quota_tracker=get_quota_tracker(),
            cancel_event=cancel_event,
        )

        use_get = table.get_config is not None and table.get_config.key_columns.is_satisfied_by(quals)
        logger.debug(f"[{connection.name}] {table.name} {'get' if use_get else 'list'} 실행 (limit={limit})")

        if d.rows_remaining() == 0:
            return rows

        if use_get:
            self._run_get(d, table, selected, emit)
        else:
            self._run_list(d, table, selected, emit)

        logger.debug(f"[{connection.name}] {table.name} 완료: {d.rows_emitted}행")
        return rows

    # -------------------------------------------------------------------------
    # Get / List
    # -------------------------------------------------------------------------

    def _run_get(self, d: QueryData, table: Table, selected: list[str], emit: Callable[[Row], None]) -> None:
        assert table.get_config is not None
        config = table.get_config
        try:
            item = config.hydrate(d, HydrateData())
        except Exception as e:
            if self._should_ignore(e, config.ignore_config, d.connection):
                self._record_ignored(e, d, "get")
                return
            raise

        if item is None:
            return

        # 키 컬럼은 API가 이미 해석했으므로 후처리 필터에서 제외
        key_columns = set(config.key_columns.columns)
        try:
            self._process_item(d, table, item, None, selected, emit, skip_quals=key_columns)
        except _RowProcessingError as e:
            raise e.error from None

    def _run_list(self, d: QueryData, table: Table, selected: list[str], emit: Callable[[Row], None]) -> None:
        if table.list_config is None:
            raise ValidationError(
                "quals",
                ", ".join(sorted(d.equals_quals)) or "(없음)",
                f"{table.name}은(는) Get 키 컬럼 필요: "
                + ", ".join(table.get_config.key_columns.columns if table.get_config else ()),
            )

        config = table.list_config

        def on_item(item: Any, parent: Any = None) -> None:
            self._process_item(d, table, item, parent, selected, emit)

        try:
            if config.parent_hydrate is None:
                child = d.for_parent(on_item)
                config.hydrate(child, HydrateData())
            else:
                def on_parent(parent: Any) -> None:
                    child = d.for_parent(lambda item: on_item(item, parent))
                    try:
                        config.hydrate(child, HydrateData(item=parent))
                    except _RowProcessingError:
                        raise
                    except Exception as e:
                        # 무시된 에러는 이 부모만 건너뜀
                        if not self._should_ignore(e, config.ignore_config, d.connection):
                            raise
                        self._record_ignored(e, d, "list")

                config.parent_hydrate(d.for_parent(on_parent), HydrateData())
        except _RowProcessingError as e:
            raise e.error from None
        except Exception as e:
            if self._should_ignore(e, config.ignore_config, d.connection):
                self._record_ignored(e, d, "list")
                return
            raise

    # -------------------------------------------------------------------------
    # 행 처리
    # -------------------------------------------------------------------------

    def _process_item(
        self,
        d: QueryData,
        table: Table,
        item: Any,
        parent: Any,
        selected: list[str],
        emit: Callable[[Row], None],
        skip_quals: set[str] | None = None,
    ) -> None:
        if d.rows_remaining() == 0:
            return

        try:
            row = self._build_row(d, table, item, parent, selected, skip_quals or set())
        except Exception as e:
            raise _RowProcessingError(e) from e

        if row is None:
            return
        if not d.record_row():
            return
        emit({name: row[name] for name in selected})

    def _build_row(
        self,
        d: QueryData,
        table: Table,
        item: Any,
        parent: Any,
        selected: list[str],
        skip_quals: set[str],
    ) -> Row | None:
        h = HydrateData(item=item, parent_item=parent)
        results: dict[HydrateFunc, Any] = {}
        needed = list(dict.fromkeys(selected + list(d.equals_quals)))

        row: Row = {}
        for name in needed:
            column = table.get_column(name)
            assert column is not None
            source = item
            if column.hydrate is not None:
                if column.hydrate not in results:
                    results[column.hydrate] = self._call_hydrate(d, table, column.hydrate, h)
                source = results[column.hydrate]
            row[name] = column.resolve(source)

        for name, expected in d.equals_quals.items():
            if name in skip_quals:
                continue
            if not _qual_matches(table.get_column(name), row[name], expected):
                return None
        return row

    def _call_hydrate(self, d: QueryData, table: Table, func: HydrateFunc, h: HydrateData) -> Any:
        config = table.hydrate_config_for(func)
        try:
            return func(d, h)
        except Exception as e:
            if self._should_ignore(e, config.ignore_config if config else None, d.connection):
                self._record_ignored(e, d, func.__name__)
                return None
            raise

    # -------------------------------------------------------------------------
    # 에러 처리
    # -------------------------------------------------------------------------

    @staticmethod
    def _should_ignore(error: Exception, ignore_config: IgnoreConfig | None, connection: ConnectionConfig) -> bool:
        if ignore_config is not None and ignore_config.should_ignore(error):
            return True
        return matches_error_codes(error, connection.ignore_error_codes)

    def _record_ignored(self, error: Exception, d: QueryData, operation: str) -> None:
        self.collector.collect(error, connection=d.connection.name, table=d.table.name, operation=operation)


def _qual_matches(column: Column | None, value: Any, expected: Any) -> bool:
    """equality qual 비교 (qual 값은 컬럼 타입으로 변환 후 비교)"""
    if column is None:
        return False
    if value is None:
        return expected is None
    try:
        coerced = column.type.coerce(expected)
    except (TypeError, ValueError):
        return False
    return bool(value == coerced)
