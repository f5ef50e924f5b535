"""
cli/headless.py - 비대화형 쿼리 실행

`azt query` 명령의 실행부입니다. 선택한 연결(구독)마다 테이블 쿼리를
병렬 실행하고 결과를 지정한 형식으로 출력합니다.

Usage:
    azt query azure_network_watcher
    azt query azure_lb -w resource_group=my-rg -l 10 -f json -o lb.json
    azt query azure_subscription -c prod -c dev -C id,display_name

종료 코드:
    0: 성공 (무시된 에러는 경고로만 표시)
    1: 설정/검증 오류 또는 연결 쿼리 실패
    130: 사용자 중단 (Ctrl+C)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from core.config import ConnectionConfig, load_connections
from core.exceptions import AztError, ConfigError, ValidationError, format_error_for_user
from core.parallel import parallel_query
from core.plugin import QueryRunner
from shared.azure.tables import plugin

from .output import OutputFormat, write_rows
from .ui.console import err_console, print_error, print_warning

logger = logging.getLogger(__name__)


@dataclass
class HeadlessConfig:
    """쿼리 실행 설정"""

    table: str

    # 대상 연결 (비어 있으면 설정 파일의 모든 연결)
    connections: list[str] = field(default_factory=list)
    config_path: str | None = None

    # 쿼리
    quals: dict[str, str] = field(default_factory=dict)
    limit: int | None = None
    columns: list[str] | None = None

    # 출력
    format: str = "table"
    output: str | None = None
    quiet: bool = False


class HeadlessRunner:
    """비대화형 쿼리 실행기

    Attributes:
        config: 실행 설정
        runner: 테이블 쿼리 실행기 (테스트에서 교체)
    """

    def __init__(self, config: HeadlessConfig, runner: QueryRunner | None = None):
        self.config = config
        self.runner = runner or QueryRunner(plugin())
        self.collector = self.runner.collector
        self.cancel_event = threading.Event()

    def run(self) -> int:
        """쿼리 실행

        Returns:
            0: 성공, 1: 실패, 130: 중단
        """
        try:
            table = self.runner.plugin.table(self.config.table)
            connections = self._select_connections()
            columns = self.config.columns or table.column_names()
            return self._execute(connections, columns)

        except KeyboardInterrupt:
            self.cancel_event.set()
            err_console.print("\n[dim]취소되었습니다[/dim]")
            return 130
        except AztError as e:
            print_error(format_error_for_user(e))
            return 1

    def _select_connections(self) -> list[ConnectionConfig]:
        available = load_connections(self.config.config_path)
        if not self.config.connections:
            return list(available.values())

        selected = []
        for name in self.config.connections:
            if name not in available:
                raise ConfigError(
                    "connection",
                    f"연결을 찾을 수 없습니다: {name} (사용 가능: {', '.join(available)})",
                )
            selected.append(available[name])
        return selected

    def _execute(self, connections: list[ConnectionConfig], columns: list[str]) -> int:
        def run(connection: ConnectionConfig) -> list[dict]:
            return self.runner.execute(
                self.config.table,
                connection,
                quals=self.config.quals,
                limit=self.config.limit,
                columns=columns,
                cancel_event=self.cancel_event,
            )

        result = parallel_query(connections, run, table=self.config.table)

        # 컬럼/limit 검증 오류는 모든 연결에서 동일하므로 첫 오류를 그대로 보고
        for failed in result.failed:
            if failed.error and isinstance(failed.error.original_exception, ValidationError):
                raise failed.error.original_exception

        rows = result.get_flat_data()
        if self.config.limit is not None:
            rows = rows[: self.config.limit]

        write_rows(rows, columns, OutputFormat(self.config.format), self.config.output, title=self.config.table)

        if not self.config.quiet:
            if self.collector.has_errors:
                print_warning(self.collector.get_summary())
            for failed in result.failed:
                print_error(f"{failed.identifier}: {failed.error.message if failed.error else '알 수 없는 오류'}")
            if self.config.output:
                err_console.print(f"[dim]{len(rows)}행 저장: {self.config.output}[/dim]")

        return 0 if result.error_count == 0 else 1


def run_headless(
    table: str,
    connections: list[str] | None = None,
    quals: dict[str, str] | None = None,
    limit: int | None = None,
    columns: list[str] | None = None,
    format: str = "table",
    output: str | None = None,
    config_path: str | None = None,
    quiet: bool = False,
) -> int:
    """쿼리 실행 편의 함수

    Returns:
        0: 성공, 1: 실패
    """
    config = HeadlessConfig(
        table=table,
        connections=list(connections or []),
        config_path=config_path,
        quals=dict(quals or {}),
        limit=limit,
        columns=columns,
        format=format,
        output=output,
        quiet=quiet,
    )
    return HeadlessRunner(config).run()
