"""
core/parallel/executor.py - 멀티 연결 병렬 실행기

Map-Reduce 패턴으로 여러 연결(구독)에 같은 테이블 쿼리를 병렬 실행합니다.
ThreadPoolExecutor 기반이며, 연결 하나가 실패해도 나머지 결과는 유지됩니다.

재시도는 ArmClient가 요청 단위로 수행하므로 여기서는 작업 전체를
다시 실행하지 않습니다.

주요 구성 요소:
- ParallelConfig: 병렬 실행 설정 (워커 수)
- ParallelQueryExecutor: 멀티 연결 병렬 실행기
- parallel_query: 간편한 병렬 실행 래퍼 함수

Example:
    from core.parallel import parallel_query

    def run(connection):
        return runner.execute("azure_network_watcher", connection, limit=100)

    result = parallel_query(connections, run, table="azure_network_watcher")
    rows = result.get_flat_data()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import TypeVar

from core.config import ConnectionConfig, settings

from .decorators import categorize_error, get_error_code
from .types import ErrorCategory, ParallelExecutionResult, TaskError, TaskResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _clear_exception_chain(e: BaseException) -> None:
    """traceback + chained exception 메모리 누수 방지"""
    e.__traceback__ = None
    if e.__context__ is not None:
        e.__context__.__traceback__ = None
    if e.__cause__ is not None:
        e.__cause__.__traceback__ = None


@dataclass
class ParallelConfig:
    """병렬 실행 설정

    Attributes:
        max_workers: 최대 동시 스레드 수 (1~100)
    """

    max_workers: int = settings.MAX_WORKERS

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.max_workers > 100:
            self.max_workers = 100


class ParallelQueryExecutor:
    """멀티 연결 병렬 실행기

    Example:
        executor = ParallelQueryExecutor(connections, ParallelConfig(max_workers=5))
        result = executor.execute(run, table="azure_lb")

        print(f"성공: {result.success_count}, 실패: {result.error_count}")
    """

    def __init__(
        self,
        connections: Sequence[ConnectionConfig],
        config: ParallelConfig | None = None,
    ):
        self.connections = list(connections)
        self.config = config or ParallelConfig()

    def execute(
        self,
        func: Callable[[ConnectionConfig], T],
        table: str = "",
    ) -> ParallelExecutionResult:
        """작업 함수를 모든 연결에 병렬 실행

        Args:
            func: (connection) -> T 함수
            table: 테이블 이름 (결과/로깅용)

        Returns:
            ParallelExecutionResult: 연결 순서대로 정렬된 전체 실행 결과
        """
        if not self.connections:
            logger.warning("실행할 연결이 없습니다")
            return ParallelExecutionResult()

        workers = min(self.config.max_workers, len(self.connections))
        logger.info(f"병렬 실행 시작: {len(self.connections)}개 연결, max_workers={workers}, table={table}")

        results: dict[str, TaskResult] = {}
        start_time = time.monotonic()

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self._execute_single, func, connection, table): connection
                for connection in self.connections
            }

            for future in as_completed(futures):
                connection = futures[future]
                try:
                    results[connection.name] = future.result()
                except Exception as e:
                    # 예상치 못한 executor 에러
                    logger.error(f"작업 실행 중 예외 [{connection.name}/{table}]: {e}")
                    _clear_exception_chain(e)
                    results[connection.name] = TaskResult(
                        identifier=connection.name,
                        table=table,
                        success=False,
                        error=TaskError(
                            identifier=connection.name,
                            table=table,
                            category=ErrorCategory.UNKNOWN,
                            error_code="ExecutorError",
                            message=str(e),
                            original_exception=e,
                        ),
                    )

        total_time = (time.monotonic() - start_time) * 1000
        ordered = [results[c.name] for c in self.connections if c.name in results]
        exec_result = ParallelExecutionResult(results=ordered)

        logger.info(
            f"병렬 실행 완료: 성공 {exec_result.success_count}, 실패 {exec_result.error_count}, 총 {total_time:.0f}ms"
        )
        return exec_result

    def _execute_single(
        self,
        func: Callable[[ConnectionConfig], T],
        connection: ConnectionConfig,
        table: str,
    ) -> TaskResult:
        """단일 연결 실행 (워커 스레드 내에서 호출)"""
        start_time = time.monotonic()
        try:
            data = func(connection)
            return TaskResult(
                identifier=connection.name,
                table=table,
                success=True,
                data=data,
                duration_ms=(time.monotonic() - start_time) * 1000,
            )
        except Exception as e:
            logger.debug(f"[{connection.name}/{table}] 실패: {e}")
            _clear_exception_chain(e)
            return TaskResult(
                identifier=connection.name,
                table=table,
                success=False,
                error=TaskError(
                    identifier=connection.name,
                    table=table,
                    category=categorize_error(e),
                    error_code=get_error_code(e),
                    message=str(e),
                    original_exception=e,
                ),
                duration_ms=(time.monotonic() - start_time) * 1000,
            )


def parallel_query(
    connections: Sequence[ConnectionConfig],
    func: Callable[[ConnectionConfig], T],
    max_workers: int = settings.MAX_WORKERS,
    table: str = "",
) -> ParallelExecutionResult:
    """병렬 실행 편의 함수

    Args:
        connections: 대상 연결 목록
        func: (connection) -> T
        max_workers: 최대 동시 스레드 수
        table: 테이블 이름 (결과/로깅용)

    Returns:
        ParallelExecutionResult

    Example:
        result = parallel_query(connections, run, max_workers=5, table="azure_lb")

        if result.error_count > 0:
            print(result.get_error_summary())
    """
    executor = ParallelQueryExecutor(connections, ParallelConfig(max_workers=max_workers))
    return executor.execute(func, table=table)
