"""
tests/core/parallel/test_executor.py - 멀티 연결 병렬 실행기 테스트
"""

import threading
import time

import pytest

from core.config import ConnectionConfig
from core.exceptions import APICallError
from core.parallel.executor import ParallelConfig, ParallelQueryExecutor, parallel_query
from core.parallel.types import ErrorCategory


def _connections(*names):
    return [ConnectionConfig(name=name, subscription_id=f"sub-{name}") for name in names]


class TestParallelConfig:
    """ParallelConfig 검증"""

    def test_default(self):
        assert ParallelConfig().max_workers == 10

    def test_invalid(self):
        with pytest.raises(ValueError):
            ParallelConfig(max_workers=0)

    def test_capped(self):
        assert ParallelConfig(max_workers=500).max_workers == 100


class TestParallelQueryExecutor:
    """ParallelQueryExecutor 테스트"""

    def test_empty_connections(self):
        result = ParallelQueryExecutor([]).execute(lambda c: [], table="azure_lb")
        assert result.total_count == 0

    def test_results_in_connection_order(self):
        """완료 순서와 무관하게 연결 순서 유지"""

        def run(connection):
            if connection.name == "a":
                time.sleep(0.05)
            return [{"conn": connection.name}]

        result = ParallelQueryExecutor(_connections("a", "b", "c")).execute(run, table="azure_lb")

        assert [r.identifier for r in result.results] == ["a", "b", "c"]
        assert [row["conn"] for row in result.get_flat_data()] == ["a", "b", "c"]

    def test_partial_failure(self):
        """한 연결 실패가 다른 연결 결과에 영향 없음"""

        def run(connection):
            if connection.name == "bad":
                raise APICallError("GET /subscriptions/x", 403, "AuthorizationFailed", "denied")
            return [{"conn": connection.name}]

        result = parallel_query(_connections("good", "bad"), run, table="azure_lb")

        assert result.success_count == 1
        assert result.error_count == 1
        error = result.failed[0].error
        assert error.identifier == "bad"
        assert error.table == "azure_lb"
        assert error.category == ErrorCategory.ACCESS_DENIED
        assert error.error_code == "AuthorizationFailed"
        assert isinstance(error.original_exception, APICallError)

    def test_runs_concurrently(self):
        barrier = threading.Barrier(3, timeout=2)

        def run(connection):
            barrier.wait()
            return connection.name

        result = parallel_query(_connections("a", "b", "c"), run, max_workers=3)
        assert result.success_count == 3

    def test_duration_recorded(self):
        result = parallel_query(_connections("a"), lambda c: time.sleep(0.01) or [])
        assert result.results[0].duration_ms > 0
