"""
tests/core/parallel/test_parallel_errors.py - 에러 수집기 테스트
"""

import threading

from core.exceptions import APICallError
from core.parallel.errors import CollectedError, ErrorCollector, ErrorSeverity
from core.parallel.types import ErrorCategory


def _not_found():
    return APICallError("GET /x", 404, "ResourceNotFound", "Resource 'x' not found")


class TestErrorCollector:
    """ErrorCollector 테스트"""

    def test_collect(self):
        collector = ErrorCollector()
        collected = collector.collect(_not_found(), "prod", "azure_mariadb_server", "get")

        assert isinstance(collected, CollectedError)
        assert collected.error_code == "ResourceNotFound"
        assert collected.error_message == "Resource 'x' not found"
        assert collected.category == ErrorCategory.NOT_FOUND
        assert collected.severity == ErrorSeverity.INFO
        assert collector.has_errors

    def test_str(self):
        collected = ErrorCollector().collect(_not_found(), "prod", "azure_lb", "list_load_balancers")
        assert str(collected) == "[INFO] prod - azure_lb.list_load_balancers: ResourceNotFound"

    def test_plain_exception_message(self):
        collected = ErrorCollector().collect(ValueError("bad"), "prod", "azure_lb", "list")

        assert collected.error_code == "ValueError"
        assert collected.error_message == "bad"

    def test_to_dict(self):
        collected = ErrorCollector().collect(_not_found(), "prod", "azure_lb", "get", resource_id="/subscriptions/x")
        data = collected.to_dict()

        assert data["category"] == "not_found"
        assert data["severity"] == "info"
        assert data["resource_id"] == "/subscriptions/x"

    def test_summary_empty(self):
        assert ErrorCollector().get_summary() == "에러 없음"

    def test_summary_grouped_by_code(self):
        collector = ErrorCollector()
        collector.collect(_not_found(), "prod", "azure_lb", "get")
        collector.collect(_not_found(), "dev", "azure_lb", "get")
        collector.collect(APICallError("GET /y", 404), "dev", "azure_lb", "get")

        assert collector.get_summary() == "무시된 에러 3건 (HTTP 404: 1건, ResourceNotFound: 2건)"

    def test_critical_errors(self):
        collector = ErrorCollector()
        collector.collect(_not_found(), "prod", "azure_lb", "get")
        collector.collect(ValueError("x"), "prod", "azure_lb", "list", severity=ErrorSeverity.CRITICAL)

        assert len(collector.critical_errors) == 1

    def test_get_by_connection(self):
        collector = ErrorCollector()
        collector.collect(_not_found(), "prod", "azure_lb", "get")
        collector.collect(_not_found(), "dev", "azure_lb", "get")
        collector.collect(_not_found(), "prod", "azure_lb", "get")

        grouped = collector.get_by_connection()
        assert len(grouped["prod"]) == 2
        assert len(grouped["dev"]) == 1

    def test_clear(self):
        collector = ErrorCollector()
        collector.collect(_not_found(), "prod", "azure_lb", "get")
        collector.clear()

        assert not collector.has_errors
        assert collector.errors == []

    def test_thread_safety(self):
        collector = ErrorCollector()

        def worker(i):
            collector.collect(_not_found(), f"conn-{i}", "azure_lb", "get")

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(50)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(collector.errors) == 50
