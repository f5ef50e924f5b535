"""
tests/core/parallel/test_parallel_types.py - core/parallel/types.py 테스트
"""

from datetime import datetime

from core.parallel.types import (
    ErrorCategory,
    ParallelExecutionResult,
    TaskError,
    TaskResult,
)


def _error(identifier="sub-a", code="ResourceNotFound", category=ErrorCategory.NOT_FOUND):
    return TaskError(
        identifier=identifier,
        table="azure_lb",
        category=category,
        error_code=code,
        message="not found",
    )


class TestErrorCategory:
    """ErrorCategory 열거형 테스트"""

    def test_values(self):
        assert ErrorCategory.THROTTLING.value == "throttling"
        assert ErrorCategory.ACCESS_DENIED.value == "access_denied"
        assert ErrorCategory.SERVICE_ERROR.value == "service_error"
        assert ErrorCategory.UNKNOWN.value == "unknown"

    def test_category_count(self):
        assert len(ErrorCategory) == 9


class TestTaskError:
    """TaskError 데이터 클래스 테스트"""

    def test_defaults(self):
        error = _error()

        assert error.retries == 0
        assert error.original_exception is None
        assert isinstance(error.timestamp, datetime)

    def test_retryable_categories(self):
        """쓰로틀링/네트워크/타임아웃/서비스 에러만 재시도 가능"""
        retryable = {
            ErrorCategory.THROTTLING,
            ErrorCategory.NETWORK,
            ErrorCategory.TIMEOUT,
            ErrorCategory.SERVICE_ERROR,
        }
        for category in ErrorCategory:
            assert _error(category=category).is_retryable() is (category in retryable)

    def test_to_dict(self):
        result = _error(code="TooManyRequests", category=ErrorCategory.THROTTLING).to_dict()

        assert result["identifier"] == "sub-a"
        assert result["table"] == "azure_lb"
        assert result["category"] == "throttling"
        assert result["error_code"] == "TooManyRequests"
        assert "timestamp" in result

    def test_str_representation(self):
        assert str(_error()) == "[sub-a/azure_lb] ResourceNotFound: not found"


class TestTaskResult:
    """TaskResult 테스트"""

    def test_str_success(self):
        result = TaskResult(identifier="prod", table="azure_lb", success=True, duration_ms=100)
        assert str(result) == "[prod/azure_lb] OK (100ms)"

    def test_str_failure(self):
        result = TaskResult(identifier="prod", table="azure_lb", success=False, error=_error())
        assert "FAIL" in str(result)


class TestParallelExecutionResult:
    """ParallelExecutionResult 집계 테스트"""

    def _result(self):
        return ParallelExecutionResult(
            results=[
                TaskResult("a", "azure_lb", True, data=[{"name": "lb-1"}, {"name": "lb-2"}], duration_ms=10),
                TaskResult("b", "azure_lb", True, data={"name": "lb-3"}, duration_ms=20),
                TaskResult("c", "azure_lb", True, data=None, duration_ms=5),
                TaskResult("d", "azure_lb", False, error=_error("d"), duration_ms=1),
                TaskResult(
                    "e",
                    "azure_lb",
                    False,
                    error=_error("e", "TooManyRequests", ErrorCategory.THROTTLING),
                ),
            ]
        )

    def test_counts(self):
        result = self._result()

        assert result.success_count == 3
        assert result.error_count == 2
        assert result.total_count == 5
        assert result.total_duration_ms == 36

    def test_get_data_skips_none(self):
        assert len(self._result().get_data()) == 2

    def test_get_flat_data(self):
        names = [row["name"] for row in self._result().get_flat_data()]
        assert names == ["lb-1", "lb-2", "lb-3"]

    def test_get_errors_by_category(self):
        grouped = self._result().get_errors_by_category()

        assert len(grouped[ErrorCategory.NOT_FOUND]) == 1
        assert len(grouped[ErrorCategory.THROTTLING]) == 1

    def test_error_summary(self):
        summary = self._result().get_error_summary()

        assert summary.startswith("에러 2건:")
        assert "ResourceNotFound: 1건 (d)" in summary
        assert "TooManyRequests: 1건 (e)" in summary

    def test_error_summary_empty(self):
        assert ParallelExecutionResult().get_error_summary() == ""

    def test_error_summary_truncates_connections(self):
        result = ParallelExecutionResult(
            results=[TaskResult(name, "t", False, error=_error(name)) for name in ["a", "b", "c", "d", "e"]]
        )
        assert "(a, b, c 외 2개)" in result.get_error_summary()
