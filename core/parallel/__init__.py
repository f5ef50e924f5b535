"""
core/parallel - 재시도 / Rate limit / 병렬 처리 모듈

ARM 호출의 재시도와 페이지 간 협조 대기, 멀티 연결 병렬 실행을 담당합니다.

주요 구성 요소:
- ArmClient / get_client: 재시도가 적용된 ARM REST 클라이언트
- apply_retry_rules: 연결 설정의 재시도 규칙 → RetryConfig
- TokenBucketRateLimiter: 페이지 요청 간 쓰로틀링 방지
- QuotaTracker: 구독 읽기 쿼터 헤더 추적
- ParallelQueryExecutor / parallel_query: 연결별 병렬 실행

Example:
    from core.parallel import parallel_query

    result = parallel_query(connections, run, max_workers=5, table="azure_lb")

    rows = result.get_flat_data()
    print(f"성공: {result.success_count}, 실패: {result.error_count}")

    if result.error_count > 0:
        print(result.get_error_summary())
"""

from .client import ArmClient, Page, get_client
from .decorators import RetryConfig, apply_retry_rules, is_retryable, with_retry
from .errors import CollectedError, ErrorCollector, ErrorSeverity
from .executor import ParallelConfig, ParallelQueryExecutor, parallel_query
from .quotas import QuotaStatus, QuotaTracker, get_quota_tracker, reset_quota_tracker
from .rate_limiter import (
    RateLimiterConfig,
    TokenBucketRateLimiter,
    get_rate_limiter,
    reset_rate_limiters,
)
from .types import ErrorCategory, ParallelExecutionResult, TaskError, TaskResult

__all__: list[str] = [
    # Executor
    "ParallelQueryExecutor",
    "ParallelConfig",
    "parallel_query",
    # Client (retry 적용)
    "ArmClient",
    "Page",
    "get_client",
    # Decorators
    "RetryConfig",
    "apply_retry_rules",
    "is_retryable",
    "with_retry",
    # Error handling
    "ErrorCollector",
    "ErrorSeverity",
    "CollectedError",
    # Quotas
    "QuotaStatus",
    "QuotaTracker",
    "get_quota_tracker",
    "reset_quota_tracker",
    # Rate Limiter
    "TokenBucketRateLimiter",
    "RateLimiterConfig",
    "get_rate_limiter",
    "reset_rate_limiters",
    # Types
    "ErrorCategory",
    "TaskError",
    "TaskResult",
    "ParallelExecutionResult",
]
