"""
core/parallel/types.py - 병렬 실행 결과 타입

연결(구독) 단위 쿼리 실행 결과와 에러 정보를 표현하는 데이터 클래스입니다.

- ErrorCategory: 에러 분류
- TaskError: 단일 작업 실패 정보
- TaskResult: 단일 작업 결과
- ParallelExecutionResult: 전체 실행 결과 집계
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """에러 분류"""

    THROTTLING = "throttling"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    TIMEOUT = "timeout"
    EXPIRED_TOKEN = "expired_token"
    INVALID_REQUEST = "invalid_request"
    SERVICE_ERROR = "service_error"
    UNKNOWN = "unknown"


_RETRYABLE_CATEGORIES = {
    ErrorCategory.THROTTLING,
    ErrorCategory.NETWORK,
    ErrorCategory.TIMEOUT,
    ErrorCategory.SERVICE_ERROR,
}


@dataclass
class TaskError:
    """작업 실패 정보

    Attributes:
        identifier: 연결 이름
        table: 조회한 테이블 이름
        category: 에러 분류
        error_code: ARM 에러 코드 또는 예외 클래스명
        message: 에러 메시지
        retries: 재시도 횟수
        original_exception: 원본 예외
        timestamp: 발생 시각
    """

    identifier: str
    table: str
    category: ErrorCategory
    error_code: str
    message: str
    retries: int = 0
    original_exception: Exception | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def is_retryable(self) -> bool:
        """재시도 가능한 에러인지"""
        return self.category in _RETRYABLE_CATEGORIES

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "table": self.table,
            "category": self.category.value,
            "error_code": self.error_code,
            "message": self.message,
            "retries": self.retries,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return f"[{self.identifier}/{self.table}] {self.error_code}: {self.message}"


@dataclass
class TaskResult:
    """작업 결과

    Attributes:
        identifier: 연결 이름
        table: 조회한 테이블 이름
        success: 성공 여부
        data: 결과 데이터 (행 목록)
        error: 실패 시 에러 정보
        duration_ms: 실행 시간 (밀리초)
    """

    identifier: str
    table: str
    success: bool
    data: Any = None
    error: TaskError | None = None
    duration_ms: float = 0.0

    def __str__(self) -> str:
        status = "OK" if self.success else "FAIL"
        return f"[{self.identifier}/{self.table}] {status} ({self.duration_ms:.0f}ms)"


@dataclass
class ParallelExecutionResult:
    """병렬 실행 전체 결과"""

    results: list[TaskResult] = field(default_factory=list)

    @property
    def successful(self) -> list[TaskResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[TaskResult]:
        return [r for r in self.results if not r.success]

    @property
    def success_count(self) -> int:
        return len(self.successful)

    @property
    def error_count(self) -> int:
        return len(self.failed)

    @property
    def total_count(self) -> int:
        return len(self.results)

    @property
    def total_duration_ms(self) -> float:
        return sum(r.duration_ms for r in self.results)

    def get_data(self) -> list[Any]:
        """성공한 작업의 데이터 목록 (None 제외)"""
        return [r.data for r in self.successful if r.data is not None]

    def get_flat_data(self) -> list[Any]:
        """성공한 작업의 데이터를 하나의 리스트로 평탄화"""
        flat: list[Any] = []
        for data in self.get_data():
            if isinstance(data, list):
                flat.extend(data)
            else:
                flat.append(data)
        return flat

    def get_errors(self) -> list[TaskError]:
        return [r.error for r in self.failed if r.error is not None]

    def get_errors_by_category(self) -> dict[ErrorCategory, list[TaskError]]:
        grouped: dict[ErrorCategory, list[TaskError]] = {}
        for error in self.get_errors():
            grouped.setdefault(error.category, []).append(error)
        return grouped

    def get_error_summary(self) -> str:
        """에러 요약 문자열

        Returns:
            에러 코드별 발생 횟수 요약 (에러 없으면 빈 문자열)
        """
        errors = self.get_errors()
        if not errors:
            return ""

        counts = Counter(e.error_code for e in errors)
        lines = [f"에러 {len(errors)}건:"]
        for code, count in counts.most_common():
            connections = sorted({e.identifier for e in errors if e.error_code == code})
            sample = ", ".join(connections[:3])
            if len(connections) > 3:
                sample += f" 외 {len(connections) - 3}개"
            lines.append(f"  - {code}: {count}건 ({sample})")
        return "\n".join(lines)
