"""
core/parallel/errors.py - 무시된 에러 수집 및 관리

쿼리 실행 중 무시 규칙(IgnoreConfig, ignore_error_codes)에 걸려 빈 결과로
처리된 에러를 버리지 않고 모아 두었다가 실행 후 요약 보고합니다.

주요 구성 요소:
- ErrorSeverity: 에러 심각도 분류
- CollectedError: 수집된 에러 상세 정보
- ErrorCollector: 스레드 세이프 에러 수집기

Example:
    collector = ErrorCollector()

    try:
        item = client.get(path, api_version)
    except APICallError as e:
        if not should_ignore(e):
            raise
        collector.collect(e, connection="prod", table="azure_mariadb_server", operation="get")

    if collector.has_errors:
        print(collector.get_summary())
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .decorators import categorize_error, get_error_code
from .types import ErrorCategory

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """에러 심각도 분류

    수집된 에러의 심각도를 나타내며, 로깅 레벨과 보고 여부를 결정합니다.
    """

    CRITICAL = "critical"  # 쿼리 실패 - 반드시 보고
    WARNING = "warning"  # 부분 실패 - 보고하되 계속 진행
    INFO = "info"  # 무시 규칙으로 빈 결과 처리
    DEBUG = "debug"


@dataclass
class CollectedError:
    """수집된 에러 상세 정보

    Attributes:
        timestamp: 에러 발생 시각
        connection: 연결 이름
        table: 테이블 이름
        operation: 작업 (list / get / hydrate 함수 이름)
        error_code: ARM 에러 코드 (예: "ResourceNotFound")
        error_message: 에러 메시지
        severity: 에러 심각도
        category: 에러 카테고리 (ErrorCategory)
        resource_id: 관련 리소스 ID (선택사항)
    """

    timestamp: datetime
    connection: str
    table: str
    operation: str
    error_code: str
    error_message: str
    severity: ErrorSeverity
    category: ErrorCategory
    resource_id: str | None = None

    def __str__(self) -> str:
        return f"[{self.severity.value.upper()}] {self.connection} - {self.table}.{self.operation}: {self.error_code}"

    def to_dict(self) -> dict[str, str | None]:
        """딕셔너리로 변환 (로깅/직렬화용)"""
        return {
            "timestamp": self.timestamp.isoformat(),
            "connection": self.connection,
            "table": self.table,
            "operation": self.operation,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "severity": self.severity.value,
            "category": self.category.value,
            "resource_id": self.resource_id,
        }


class ErrorCollector:
    """스레드 세이프 에러 수집기

    여러 연결을 병렬 조회할 때 각 워커 스레드에서 같은 수집기를 공유합니다.
    """

    def __init__(self) -> None:
        self._errors: list[CollectedError] = []
        self._lock = threading.Lock()

    def collect(
        self,
        error: Exception,
        connection: str,
        table: str,
        operation: str,
        severity: ErrorSeverity = ErrorSeverity.INFO,
        resource_id: str | None = None,
    ) -> CollectedError:
        """예외를 수집하고 심각도에 맞는 레벨로 로깅

        Args:
            error: 발생한 예외
            connection: 연결 이름
            table: 테이블 이름
            operation: 작업 이름
            severity: 에러 심각도 (기본: INFO)
            resource_id: 관련 리소스 ID (선택사항)

        Returns:
            수집된 CollectedError
        """
        collected = CollectedError(
            timestamp=datetime.now(),
            connection=connection,
            table=table,
            operation=operation,
            error_code=get_error_code(error),
            error_message=getattr(error, "error_message", None) or str(error),
            severity=severity,
            category=categorize_error(error),
            resource_id=resource_id,
        )

        with self._lock:
            self._errors.append(collected)

        log_msg = f"{collected}"
        if severity == ErrorSeverity.CRITICAL:
            logger.error(log_msg)
        elif severity == ErrorSeverity.WARNING:
            logger.warning(log_msg)
        elif severity == ErrorSeverity.INFO:
            logger.info(log_msg)
        else:
            logger.debug(log_msg)
        return collected

    @property
    def errors(self) -> list[CollectedError]:
        """수집된 모든 에러의 복사본 반환"""
        with self._lock:
            return list(self._errors)

    @property
    def has_errors(self) -> bool:
        with self._lock:
            return len(self._errors) > 0

    @property
    def critical_errors(self) -> list[CollectedError]:
        with self._lock:
            return [e for e in self._errors if e.severity == ErrorSeverity.CRITICAL]

    def get_summary(self) -> str:
        """에러 코드별 건수를 포함한 요약 문자열 반환

        Returns:
            포맷팅된 요약 문자열 (예: "무시된 에러 3건 (ResourceNotFound: 2건, HTTP 404: 1건)")
        """
        with self._lock:
            if not self._errors:
                return "에러 없음"

            by_code: dict[str, int] = {}
            for e in self._errors:
                by_code[e.error_code] = by_code.get(e.error_code, 0) + 1

            parts = [f"{k}: {v}건" for k, v in sorted(by_code.items())]
            return f"무시된 에러 {len(self._errors)}건 ({', '.join(parts)})"

    def get_by_connection(self) -> dict[str, list[CollectedError]]:
        """연결별로 에러를 그룹핑하여 반환"""
        with self._lock:
            result: dict[str, list[CollectedError]] = {}
            for e in self._errors:
                result.setdefault(e.connection, []).append(e)
            return result

    def clear(self) -> None:
        with self._lock:
            self._errors.clear()
