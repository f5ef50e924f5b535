"""
core/parallel/decorators.py - ARM 에러 분류 및 재시도 유틸리티

ARM API 호출의 에러 분류, 재시도 가능 여부 판단,
지수 백오프 재시도 설정을 제공합니다.

주요 구성 요소:
- RetryConfig: 재시도 설정 (지수 백오프 + 지터)
- apply_retry_rules: 연결 설정에서 RetryConfig 생성
- categorize_error: 예외를 ErrorCategory로 분류
- get_error_code: 예외에서 에러 코드 추출
- is_retryable: 재시도 가능 여부 판단
- with_retry: 일시적 오류 재시도 데코레이터
"""

from __future__ import annotations

import functools
import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import requests

from core.config import ConnectionConfig, settings
from core.exceptions import SessionError, is_access_denied, is_not_found, is_throttling

from .types import ErrorCategory

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """재시도 설정

    Attributes:
        max_retries: 최대 재시도 횟수 (0이면 재시도 안함)
        base_delay: 기본 대기 시간 (초)
        max_delay: 최대 대기 시간 (초)
        exponential_base: 지수 백오프 밑수
        jitter: 지터 사용 여부 (대기 시간에 랜덤성 추가)
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = True

    def get_delay(self, attempt: int) -> float:
        """재시도 대기 시간 계산

        Args:
            attempt: 현재 시도 횟수 (0부터 시작)

        Returns:
            대기 시간 (초)
        """
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)

        if self.jitter:
            # Full jitter: [0, delay]
            delay = random.uniform(0, delay)

        return delay


# 기본 재시도 설정
DEFAULT_RETRY_CONFIG = RetryConfig()


def apply_retry_rules(connection: ConnectionConfig) -> RetryConfig:
    """연결 설정의 재시도 규칙을 RetryConfig로 변환

    max_error_retry_attempts는 재시도 횟수, min_error_retry_delay는
    첫 재시도 대기 시간(밀리초)입니다.

    Args:
        connection: 연결 설정

    Returns:
        연결 전용 RetryConfig
    """
    return RetryConfig(
        max_retries=connection.max_error_retry_attempts,
        base_delay=connection.min_error_retry_delay / 1000.0,
        max_delay=settings.API_MAX_RETRY_DELAY,
    )


# 재시도 가능한 HTTP 상태 코드
RETRYABLE_STATUS_CODES: set[int] = {408, 429, 500, 502, 503, 504}

# 재시도 가능한 ARM 에러 코드
RETRYABLE_ERROR_CODES: set[str] = {
    "TooManyRequests",
    "SubscriptionRequestsThrottled",
    "TenantRequestsThrottled",
    "RequestThrottled",
    "ServerBusy",
    "ServiceUnavailable",
    "InternalServerError",
    "InternalError",
    "GatewayTimeout",
    "RequestTimeout",
    "OperationTimedOut",
    "RetryableError",
}

EXPIRED_TOKEN_CODES: set[str] = {"ExpiredAuthenticationToken", "InvalidAuthenticationTokenAudience"}


def categorize_error(error: Exception) -> ErrorCategory:
    """예외 객체를 분석하여 ErrorCategory로 분류

    APICallError는 상태/에러 코드로, 전송 단계 에러는 타입으로 분류합니다.

    Args:
        error: 분류할 예외

    Returns:
        에러 카테고리
    """
    if is_throttling(error):
        return ErrorCategory.THROTTLING

    error_code = getattr(error, "error_code", None) or ""
    if error_code in EXPIRED_TOKEN_CODES:
        return ErrorCategory.EXPIRED_TOKEN
    if is_access_denied(error) or isinstance(error, SessionError):
        return ErrorCategory.ACCESS_DENIED
    if is_not_found(error):
        return ErrorCategory.NOT_FOUND

    status = getattr(error, "status_code", None)
    if status is not None:
        if status in (408, 504) or "Timeout" in error_code or "TimedOut" in error_code:
            return ErrorCategory.TIMEOUT
        if status >= 500:
            return ErrorCategory.SERVICE_ERROR
        if status >= 400:
            return ErrorCategory.INVALID_REQUEST

    if isinstance(error, (requests.exceptions.Timeout, TimeoutError)):
        return ErrorCategory.TIMEOUT

    # 네트워크 에러 (requests 예외는 OSError 하위 클래스)
    if isinstance(error, (ConnectionError, OSError)):
        return ErrorCategory.NETWORK

    return ErrorCategory.UNKNOWN


def get_error_code(error: Exception) -> str:
    """예외 객체에서 에러 코드 문자열 추출

    ARM 에러 코드가 있으면 그대로, 상태 코드만 있으면 "HTTP {status}",
    그 외에는 예외 클래스명을 반환합니다.

    Args:
        error: 예외 객체

    Returns:
        에러 코드 문자열
    """
    code = getattr(error, "error_code", None)
    if code:
        return str(code)
    status = getattr(error, "status_code", None)
    if status is not None:
        return f"HTTP {status}"
    return error.__class__.__name__


def is_retryable(error: Exception) -> bool:
    """재시도 가능한 에러인지 확인

    재시도 가능한 상태 코드/ARM 에러 코드이거나
    네트워크/타임아웃 에러인 경우 True를 반환합니다.

    Args:
        error: 확인할 예외

    Returns:
        재시도 가능하면 True
    """
    status = getattr(error, "status_code", None)
    code = getattr(error, "error_code", None)
    if status is not None or code is not None:
        return status in RETRYABLE_STATUS_CODES or code in RETRYABLE_ERROR_CODES

    return isinstance(error, (ConnectionError, TimeoutError, OSError))


def with_retry(
    config: RetryConfig | None = None,
    *,
    max_retries: int | None = None,
    base_delay: float | None = None,
    sleep: Callable[[float], Any] = time.sleep,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """일시적 오류 재시도 데코레이터

    is_retryable()이 True인 예외만 재시도하며, 서버가 Retry-After를
    지정하면 그 값(max_delay 상한)만큼 대기합니다. 재시도 한도를 넘기면
    마지막 예외를 그대로 전파합니다.

    Args:
        config: 재시도 설정 (None이면 DEFAULT_RETRY_CONFIG)
        max_retries: config.max_retries 덮어쓰기
        base_delay: config.base_delay 덮어쓰기
        sleep: 대기 함수 (테스트에서 교체)

    Example:
        @with_retry(apply_retry_rules(connection))
        def fetch():
            return session.get(url)
    """
    base = config or DEFAULT_RETRY_CONFIG
    retry_config = RetryConfig(
        max_retries=base.max_retries if max_retries is None else max_retries,
        base_delay=base.base_delay if base_delay is None else base_delay,
        max_delay=base.max_delay,
        exponential_base=base.exponential_base,
        jitter=base.jitter,
    )

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not is_retryable(e) or attempt >= retry_config.max_retries:
                        raise

                    retry_after = getattr(e, "retry_after", None)
                    if retry_after:
                        delay = min(float(retry_after), retry_config.max_delay)
                    else:
                        delay = retry_config.get_delay(attempt)

                    attempt += 1
                    logger.debug(
                        f"{func.__name__} 재시도 {attempt}/{retry_config.max_retries} "
                        f"({get_error_code(e)}, {delay:.2f}초 대기)"
                    )
                    sleep(delay)

        return wrapper

    return decorator
