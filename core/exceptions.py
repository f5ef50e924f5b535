"""
core/exceptions.py - 통합 예외 계층 구조

플러그인 전체에서 사용되는 예외 클래스들을 정의합니다.
일관된 예외 처리와 에러 메시지를 제공합니다.

예외 계층 구조:
    AztError (베이스)
    ├── TableNotFoundError (등록되지 않은 테이블)
    ├── ToolExecutionError (쿼리 실행)
    │   ├── SessionError
    │   ├── APICallError
    │   └── RateLimitError
    ├── ConfigError (설정 관련)
    └── ValidationError (입력 검증)

Usage:
    from core.exceptions import APICallError, is_not_found

    try:
        item = client.get(resource_id, api_version="2022-06-01")
    except APICallError as e:
        if is_not_found(e):
            return None
        raise
"""

from typing import Any, Dict, Optional

# =============================================================================
# 베이스 예외
# =============================================================================


class AztError(Exception):
    """azt 기본 예외 클래스

    모든 커스텀 예외의 베이스 클래스입니다.

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


class TableNotFoundError(AztError):
    """플러그인에 등록되지 않은 테이블 조회"""

    def __init__(self, table_name: str):
        super().__init__(f"테이블을 찾을 수 없습니다 [{table_name}]")
        self.table_name = table_name
        self.details["table_name"] = table_name


# =============================================================================
# 쿼리 실행 관련 예외
# =============================================================================


class ToolExecutionError(AztError):
    """쿼리 실행 관련 예외"""

    def __init__(
        self,
        tool_name: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        full_message = f"실행 오류 [{tool_name}]: {message}"
        super().__init__(full_message, cause)
        self.tool_name = tool_name
        self.details["tool_name"] = tool_name


class SessionError(ToolExecutionError):
    """세션 생성/관리 관련 예외"""

    def __init__(
        self,
        connection: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        full_message = f"세션 오류 [{connection}]: {message}"
        super().__init__(tool_name="session", message=full_message, cause=cause)
        self.connection = connection
        self.details["connection"] = connection


class APICallError(ToolExecutionError):
    """Azure Resource Manager API 호출 관련 예외

    ARM 에러 응답(``{"error": {"code": ..., "message": ...}}``)을 래핑하여
    일관된 예외 처리를 제공합니다.

    Attributes:
        status_code: HTTP 상태 코드 (전송 단계 실패 시 None)
        error_code: ARM 에러 코드 (예: "ResourceNotFound")
        retry_after: 서버가 지정한 재시도 대기 시간 (초)
    """

    def __init__(
        self,
        operation: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        retry_after: Optional[float] = None,
        cause: Optional[Exception] = None,
    ):
        message = operation
        if status_code is not None:
            message = f"{message} 실패 (HTTP {status_code})"
        if error_code:
            message = f"{message} [{error_code}]"
        if error_message:
            message = f"{message}: {error_message}"

        super().__init__(tool_name="arm", message=message, cause=cause)
        self.operation = operation
        self.status_code = status_code
        self.error_code = error_code
        self.error_message = error_message
        self.retry_after = retry_after
        self.details.update(
            {
                "operation": operation,
                "status_code": status_code,
                "error_code": error_code,
            }
        )

    @classmethod
    def from_response(cls, operation: str, response: Any) -> "APICallError":
        """requests.Response로부터 생성

        Args:
            operation: 호출한 작업 (예: "GET /subscriptions/.../policyAssignments")
            response: 실패한 HTTP 응답

        Returns:
            APICallError 인스턴스
        """
        error_code = None
        error_message = None

        try:
            body = response.json()
        except ValueError:
            body = None

        # ARM 에러 포맷 파싱
        if isinstance(body, dict):
            error_info = body.get("error") or {}
            if isinstance(error_info, dict):
                error_code = error_info.get("code")
                error_message = error_info.get("message")

        retry_after = None
        header = response.headers.get("Retry-After") if response.headers else None
        if header:
            try:
                retry_after = float(header)
            except ValueError:
                retry_after = None

        return cls(
            operation=operation,
            status_code=response.status_code,
            error_code=error_code,
            error_message=error_message,
            retry_after=retry_after,
        )


class RateLimitError(ToolExecutionError):
    """Rate limiter 대기 시간 초과"""

    def __init__(self, key: str, timeout: float):
        super().__init__(
            tool_name="rate_limiter",
            message=f"{key} 토큰 대기 시간 초과 ({timeout:.1f}초)",
        )
        self.key = key
        self.timeout = timeout


# =============================================================================
# 설정 관련 예외
# =============================================================================


class ConfigError(AztError):
    """설정 관련 예외"""

    def __init__(
        self,
        key: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        full_message = f"설정 오류 [{key}]: {message}"
        super().__init__(full_message, cause)
        self.config_key = key
        self.details["config_key"] = key


class ValidationError(AztError):
    """입력 검증 오류"""

    def __init__(
        self,
        field: str,
        value: Any,
        expected: str,
        cause: Optional[Exception] = None,
    ):
        message = f"검증 오류 [{field}]: 예상값 '{expected}', 실제값 '{value}'"
        super().__init__(message, cause)
        self.field = field
        self.value = value
        self.expected = expected
        self.details.update(
            {
                "field": field,
                "value": str(value),
                "expected": expected,
            }
        )


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================

NOT_FOUND_CODES = {
    "ResourceNotFound",
    "ResourceGroupNotFound",
    "ParentResourceNotFound",
    "NotFound",
    "SubscriptionNotFound",
    "PolicyAssignmentNotFound",
    "RoleDefinitionDoesNotExist",
}

ACCESS_DENIED_CODES = {
    "AuthorizationFailed",
    "AuthenticationFailed",
    "Forbidden",
    "LinkedAuthorizationFailed",
    "InvalidAuthenticationToken",
}

THROTTLING_CODES = {
    "TooManyRequests",
    "SubscriptionRequestsThrottled",
    "TenantRequestsThrottled",
    "RequestThrottled",
}


def _error_code(error: Exception) -> Optional[str]:
    return getattr(error, "error_code", None)


def _status_code(error: Exception) -> Optional[int]:
    return getattr(error, "status_code", None)


def is_access_denied(error: Exception) -> bool:
    """액세스 거부 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        액세스 거부 오류이면 True
    """
    if _error_code(error) in ACCESS_DENIED_CODES:
        return True
    return _status_code(error) in (401, 403)


def is_throttling(error: Exception) -> bool:
    """스로틀링 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        스로틀링 오류이면 True
    """
    if _error_code(error) in THROTTLING_CODES:
        return True
    return _status_code(error) == 429


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        리소스 없음 오류이면 True
    """
    if _error_code(error) in NOT_FOUND_CODES:
        return True
    return _status_code(error) == 404


def matches_error_codes(error: Exception, codes: "set[str] | list[str] | tuple[str, ...]") -> bool:
    """ARM 에러 코드 또는 HTTP 상태 코드가 목록에 포함되는지 확인

    목록에는 "ResourceNotFound" 같은 에러 코드와 "404" 같은 상태 코드를
    함께 지정할 수 있습니다.
    """
    if not codes:
        return False
    code = _error_code(error)
    if code and code in codes:
        return True
    status = _status_code(error)
    return status is not None and str(status) in codes


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지 포맷팅

    Args:
        error: 예외

    Returns:
        사용자 친화적인 에러 메시지
    """
    if isinstance(error, APICallError):
        friendly_messages = {
            "AuthorizationFailed": "권한이 없습니다. 역할 할당(RBAC)을 확인하세요.",
            "InvalidAuthenticationToken": "인증 토큰이 유효하지 않습니다. 다시 로그인하세요.",
            "ExpiredAuthenticationToken": "인증 토큰이 만료되었습니다. 다시 로그인하세요.",
            "SubscriptionNotFound": "구독을 찾을 수 없습니다. subscription_id를 확인하세요.",
            "TooManyRequests": "요청이 너무 많습니다. 잠시 후 다시 시도하세요.",
        }
        if error.error_code in friendly_messages:
            return friendly_messages[error.error_code]
        return str(error)

    if isinstance(error, AztError):
        # 커스텀 예외는 이미 포맷팅됨
        return str(error)

    return str(error)
