# tests/core/test_core_exceptions.py
"""
core/exceptions.py 단위 테스트
"""

from unittest.mock import MagicMock

import pytest

from core.exceptions import (
    APICallError,
    AztError,
    ConfigError,
    RateLimitError,
    SessionError,
    TableNotFoundError,
    ToolExecutionError,
    ValidationError,
    format_error_for_user,
    is_access_denied,
    is_not_found,
    is_throttling,
    matches_error_codes,
)


def _response(status, body=None, headers=None):
    response = MagicMock()
    response.status_code = status
    response.headers = headers or {}
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


class TestHierarchy:
    """예외 계층 구조"""

    def test_execution_errors(self):
        assert issubclass(SessionError, ToolExecutionError)
        assert issubclass(APICallError, ToolExecutionError)
        assert issubclass(RateLimitError, ToolExecutionError)
        assert issubclass(ToolExecutionError, AztError)

    def test_other_errors(self):
        for cls in (TableNotFoundError, ConfigError, ValidationError):
            assert issubclass(cls, AztError)

    def test_cause_in_message(self):
        error = AztError("실패", cause=RuntimeError("원인"))

        assert str(error) == "실패: 원인"
        assert error.to_dict() == {"error_type": "AztError", "message": "실패", "cause": "원인", "details": {}}

    def test_table_not_found(self):
        error = TableNotFoundError("azure_unknown")
        assert "azure_unknown" in str(error)
        assert error.details["table_name"] == "azure_unknown"

    def test_validation_error(self):
        error = ValidationError("limit", -1, ">= 0")

        assert error.field == "limit"
        assert error.details == {"field": "limit", "value": "-1", "expected": ">= 0"}


class TestAPICallError:
    """ARM 에러 응답 파싱"""

    def test_message(self):
        error = APICallError("GET /x", 403, "AuthorizationFailed", "no access")
        assert str(error) == "실행 오류 [arm]: GET /x 실패 (HTTP 403) [AuthorizationFailed]: no access"

    def test_from_response(self):
        response = _response(
            429,
            {"error": {"code": "TooManyRequests", "message": "slow down"}},
            {"Retry-After": "7"},
        )

        error = APICallError.from_response("GET /x", response)

        assert error.status_code == 429
        assert error.error_code == "TooManyRequests"
        assert error.error_message == "slow down"
        assert error.retry_after == 7.0

    def test_from_response_non_json(self):
        error = APICallError.from_response("GET /x", _response(502, headers={"Retry-After": "soon"}))

        assert error.status_code == 502
        assert error.error_code is None
        assert error.retry_after is None

    def test_from_response_unexpected_error_shape(self):
        error = APICallError.from_response("GET /x", _response(400, {"error": "bad"}))
        assert error.error_code is None


class TestErrorHelpers:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (APICallError("op", 403), True),
            (APICallError("op", 401), True),
            (APICallError("op", 400, "LinkedAuthorizationFailed"), True),
            (APICallError("op", 404), False),
        ],
    )
    def test_access_denied(self, error, expected):
        assert is_access_denied(error) is expected

    def test_throttling(self):
        assert is_throttling(APICallError("op", 429))
        assert is_throttling(APICallError("op", 400, "SubscriptionRequestsThrottled"))
        assert not is_throttling(APICallError("op", 500))

    def test_not_found(self):
        assert is_not_found(APICallError("op", 404))
        assert is_not_found(APICallError("op", 400, "ResourceGroupNotFound"))
        assert not is_not_found(RuntimeError("x"))

    def test_matches_codes(self):
        error = APICallError("op", 403, "AuthorizationFailed")

        assert matches_error_codes(error, ["AuthorizationFailed"])
        assert matches_error_codes(error, {"403"})
        assert not matches_error_codes(error, ["ResourceNotFound"])
        assert not matches_error_codes(error, [])

    def test_matches_codes_plain_exception(self):
        assert not matches_error_codes(ValueError("x"), ["ValueError"])


class TestFormatErrorForUser:
    def test_friendly_message(self):
        message = format_error_for_user(APICallError("op", 403, "AuthorizationFailed"))
        assert "RBAC" in message

    def test_unknown_code(self):
        error = APICallError("op", 500, "InternalServerError")
        assert format_error_for_user(error) == str(error)

    def test_custom_and_plain(self):
        assert format_error_for_user(ConfigError("k", "잘못됨")) == "설정 오류 [k]: 잘못됨"
        assert format_error_for_user(ValueError("plain")) == "plain"
