# core/auth/__init__.py
"""
Azure 인증 모듈 (core/auth)

연결 설정을 azure-identity 자격 증명과 대상 구독으로 변환합니다.

사용 예시:
    from core.auth import get_session

    session = get_session(connection)
    print(session.subscription_id, session.resource_manager_endpoint)
"""

from .session import (
    ENVIRONMENTS,
    AzureSession,
    CloudEnvironment,
    build_credential,
    clear_sessions,
    create_session,
    get_session,
    resolve_environment,
)

__all__ = [
    "ENVIRONMENTS",
    "AzureSession",
    "CloudEnvironment",
    "build_credential",
    "clear_sessions",
    "create_session",
    "get_session",
    "resolve_environment",
]
