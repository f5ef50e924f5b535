"""
core/auth/session.py - Azure 세션 제공자

연결 설정(ConnectionConfig)으로부터 azure-identity 자격 증명과
대상 구독/클라우드 엔드포인트를 묶은 AzureSession을 만들고 캐시합니다.

자격 증명 선택 순서:
    1. client_id + client_secret          → ClientSecretCredential
    2. client_id + certificate_path       → CertificateCredential
    3. use_msi                            → ManagedIdentityCredential
    4. use_cli                            → AzureCliCredential
    5. 그 외                              → DefaultAzureCredential

구독 ID는 연결 설정 → AZURE_SUBSCRIPTION_ID → `az account show` 순으로 결정합니다.

Usage:
    from core.auth.session import get_session

    session = get_session(connection)
    token = session.credential.get_token(session.token_scope)
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from azure.identity import (
    AzureAuthorityHosts,
    AzureCliCredential,
    CertificateCredential,
    ClientSecretCredential,
    DefaultAzureCredential,
    ManagedIdentityCredential,
)

from core.config import ConnectionConfig, settings
from core.exceptions import ConfigError, SessionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CloudEnvironment:
    """Azure 클라우드 환경 엔드포인트"""

    name: str
    resource_manager: str
    authority_host: str


ENVIRONMENTS: dict[str, CloudEnvironment] = {
    "AZUREPUBLICCLOUD": CloudEnvironment(
        name="AZUREPUBLICCLOUD",
        resource_manager="https://management.azure.com",
        authority_host=AzureAuthorityHosts.AZURE_PUBLIC_CLOUD,
    ),
    "AZURECHINACLOUD": CloudEnvironment(
        name="AZURECHINACLOUD",
        resource_manager="https://management.chinacloudapi.cn",
        authority_host=AzureAuthorityHosts.AZURE_CHINA,
    ),
    "AZUREUSGOVERNMENTCLOUD": CloudEnvironment(
        name="AZUREUSGOVERNMENTCLOUD",
        resource_manager="https://management.usgovcloudapi.net",
        authority_host=AzureAuthorityHosts.AZURE_GOVERNMENT,
    ),
}


def resolve_environment(name: str) -> CloudEnvironment:
    """환경 이름으로 CloudEnvironment 조회

    Raises:
        ConfigError: 지원하지 않는 환경
    """
    env = ENVIRONMENTS.get(name.upper())
    if env is None:
        raise ConfigError(
            "environment",
            f"지원하지 않는 환경: {name} (지원: {', '.join(ENVIRONMENTS)})",
        )
    return env


@dataclass
class AzureSession:
    """인증된 Azure 세션

    Attributes:
        connection_name: 연결 이름
        subscription_id: 대상 구독 ID
        tenant_id: 테넌트 ID (알 수 없으면 None)
        environment: 클라우드 환경 이름
        resource_manager_endpoint: ARM 엔드포인트 URL
        credential: azure-identity 자격 증명
    """

    connection_name: str
    subscription_id: str
    tenant_id: str | None
    environment: str
    resource_manager_endpoint: str
    credential: Any
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def token_scope(self) -> str:
        """ARM 토큰 scope"""
        return f"{self.resource_manager_endpoint}/.default"

    def is_expired(self, ttl_seconds: int = settings.SESSION_CACHE_TTL_SECONDS) -> bool:
        return datetime.now(timezone.utc) >= self.created_at + timedelta(seconds=ttl_seconds)


def build_credential(connection: ConnectionConfig, env: CloudEnvironment) -> Any:
    """연결 설정에 맞는 azure-identity 자격 증명 생성

    Raises:
        ConfigError: 서비스 주체 설정에 tenant_id 누락
    """
    authority = env.authority_host

    if connection.client_id and (connection.client_secret or connection.certificate_path):
        if not connection.tenant_id:
            raise ConfigError(f"{connection.name}.tenant_id", "서비스 주체 인증에는 tenant_id가 필요합니다")

        if connection.client_secret:
            logger.debug(f"[{connection.name}] ClientSecretCredential 사용")
            return ClientSecretCredential(
                tenant_id=connection.tenant_id,
                client_id=connection.client_id,
                client_secret=connection.client_secret,
                authority=authority,
            )

        logger.debug(f"[{connection.name}] CertificateCredential 사용")
        return CertificateCredential(
            tenant_id=connection.tenant_id,
            client_id=connection.client_id,
            certificate_path=connection.certificate_path,
            password=connection.certificate_password,
            authority=authority,
        )

    if connection.use_msi:
        logger.debug(f"[{connection.name}] ManagedIdentityCredential 사용")
        if connection.client_id:
            return ManagedIdentityCredential(client_id=connection.client_id)
        return ManagedIdentityCredential()

    if connection.use_cli:
        logger.debug(f"[{connection.name}] AzureCliCredential 사용")
        return AzureCliCredential(tenant_id=connection.tenant_id)

    logger.debug(f"[{connection.name}] DefaultAzureCredential 사용")
    return DefaultAzureCredential(authority=authority)


def _subscription_from_cli(timeout: int = 30) -> tuple[str | None, str | None]:
    """`az account show`에서 (구독 ID, 테넌트 ID) 조회"""
    az_path = shutil.which("az")
    if not az_path:
        return None, None

    try:
        proc = subprocess.run(
            [az_path, "account", "show", "-o", "json"],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.warning("az account show 시간 초과")
        return None, None

    if proc.returncode != 0:
        logger.debug(f"az account show 실패: {proc.stderr.strip()}")
        return None, None

    try:
        account = json.loads(proc.stdout)
    except ValueError:
        return None, None
    return account.get("id"), account.get("tenantId")


def resolve_subscription(connection: ConnectionConfig) -> tuple[str, str | None]:
    """대상 구독 ID와 테넌트 ID 결정

    Raises:
        ConfigError: 구독 ID를 결정할 수 없음
    """
    if connection.subscription_id:
        return connection.subscription_id, connection.tenant_id

    env_subscription = os.environ.get("AZURE_SUBSCRIPTION_ID")
    if env_subscription:
        return env_subscription, connection.tenant_id

    cli_subscription, cli_tenant = _subscription_from_cli()
    if cli_subscription:
        return cli_subscription, connection.tenant_id or cli_tenant

    raise ConfigError(
        f"{connection.name}.subscription_id",
        "구독 ID가 없습니다. 설정 파일, AZURE_SUBSCRIPTION_ID 또는 'az login'을 확인하세요",
    )


def create_session(connection: ConnectionConfig) -> AzureSession:
    """새 AzureSession 생성 (캐시 미사용)

    Raises:
        ConfigError: 환경/구독 설정 오류
        SessionError: 자격 증명 생성 실패
    """
    env = resolve_environment(connection.environment)
    subscription_id, tenant_id = resolve_subscription(connection)

    try:
        credential = build_credential(connection, env)
    except ConfigError:
        raise
    except Exception as e:
        raise SessionError(connection.name, "자격 증명 생성 실패", cause=e) from e

    logger.debug(f"[{connection.name}] 세션 생성: 구독 {subscription_id} ({env.name})")
    return AzureSession(
        connection_name=connection.name,
        subscription_id=subscription_id,
        tenant_id=tenant_id,
        environment=env.name,
        resource_manager_endpoint=env.resource_manager,
        credential=credential,
    )


# =============================================================================
# 세션 캐시
# =============================================================================

_sessions: dict[str, AzureSession] = {}
_sessions_lock = threading.Lock()


def get_session(connection: ConnectionConfig) -> AzureSession:
    """연결별 캐시된 AzureSession 조회 (없거나 만료 시 생성)"""
    with _sessions_lock:
        session = _sessions.get(connection.name)
        if session is not None and not session.is_expired():
            return session

        session = create_session(connection)
        _sessions[connection.name] = session
        return session


def clear_sessions() -> None:
    """세션 캐시 초기화"""
    with _sessions_lock:
        _sessions.clear()
