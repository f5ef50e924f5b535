"""
core/config.py - 전역 설정 및 연결(Connection) 설정

프로젝트 전역 설정(Settings)과 Azure 연결 설정(ConnectionConfig)을 제공합니다.

연결 설정 파일 (~/.azt/config.yaml 또는 AZT_CONFIG):

    connections:
      prod:
        subscription_id: 00000000-0000-0000-0000-000000000000
        tenant_id: 11111111-1111-1111-1111-111111111111
        client_id: ...
        client_secret: ...
        environment: AZUREPUBLICCLOUD
        ignore_error_codes: [AuthorizationFailed]
        max_error_retry_attempts: 9
        min_error_retry_delay: 25

설정 파일이 없으면 AZURE_* 환경 변수로 단일 "azure" 연결을 구성합니다.

Usage:
    from core.config import settings, load_connections

    connections = load_connections()
    conn = connections["prod"]
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """전역 설정 (불변)"""

    DEFAULT_ENVIRONMENT: str = "AZUREPUBLICCLOUD"
    DEFAULT_CONNECTION_NAME: str = "azure"

    # API 호출
    API_TIMEOUT: int = 30
    API_RETRY_COUNT: int = 9
    API_MIN_RETRY_DELAY_MS: int = 25
    API_MAX_RETRY_DELAY: float = 30.0

    # Rate limit (페이지 간 협조 대기)
    RATE_LIMIT_RPS: float = 10.0
    RATE_LIMIT_BURST: int = 20
    RATE_LIMIT_WAIT_TIMEOUT: float = 30.0

    # 세션 캐시
    SESSION_CACHE_TTL_SECONDS: int = 3000

    # 멀티 연결 병렬 실행
    MAX_WORKERS: int = 10


settings = Settings()


@dataclass
class LogConfig:
    """로깅 설정"""

    level: int = logging.WARNING
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
    # 외부 라이브러리 노이즈 로그 제한
    quiet_loggers: tuple[str, ...] = (
        "azure.core.pipeline.policies.http_logging_policy",
        "azure.identity",
        "urllib3",
    )


# =============================================================================
# 환경 변수 헬퍼
# =============================================================================


def get_env_bool(name: str, default: bool = False) -> bool:
    """환경 변수를 bool로 읽기 ("1", "true", "yes", "on" → True)"""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_env_int(name: str, default: int) -> int:
    """환경 변수를 int로 읽기 (변환 실패 시 기본값)"""
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"환경 변수 {name}의 값이 정수가 아님: {value!r}")
        return default


def get_project_root() -> Path:
    """프로젝트 루트 경로"""
    return Path(__file__).resolve().parent.parent


def get_version() -> str:
    """version.txt에서 버전 문자열 읽기"""
    version_file = get_project_root() / "version.txt"
    try:
        return version_file.read_text(encoding="utf-8").strip()
    except OSError:
        return "0.0.0"


def get_config_path() -> Path:
    """연결 설정 파일 경로 (AZT_CONFIG 우선)"""
    env_path = os.environ.get("AZT_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".azt" / "config.yaml"


# =============================================================================
# 연결 설정
# =============================================================================


@dataclass
class ConnectionConfig:
    """Azure 연결 설정

    Attributes:
        name: 연결 이름
        subscription_id: 대상 구독 ID (없으면 환경 변수/Azure CLI에서 조회)
        tenant_id: Azure AD 테넌트 ID
        client_id: 서비스 주체 클라이언트 ID
        client_secret: 서비스 주체 시크릿
        certificate_path: 서비스 주체 인증서 경로
        certificate_password: 인증서 암호
        use_msi: Managed Identity 사용 여부
        use_cli: Azure CLI 자격 증명 사용 여부
        environment: 클라우드 환경 (AZUREPUBLICCLOUD 등)
        ignore_error_codes: 무시할 ARM 에러 코드 목록 (빈 결과로 처리)
        max_error_retry_attempts: 일시적 오류 최대 재시도 횟수
        min_error_retry_delay: 최소 재시도 대기 시간 (밀리초)
    """

    name: str = settings.DEFAULT_CONNECTION_NAME
    subscription_id: str | None = None
    tenant_id: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    certificate_path: str | None = None
    certificate_password: str | None = None
    use_msi: bool = False
    use_cli: bool = False
    environment: str = settings.DEFAULT_ENVIRONMENT
    ignore_error_codes: list[str] = field(default_factory=list)
    max_error_retry_attempts: int = settings.API_RETRY_COUNT
    min_error_retry_delay: int = settings.API_MIN_RETRY_DELAY_MS

    def __post_init__(self) -> None:
        if self.max_error_retry_attempts < 1:
            raise ConfigError(
                f"{self.name}.max_error_retry_attempts",
                f"1 이상이어야 합니다 (현재: {self.max_error_retry_attempts})",
            )
        if self.min_error_retry_delay < 1:
            raise ConfigError(
                f"{self.name}.min_error_retry_delay",
                f"1 이상이어야 합니다 (현재: {self.min_error_retry_delay})",
            )
        self.environment = self.environment.upper()

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> ConnectionConfig:
        """딕셔너리에서 생성 (알 수 없는 키는 ConfigError)"""
        known = set(cls.__dataclass_fields__) - {"name"}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(name, f"알 수 없는 설정 키: {', '.join(sorted(unknown))}")

        values = dict(data)
        codes = values.get("ignore_error_codes")
        if codes is not None and not isinstance(codes, list):
            raise ConfigError(f"{name}.ignore_error_codes", "리스트여야 합니다")
        return cls(name=name, **values)

    @classmethod
    def from_env(cls, name: str = settings.DEFAULT_CONNECTION_NAME) -> ConnectionConfig:
        """AZURE_* 환경 변수에서 생성"""
        return cls(
            name=name,
            subscription_id=os.environ.get("AZURE_SUBSCRIPTION_ID"),
            tenant_id=os.environ.get("AZURE_TENANT_ID"),
            client_id=os.environ.get("AZURE_CLIENT_ID"),
            client_secret=os.environ.get("AZURE_CLIENT_SECRET"),
            certificate_path=os.environ.get("AZURE_CERTIFICATE_PATH"),
            certificate_password=os.environ.get("AZURE_CERTIFICATE_PASSWORD"),
            use_msi=get_env_bool("AZURE_USE_MSI"),
            environment=os.environ.get("AZURE_ENVIRONMENT", settings.DEFAULT_ENVIRONMENT),
            max_error_retry_attempts=get_env_int("AZT_MAX_ERROR_RETRY_ATTEMPTS", settings.API_RETRY_COUNT),
            min_error_retry_delay=get_env_int("AZT_MIN_ERROR_RETRY_DELAY", settings.API_MIN_RETRY_DELAY_MS),
        )


def load_connections(path: str | Path | None = None) -> dict[str, ConnectionConfig]:
    """연결 설정 파일 로드

    Args:
        path: 설정 파일 경로 (None이면 get_config_path())

    Returns:
        {연결 이름: ConnectionConfig} 딕셔너리 (파일 순서 유지)

    Raises:
        ConfigError: 파일 형식 오류
    """
    config_path = Path(path).expanduser() if path else get_config_path()

    if not config_path.exists():
        if path:
            raise ConfigError(str(config_path), "설정 파일이 존재하지 않습니다")
        logger.debug(f"설정 파일 없음, 환경 변수 사용: {config_path}")
        conn = ConnectionConfig.from_env()
        return {conn.name: conn}

    try:
        with config_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(str(config_path), "YAML 파싱 실패", cause=e) from e

    if not isinstance(data, dict) or not isinstance(data.get("connections"), dict):
        raise ConfigError(str(config_path), "'connections' 매핑이 필요합니다")

    connections: dict[str, ConnectionConfig] = {}
    for name, values in data["connections"].items():
        if not isinstance(values, dict):
            raise ConfigError(str(name), "연결 설정은 매핑이어야 합니다")
        connections[str(name)] = ConnectionConfig.from_dict(str(name), values)

    if not connections:
        raise ConfigError(str(config_path), "연결이 하나 이상 필요합니다")

    return connections
