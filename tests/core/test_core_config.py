# tests/core/test_core_config.py
"""
core/config.py 단위 테스트

전역 설정, 환경 변수 헬퍼, 연결 설정 로드 테스트.
"""

import logging
from pathlib import Path

import pytest

from core.config import (
    ConnectionConfig,
    LogConfig,
    get_config_path,
    get_env_bool,
    get_env_int,
    get_project_root,
    get_version,
    load_connections,
    settings,
)
from core.exceptions import ConfigError

# =============================================================================
# 전역 설정
# =============================================================================


class TestSettings:
    """Settings 기본값"""

    def test_retry_defaults(self):
        assert settings.API_RETRY_COUNT == 9
        assert settings.API_MIN_RETRY_DELAY_MS == 25
        assert settings.API_MAX_RETRY_DELAY == 30.0

    def test_defaults(self):
        assert settings.DEFAULT_ENVIRONMENT == "AZUREPUBLICCLOUD"
        assert settings.DEFAULT_CONNECTION_NAME == "azure"

    def test_frozen(self):
        with pytest.raises(AttributeError):
            settings.API_TIMEOUT = 10

    def test_log_config(self):
        config = LogConfig()
        assert config.level == logging.WARNING
        assert "urllib3" in config.quiet_loggers


class TestEnvHelpers:
    @pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
    def test_bool_true(self, monkeypatch, value):
        monkeypatch.setenv("AZT_FLAG", value)
        assert get_env_bool("AZT_FLAG") is True

    def test_bool_false(self, monkeypatch):
        monkeypatch.setenv("AZT_FLAG", "no")
        assert get_env_bool("AZT_FLAG", default=True) is False

    def test_bool_default(self, monkeypatch):
        monkeypatch.delenv("AZT_FLAG", raising=False)
        assert get_env_bool("AZT_FLAG", default=True) is True

    def test_int(self, monkeypatch):
        monkeypatch.setenv("AZT_NUM", "42")
        assert get_env_int("AZT_NUM", 1) == 42

    def test_int_invalid(self, monkeypatch, caplog):
        monkeypatch.setenv("AZT_NUM", "many")

        with caplog.at_level(logging.WARNING, logger="core.config"):
            assert get_env_int("AZT_NUM", 7) == 7

        assert "AZT_NUM" in caplog.text

    def test_int_blank(self, monkeypatch):
        monkeypatch.setenv("AZT_NUM", "  ")
        assert get_env_int("AZT_NUM", 3) == 3


class TestPaths:
    def test_project_root(self):
        assert (get_project_root() / "core" / "config.py").exists()

    def test_version(self):
        version = get_version()
        assert isinstance(version, str)
        assert version

    def test_config_path_default(self):
        assert get_config_path() == Path.home() / ".azt" / "config.yaml"

    def test_config_path_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("AZT_CONFIG", str(tmp_path / "azt.yaml"))
        assert get_config_path() == tmp_path / "azt.yaml"


# =============================================================================
# ConnectionConfig
# =============================================================================


class TestConnectionConfig:
    """연결 설정 검증"""

    def test_defaults(self):
        conn = ConnectionConfig()

        assert conn.name == "azure"
        assert conn.environment == "AZUREPUBLICCLOUD"
        assert conn.ignore_error_codes == []
        assert conn.max_error_retry_attempts == 9
        assert conn.min_error_retry_delay == 25

    def test_environment_uppercased(self):
        assert ConnectionConfig(environment="azureChinaCloud").environment == "AZURECHINACLOUD"

    @pytest.mark.parametrize("field_name", ["max_error_retry_attempts", "min_error_retry_delay"])
    def test_retry_values_must_be_positive(self, field_name):
        with pytest.raises(ConfigError) as exc_info:
            ConnectionConfig(name="bad", **{field_name: 0})

        assert exc_info.value.config_key == f"bad.{field_name}"

    def test_from_dict(self):
        conn = ConnectionConfig.from_dict(
            "prod", {"subscription_id": "sub", "ignore_error_codes": ["AuthorizationFailed"]}
        )

        assert conn.name == "prod"
        assert conn.subscription_id == "sub"
        assert conn.ignore_error_codes == ["AuthorizationFailed"]

    def test_from_dict_unknown_key(self):
        with pytest.raises(ConfigError):
            ConnectionConfig.from_dict("prod", {"region": "koreacentral"})

    def test_from_dict_codes_not_list(self):
        with pytest.raises(ConfigError):
            ConnectionConfig.from_dict("prod", {"ignore_error_codes": "AuthorizationFailed"})

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("AZURE_SUBSCRIPTION_ID", "env-sub")
        monkeypatch.setenv("AZURE_TENANT_ID", "env-tenant")
        monkeypatch.setenv("AZURE_USE_MSI", "true")
        monkeypatch.setenv("AZT_MAX_ERROR_RETRY_ATTEMPTS", "3")

        conn = ConnectionConfig.from_env()

        assert conn.name == "azure"
        assert conn.subscription_id == "env-sub"
        assert conn.tenant_id == "env-tenant"
        assert conn.use_msi is True
        assert conn.max_error_retry_attempts == 3


# =============================================================================
# load_connections
# =============================================================================


class TestLoadConnections:
    """YAML 연결 설정 로드"""

    def _write(self, tmp_path, text):
        path = tmp_path / "config.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_load(self, tmp_path):
        path = self._write(
            tmp_path,
            "connections:\n"
            "  prod:\n"
            "    subscription_id: sub-prod\n"
            "    ignore_error_codes: [AuthorizationFailed]\n"
            "  dev:\n"
            "    subscription_id: sub-dev\n"
            "    environment: azurechinacloud\n",
        )

        connections = load_connections(path)

        assert list(connections) == ["prod", "dev"]
        assert connections["prod"].ignore_error_codes == ["AuthorizationFailed"]
        assert connections["dev"].environment == "AZURECHINACLOUD"

    def test_env_config_path(self, monkeypatch, tmp_path):
        path = self._write(tmp_path, "connections:\n  only:\n    subscription_id: s\n")
        monkeypatch.setenv("AZT_CONFIG", str(path))

        assert list(load_connections()) == ["only"]

    def test_missing_default_uses_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("AZT_CONFIG", str(tmp_path / "absent.yaml"))
        monkeypatch.setenv("AZURE_SUBSCRIPTION_ID", "env-sub")

        connections = load_connections()

        assert list(connections) == ["azure"]
        assert connections["azure"].subscription_id == "env-sub"

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(ConfigError):
            load_connections(tmp_path / "absent.yaml")

    @pytest.mark.parametrize(
        "text",
        [
            "connections: [a, b\n",
            "- just\n- a list\n",
            "other: {}\n",
            "connections:\n  prod: sub-1\n",
            "connections: {}\n",
        ],
    )
    def test_invalid(self, tmp_path, text):
        with pytest.raises(ConfigError):
            load_connections(self._write(tmp_path, text))
