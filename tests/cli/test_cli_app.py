# tests/cli/test_cli_app.py
"""
cli/app.py 단위 테스트

Click 명령어 구성과 옵션 파싱 테스트.
"""

import logging
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from cli.app import _parse_columns, _parse_quals, cli
from cli.ui.console import configure_logging
from core.config import LogConfig, get_version


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup():
    """CLI 콜백의 로깅 설정이 pytest 핸들러를 덮어쓰지 않도록 차단"""
    with patch("cli.app.configure_logging") as mock:
        yield mock


@pytest.fixture
def run_headless():
    with patch("cli.headless.run_headless", return_value=0) as mock:
        yield mock


# =============================================================================
# 옵션 파싱
# =============================================================================


class TestParseOptions:
    def test_quals(self):
        assert _parse_quals(("name=lb-1", " resource_group = rg ")) == {"name": "lb-1", "resource_group": "rg"}

    def test_qual_value_with_equals(self):
        assert _parse_quals(("id=/a=b",)) == {"id": "/a=b"}

    @pytest.mark.parametrize("value", ["name", "=lb-1"])
    def test_invalid_qual(self, value):
        import click

        with pytest.raises(click.BadParameter):
            _parse_quals((value,))

    def test_columns(self):
        assert _parse_columns("name, region,,id") == ["name", "region", "id"]
        assert _parse_columns(None) is None
        assert _parse_columns(" , ") is None


# =============================================================================
# 명령어
# =============================================================================


class TestCliGroup:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert get_version() in result.output

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("tables", "inspect", "query"):
            assert command in result.output

    def test_verbose_flag(self, runner, no_logging_setup):
        runner.invoke(cli, ["-v", "tables"])
        no_logging_setup.assert_called_once_with(True)


class TestTablesCommand:
    def test_lists_tables(self, runner):
        with patch("cli.app.print_table") as mock_print:
            result = runner.invoke(cli, ["tables"])

        assert result.exit_code == 0
        names = [row[0] for row in mock_print.call_args[0][2]]
        assert "azure_subscription" in names
        assert "azure_lb" in names


class TestInspectCommand:
    def test_inspect(self, runner):
        with patch("cli.app.print_table") as mock_print:
            result = runner.invoke(cli, ["inspect", "azure_lb"])

        assert result.exit_code == 0
        columns = [row[0] for row in mock_print.call_args[0][2]]
        assert "name" in columns
        assert "Get 키 컬럼: name, resource_group" in result.output

    def test_unknown_table(self, runner):
        result = runner.invoke(cli, ["inspect", "azure_unknown"])

        assert result.exit_code == 1
        assert "azure_unknown" in result.output


class TestQueryCommand:
    def test_arguments_forwarded(self, runner, run_headless):
        result = runner.invoke(
            cli,
            [
                "query",
                "azure_lb",
                "-w",
                "name=lb-1",
                "-w",
                "resource_group=rg",
                "-l",
                "5",
                "-C",
                "name,id",
                "-c",
                "prod",
                "-c",
                "dev",
                "-f",
                "json",
            ],
        )

        assert result.exit_code == 0
        run_headless.assert_called_once_with(
            table="azure_lb",
            connections=["prod", "dev"],
            quals={"name": "lb-1", "resource_group": "rg"},
            limit=5,
            columns=["name", "id"],
            format="json",
            output=None,
            config_path=None,
            quiet=False,
        )

    def test_exit_code_propagated(self, runner, run_headless):
        run_headless.return_value = 1
        result = runner.invoke(cli, ["query", "azure_lb"])
        assert result.exit_code == 1

    def test_bad_where(self, runner, run_headless):
        result = runner.invoke(cli, ["query", "azure_lb", "-w", "name"])

        assert result.exit_code == 2
        run_headless.assert_not_called()

    def test_negative_limit_rejected(self, runner, run_headless):
        result = runner.invoke(cli, ["query", "azure_lb", "-l", "-1"])

        assert result.exit_code == 2
        run_headless.assert_not_called()

    def test_bad_format(self, runner, run_headless):
        result = runner.invoke(cli, ["query", "azure_lb", "-f", "xml"])
        assert result.exit_code == 2


# =============================================================================
# 로깅 설정
# =============================================================================


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_default_level(self):
        configure_logging()

        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING

    def test_verbose(self):
        configure_logging(verbose=True)
        assert logging.getLogger().level == logging.DEBUG

    def test_custom_config(self):
        configure_logging(config=LogConfig(level=logging.INFO))
        assert logging.getLogger().level == logging.INFO
