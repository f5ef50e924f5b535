"""
tests/cli/test_headless.py - cli/headless.py 테스트

연결별 병렬 쿼리, 결과 병합, 종료 코드 테스트.
"""

import json
from unittest.mock import patch

import pytest
from conftest import FakeArmClient

from cli.headless import HeadlessConfig, HeadlessRunner, run_headless
from core.config import ConnectionConfig
from core.exceptions import APICallError
from core.plugin import QueryRunner
from shared.azure.tables import plugin

SUB_PROD = "00000000-0000-0000-0000-00000000000a"
SUB_DEV = "00000000-0000-0000-0000-00000000000b"


def _subscription_client(subscription_id, display_name):
    client = FakeArmClient(subscription_id=subscription_id)
    client.resources = {
        f"/subscriptions/{subscription_id}": {
            "id": f"/subscriptions/{subscription_id}",
            "subscriptionId": subscription_id,
            "displayName": display_name,
            "state": "Enabled",
        }
    }
    return client


@pytest.fixture
def connections():
    return {
        "prod": ConnectionConfig(name="prod", subscription_id=SUB_PROD),
        "dev": ConnectionConfig(name="dev", subscription_id=SUB_DEV),
    }


@pytest.fixture
def clients():
    return {
        "prod": _subscription_client(SUB_PROD, "Production"),
        "dev": _subscription_client(SUB_DEV, "Development"),
    }


@pytest.fixture
def make_runner(connections, clients):
    """연결 설정과 가짜 클라이언트가 주입된 HeadlessRunner 생성"""

    def factory(**kwargs):
        kwargs.setdefault("table", "azure_subscription")
        kwargs.setdefault("quiet", True)
        config = HeadlessConfig(**kwargs)
        query_runner = QueryRunner(plugin(), client_factory=lambda conn: clients[conn.name])
        return HeadlessRunner(config, runner=query_runner)

    with patch("cli.headless.load_connections", return_value=connections):
        yield factory


def _read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestHeadlessConfig:
    """HeadlessConfig 기본값"""

    def test_defaults(self):
        config = HeadlessConfig(table="azure_lb")

        assert config.connections == []
        assert config.quals == {}
        assert config.limit is None
        assert config.columns is None
        assert config.format == "table"
        assert config.output is None
        assert config.quiet is False


class TestHeadlessRunner:
    """멀티 연결 실행"""

    def test_all_connections_in_order(self, make_runner, tmp_path):
        output = tmp_path / "subs.json"
        runner = make_runner(columns=["subscription_id", "display_name"], format="json", output=str(output))

        assert runner.run() == 0
        assert _read_json(output) == [
            {"subscription_id": SUB_PROD, "display_name": "Production"},
            {"subscription_id": SUB_DEV, "display_name": "Development"},
        ]

    def test_selected_connection(self, make_runner, tmp_path):
        output = tmp_path / "subs.json"
        runner = make_runner(connections=["dev"], columns=["display_name"], format="json", output=str(output))

        assert runner.run() == 0
        assert _read_json(output) == [{"display_name": "Development"}]

    def test_limit_applied_after_merge(self, make_runner, tmp_path):
        output = tmp_path / "subs.json"
        runner = make_runner(limit=1, columns=["display_name"], format="json", output=str(output))

        assert runner.run() == 0
        assert _read_json(output) == [{"display_name": "Production"}]

    def test_quals_forwarded(self, make_runner, tmp_path):
        output = tmp_path / "subs.json"
        runner = make_runner(
            quals={"display_name": "Development"}, columns=["display_name"], format="json", output=str(output)
        )

        assert runner.run() == 0
        assert _read_json(output) == [{"display_name": "Development"}]

    def test_csv_output(self, make_runner, tmp_path):
        output = tmp_path / "subs.csv"
        runner = make_runner(columns=["display_name", "state"], format="csv", output=str(output))

        assert runner.run() == 0
        assert output.read_text(encoding="utf-8") == "display_name,state\nProduction,Enabled\nDevelopment,Enabled\n"

    def test_unknown_connection(self, make_runner):
        assert make_runner(connections=["staging"]).run() == 1

    def test_unknown_table(self, make_runner):
        assert make_runner(table="azure_unknown").run() == 1

    def test_unknown_column(self, make_runner):
        assert make_runner(columns=["no_such_column"]).run() == 1

    def test_failed_connection_exit_code(self, make_runner, clients, tmp_path):
        """한 연결이 실패해도 나머지 결과는 출력"""
        clients["dev"].resources[f"/subscriptions/{SUB_DEV}"] = APICallError("GET", 403, "AuthorizationFailed")
        output = tmp_path / "subs.json"
        runner = make_runner(columns=["display_name"], format="json", output=str(output))

        assert runner.run() == 1
        assert _read_json(output) == [{"display_name": "Production"}]

    def test_keyboard_interrupt(self, make_runner):
        runner = make_runner()

        with patch.object(runner, "_execute", side_effect=KeyboardInterrupt):
            assert runner.run() == 130

        assert runner.cancel_event.is_set()


class TestRunHeadless:
    def test_builds_config(self):
        with patch("cli.headless.HeadlessRunner") as mock_runner:
            mock_runner.return_value.run.return_value = 0

            assert run_headless("azure_lb", connections=["prod"], quals={"name": "lb"}, limit=5, format="json") == 0

        config = mock_runner.call_args[0][0]
        assert config.table == "azure_lb"
        assert config.connections == ["prod"]
        assert config.quals == {"name": "lb"}
        assert config.limit == 5
        assert config.format == "json"
