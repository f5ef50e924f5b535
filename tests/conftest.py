"""
tests/conftest.py - pytest 공통 픽스처

ARM API 모킹과 테스트 헬퍼를 제공합니다.

Usage:
    def test_something(fake_client, connection, runner_factory):
        # fake_client: 경로별 응답을 돌려주는 가짜 ArmClient
        # connection: 테스트용 ConnectionConfig
        # runner_factory: fake_client를 쓰는 QueryRunner 생성
        pass
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from core.auth.session import clear_sessions  # noqa: E402
from core.config import ConnectionConfig  # noqa: E402
from core.exceptions import APICallError  # noqa: E402
from core.parallel.client import Page  # noqa: E402
from core.parallel.quotas import reset_quota_tracker  # noqa: E402
from core.parallel.rate_limiter import reset_rate_limiters  # noqa: E402
from core.plugin import QueryRunner  # noqa: E402

SUBSCRIPTION_ID = "00000000-0000-0000-0000-000000000001"


# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """테스트 환경 설정 (공유 상태 초기화)"""
    monkeypatch.delenv("AZT_CONFIG", raising=False)
    monkeypatch.delenv("AZURE_SUBSCRIPTION_ID", raising=False)
    reset_rate_limiters()
    reset_quota_tracker()
    clear_sessions()

    yield

    reset_rate_limiters()
    reset_quota_tracker()
    clear_sessions()


# =============================================================================
# ARM 모킹
# =============================================================================


class FakeArmClient:
    """경로별로 미리 정한 응답을 돌려주는 ArmClient 대역

    Attributes:
        pages: {경로 또는 nextLink: 페이지 본문} - get_page()용
        resources: {경로: 본문 또는 예외} - get()용 (없는 경로는 404)
        calls: 호출된 경로 기록
    """

    def __init__(
        self,
        pages: Optional[Dict[str, Any]] = None,
        resources: Optional[Dict[str, Any]] = None,
        subscription_id: str = SUBSCRIPTION_ID,
        environment: str = "AZUREPUBLICCLOUD",
    ):
        self.pages = pages or {}
        self.resources = resources or {}
        self.calls: List[str] = []
        self.params: List[Optional[Dict[str, Any]]] = []
        self.session = MagicMock()
        self.session.subscription_id = subscription_id
        self.session.environment = environment
        self.session.connection_name = "test"

    @property
    def subscription_id(self) -> str:
        return self.session.subscription_id

    def get(self, path: str, api_version: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.calls.append(path)
        self.params.append(params)
        if path not in self.resources:
            raise APICallError(f"GET {path}", 404, "ResourceNotFound", "The resource was not found.")
        value = self.resources[path]
        if isinstance(value, Exception):
            raise value
        return value

    def get_page(self, path: str, api_version: Optional[str] = None, params: Optional[Dict[str, Any]] = None) -> Page:
        self.calls.append(path)
        self.params.append(params)
        if path not in self.pages:
            raise APICallError(f"GET {path}", 404, "ResourceNotFound", "The resource was not found.")
        value = self.pages[path]
        if isinstance(value, Exception):
            raise value
        return Page.from_body(value)

    def iter_values(self, path: str, api_version: str, params: Optional[Dict[str, Any]] = None):
        page = self.get_page(path, api_version, params)
        while True:
            yield from page.values
            if not page.next_link:
                return
            page = self.get_page(page.next_link)

    def list_all(self, path: str, api_version: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return list(self.iter_values(path, api_version, params))


def paged(path: str, items_per_page: List[List[Dict[str, Any]]]) -> Dict[str, Any]:
    """여러 페이지 응답 생성 (nextLink로 연결)

    Example:
        pages = paged("/subscriptions/x/.../loadBalancers", [[lb1, lb2], [lb3]])
    """
    pages: Dict[str, Any] = {}
    for i, items in enumerate(items_per_page):
        key = path if i == 0 else f"https://management.azure.com{path}?page={i}"
        body: Dict[str, Any] = {"value": items}
        if i + 1 < len(items_per_page):
            body["nextLink"] = f"https://management.azure.com{path}?page={i + 1}"
        pages[key] = body
    return pages


def arm_resource(provider: str, kind: str, name: str, resource_group: str = "rg-test", **extra: Any) -> Dict[str, Any]:
    """ARM 리소스 본문 생성"""
    resource_id = f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/{resource_group}/providers/{provider}/{kind}/{name}"
    body = {"id": resource_id, "name": name, "type": f"{provider}/{kind}", "location": "KoreaCentral"}
    body.update(extra)
    return body


@pytest.fixture
def connection():
    """테스트용 연결 설정"""
    return ConnectionConfig(name="test", subscription_id=SUBSCRIPTION_ID)


@pytest.fixture
def fake_client():
    """빈 FakeArmClient (테스트에서 pages/resources 채움)"""
    return FakeArmClient()


@pytest.fixture
def runner_factory(fake_client):
    """fake_client를 사용하는 QueryRunner 생성 함수"""

    def factory(plugin, collector=None):
        return QueryRunner(plugin, collector=collector, client_factory=lambda conn: fake_client)

    return factory
