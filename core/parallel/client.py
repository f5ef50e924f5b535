"""
core/parallel/client.py - ARM REST 클라이언트

재시도(지수 백오프) + 타임아웃 + 베어러 토큰이 적용된
Azure Resource Manager 읽기 클라이언트를 생성합니다.

주요 구성 요소:
- ArmClient: GET / 페이지 조회 / nextLink 순회
- Page: 한 페이지의 결과 (value + nextLink)
- get_client: 세션과 연결 설정으로 ArmClient 생성

Example:
    from core.parallel.client import get_client

    client = get_client(session, connection)
    page = client.get_page(
        f"/subscriptions/{client.subscription_id}/providers/Microsoft.Network/networkWatchers",
        api_version="2023-05-01",
    )
    for item in page.values:
        print(item["name"])
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import requests
from azure.core.exceptions import ClientAuthenticationError

from core.config import ConnectionConfig, settings
from core.exceptions import APICallError, SessionError, ValidationError

from .decorators import RetryConfig, apply_retry_rules, with_retry
from .quotas import QuotaTracker, get_quota_tracker

if TYPE_CHECKING:
    from core.auth.session import AzureSession

logger = logging.getLogger(__name__)

# 토큰 만료 전 갱신 여유 (초)
TOKEN_REFRESH_BUFFER = 60


@dataclass
class Page:
    """ARM 목록 응답 한 페이지

    Attributes:
        values: 페이지 항목 목록
        next_link: 다음 페이지 URL (마지막 페이지면 None)
    """

    values: list[dict[str, Any]] = field(default_factory=list)
    next_link: str | None = None

    @classmethod
    def from_body(cls, body: dict[str, Any] | None) -> Page:
        body = body or {}
        return cls(values=list(body.get("value") or []), next_link=body.get("nextLink") or None)


class ArmClient:
    """ARM REST 읽기 클라이언트

    모든 요청은 with_retry()로 감싸져 일시적 오류(429, 5xx, 네트워크)를
    연결 설정의 재시도 규칙에 따라 재시도합니다. 응답의 읽기 쿼터 헤더는
    QuotaTracker에 기록됩니다.
    """

    def __init__(
        self,
        session: AzureSession,
        retry_config: RetryConfig | None = None,
        http: requests.Session | None = None,
        timeout: float = settings.API_TIMEOUT,
        quota_tracker: QuotaTracker | None = None,
    ):
        self.session = session
        self.retry_config = retry_config or RetryConfig()
        self.http = http or requests.Session()
        self.timeout = timeout
        self.quota_tracker = quota_tracker or get_quota_tracker()
        self._token: str | None = None
        self._token_expires_on = 0.0
        self._token_lock = threading.Lock()
        self._send = with_retry(self.retry_config)(self._request)

    @property
    def subscription_id(self) -> str:
        return self.session.subscription_id

    @property
    def endpoint(self) -> str:
        return self.session.resource_manager_endpoint

    def _bearer_token(self) -> str:
        with self._token_lock:
            if self._token is None or time.time() >= self._token_expires_on - TOKEN_REFRESH_BUFFER:
                try:
                    access_token = self.session.credential.get_token(self.session.token_scope)
                except ClientAuthenticationError as e:
                    raise SessionError(self.session.connection_name, "토큰 발급 실패", cause=e) from e
                self._token = access_token.token
                self._token_expires_on = float(access_token.expires_on)
            return self._token

    def _url(self, path: str, allow_next_link: bool = False) -> str:
        """요청 URL 구성

        전체 URL은 nextLink로만 받으며, 토큰이 다른 호스트로 새지 않도록
        ARM 엔드포인트 하위만 허용합니다.

        Raises:
            ValidationError: 허용되지 않는 전체 URL
        """
        if "://" in path:
            if allow_next_link and path.startswith(self.endpoint + "/"):
                return path
            raise ValidationError("path", path, f"{self.endpoint} 하위 ARM 경로")
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.endpoint}{path}"

    def _request(self, url: str, params: dict[str, Any] | None) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self._bearer_token()}",
            "Accept": "application/json",
        }
        response = self.http.get(url, params=params, headers=headers, timeout=self.timeout)
        self.quota_tracker.record(self.subscription_id, response.headers)

        if not response.ok:
            raise APICallError.from_response(f"GET {url.split('?', 1)[0]}", response)

        if not response.content:
            return {}
        body: dict[str, Any] = response.json()
        return body

    def get(self, path: str, api_version: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """단일 리소스 조회

        Args:
            path: 리소스 경로 (예: "/subscriptions/{id}") 또는 전체 URL
            api_version: ARM api-version
            params: 추가 쿼리 파라미터

        Returns:
            응답 JSON
        """
        query = {"api-version": api_version, **(params or {})}
        return self._send(self._url(path), query)

    def get_page(
        self,
        path: str,
        api_version: str | None = None,
        params: dict[str, Any] | None = None,
    ) -> Page:
        """목록 한 페이지 조회

        nextLink는 api-version과 continuation 토큰을 이미 포함하므로
        api_version 없이 그대로 호출합니다.
        """
        query: dict[str, Any] | None = None
        if api_version is not None:
            query = {"api-version": api_version, **(params or {})}
        return Page.from_body(self._send(self._url(path, allow_next_link=True), query))

    def iter_values(
        self,
        path: str,
        api_version: str,
        params: dict[str, Any] | None = None,
    ) -> Iterator[dict[str, Any]]:
        """nextLink를 따라가며 모든 항목 순회 (행 예산 없음)"""
        page = self.get_page(path, api_version, params)
        while True:
            yield from page.values
            if not page.next_link:
                return
            page = self.get_page(page.next_link)

    def list_all(
        self,
        path: str,
        api_version: str,
        params: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        return list(self.iter_values(path, api_version, params))


def get_client(
    session: AzureSession,
    connection: ConnectionConfig,
    timeout: float = settings.API_TIMEOUT,
    http: requests.Session | None = None,
) -> ArmClient:
    """연결 설정의 재시도 규칙이 적용된 ArmClient 생성

    Args:
        session: 인증된 Azure 세션
        connection: 연결 설정 (재시도 규칙)
        timeout: 요청 타임아웃 (초)
        http: 공유할 requests.Session (None이면 새로 생성)

    Returns:
        ArmClient
    """
    return ArmClient(
        session=session,
        retry_config=apply_retry_rules(connection),
        http=http,
        timeout=timeout,
    )
