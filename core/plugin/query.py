"""
core/plugin/query.py - 쿼리 실행 컨텍스트

List/Get/Hydrate 함수가 공통으로 받는 QueryData와 HydrateData를 정의합니다.

QueryData는 세 가지 협조 기능을 제공합니다:
    - stream_list_item(): 항목을 호스트의 행 싱크로 전달 (예산 소진 후에는 버림)
    - rows_remaining(): 남은 행 예산 (취소/소진 시 0, 제한 없으면 UNLIMITED)
    - wait_for_list_rate_limit(): 다음 페이지 요청 전 rate limiter/쿼터 대기

Example:
    def list_load_balancers(d: QueryData, h: HydrateData) -> None:
        for item in d.client.iter_values(path, api_version):
            d.stream_list_item(item)
            if d.rows_remaining() == 0:
                return
"""

from __future__ import annotations

import copy
import logging
import sys
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from core.exceptions import RateLimitError

if TYPE_CHECKING:
    from core.config import ConnectionConfig
    from core.parallel.client import ArmClient
    from core.parallel.quotas import QuotaTracker
    from core.parallel.rate_limiter import TokenBucketRateLimiter

    from .table import Table

logger = logging.getLogger(__name__)

# 제한 없는 쿼리의 남은 행 수
UNLIMITED = sys.maxsize


@dataclass
class HydrateData:
    """hydrate 함수 입력

    Attributes:
        item: List/Get 항목 (parent List에서는 부모 항목)
        parent_item: 자식 항목의 부모 항목
    """

    item: Any = None
    parent_item: Any = None


class _RowBudget:
    """행 예산 카운터 (부모/자식 QueryData가 공유)"""

    def __init__(self, limit: int | None):
        self.limit = limit
        self.emitted = 0
        self._lock = threading.Lock()

    def remaining(self) -> int:
        with self._lock:
            if self.limit is None:
                return UNLIMITED
            return max(self.limit - self.emitted, 0)

    def consume(self) -> bool:
        """행 하나 소비 (예산 없으면 False)"""
        with self._lock:
            if self.limit is not None and self.emitted >= self.limit:
                return False
            self.emitted += 1
            return True


class QueryData:
    """테이블 쿼리 한 건의 실행 컨텍스트

    Attributes:
        table: 실행 중인 테이블
        connection: 연결 설정
        client: ARM 클라이언트
        equals_quals: {컬럼: 값} equality 조건
        limit: 요청된 행 수 제한 (None이면 무제한)
    """

    def __init__(
        self,
        table: Table,
        connection: ConnectionConfig,
        client: ArmClient | None = None,
        equals_quals: dict[str, Any] | None = None,
        limit: int | None = None,
        rate_limiter: TokenBucketRateLimiter | None = None,
        quota_tracker: QuotaTracker | None = None,
        cancel_event: threading.Event | None = None,
        sink: Callable[[Any], None] | None = None,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        self.table = table
        self.connection = connection
        self.client = client
        self.equals_quals = dict(equals_quals or {})
        self.limit = limit
        self.rate_limiter = rate_limiter
        self.quota_tracker = quota_tracker
        self.cancel_event = cancel_event or threading.Event()
        self._sink = sink
        self._sleep = sleep
        self._budget = _RowBudget(limit)

    # -------------------------------------------------------------------------
    # qual
    # -------------------------------------------------------------------------

    def key_value(self, name: str) -> str:
        """equality qual 값을 문자열로 (없으면 빈 문자열)"""
        value = self.equals_quals.get(name)
        return "" if value is None else str(value)

    def key_segment(self, name: str) -> str:
        """ARM 경로 세그먼트로 쓸 qual 값 (퍼센트 인코딩, '/' 포함)"""
        return quote(self.key_value(name), safe="")

    # -------------------------------------------------------------------------
    # 스트리밍 / 예산
    # -------------------------------------------------------------------------

    def stream_list_item(self, item: Any) -> None:
        """항목 하나를 호스트로 전달

        예산이 소진됐거나 취소된 뒤 들어온 항목은 버립니다.
        """
        if self.rows_remaining() == 0:
            logger.debug(f"[{self.table.name}] 행 예산 소진 후 항목 무시")
            return
        if self._sink is not None:
            self._sink(item)

    def rows_remaining(self) -> int:
        """남은 행 예산

        Returns:
            취소됐거나 예산을 모두 썼으면 0, 제한이 있으면 limit - 전달한 행 수,
            제한이 없으면 UNLIMITED
        """
        if self.is_cancelled():
            return 0
        return self._budget.remaining()

    def record_row(self) -> bool:
        """호스트가 행 하나를 내보낼 때 호출 (예산 없으면 False)"""
        return self._budget.consume()

    @property
    def rows_emitted(self) -> int:
        return self._budget.emitted

    def is_cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()

    def for_parent(self, on_parent_item: Callable[[Any], None]) -> QueryData:
        """부모 List용 뷰

        예산과 취소 상태를 공유하며, stream_list_item()이 부모 항목을
        on_parent_item으로 넘깁니다.
        """
        view = copy.copy(self)
        view._sink = on_parent_item
        return view

    # -------------------------------------------------------------------------
    # rate limit
    # -------------------------------------------------------------------------

    @property
    def rate_limit_key(self) -> str:
        subscription = self.client.subscription_id if self.client is not None else self.connection.name
        return f"{subscription}:{self.table.service}"

    def wait_for_list_rate_limit(self) -> None:
        """다음 페이지 요청 전 협조 대기

        rate limiter 토큰 하나를 얻은 뒤, 구독 읽기 쿼터가 낮으면
        QuotaTracker가 제시하는 만큼 추가로 대기합니다.

        Raises:
            RateLimitError: 토큰 대기 시간 초과
        """
        if self.is_cancelled():
            return

        if self.rate_limiter is not None and not self.rate_limiter.acquire():
            raise RateLimitError(self.rate_limit_key, self.rate_limiter.config.wait_timeout)

        if self.quota_tracker is not None and self.client is not None:
            delay = self.quota_tracker.backoff_delay(self.client.subscription_id)
            if delay > 0:
                logger.debug(f"[{self.table.name}] 구독 읽기 쿼터 부족, {delay:.1f}초 대기")
                self._sleep(delay)
