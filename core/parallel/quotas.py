"""
core/parallel/quotas.py - ARM 구독 읽기 쿼터 추적

ARM은 응답 헤더 ``x-ms-ratelimit-remaining-subscription-reads``로
구독의 남은 읽기 요청 수를 알려줍니다. 이 값을 구독별로 기록해 두었다가
페이지 사이 대기 시 쿼터가 바닥나기 전에 속도를 늦춥니다.

Usage:
    from core.parallel.quotas import get_quota_tracker

    tracker = get_quota_tracker()
    tracker.record(subscription_id, response.headers)

    delay = tracker.backoff_delay(subscription_id)
    if delay:
        time.sleep(delay)
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

REMAINING_READS_HEADER = "x-ms-ratelimit-remaining-subscription-reads"

# 기록 유효 시간 (초). ARM 읽기 쿼터 버킷은 수 분 단위로 회복됨
DEFAULT_ENTRY_TTL = 300


class QuotaStatus(Enum):
    """쿼터 상태"""

    OK = "ok"  # 여유 있음
    WARNING = "warning"  # 남은 읽기 100 미만
    CRITICAL = "critical"  # 남은 읽기 25 미만
    EXCEEDED = "exceeded"  # 소진
    UNKNOWN = "unknown"  # 기록 없음


WARNING_THRESHOLD = 100
CRITICAL_THRESHOLD = 25

# 상태별 추가 대기 시간 (초)
BACKOFF_DELAYS: dict[QuotaStatus, float] = {
    QuotaStatus.OK: 0.0,
    QuotaStatus.UNKNOWN: 0.0,
    QuotaStatus.WARNING: 0.5,
    QuotaStatus.CRITICAL: 2.0,
    QuotaStatus.EXCEEDED: 5.0,
}


def status_for(remaining: int | None) -> QuotaStatus:
    """남은 읽기 수로 쿼터 상태 계산"""
    if remaining is None:
        return QuotaStatus.UNKNOWN
    if remaining <= 0:
        return QuotaStatus.EXCEEDED
    if remaining < CRITICAL_THRESHOLD:
        return QuotaStatus.CRITICAL
    if remaining < WARNING_THRESHOLD:
        return QuotaStatus.WARNING
    return QuotaStatus.OK


@dataclass
class QuotaInfo:
    """구독 쿼터 기록

    Attributes:
        subscription_id: 구독 ID
        remaining_reads: 마지막 응답 기준 남은 읽기 요청 수
        status: 쿼터 상태
        timestamp: 기록 시각 (monotonic)
    """

    subscription_id: str
    remaining_reads: int | None = None
    status: QuotaStatus = QuotaStatus.UNKNOWN
    timestamp: float = field(default_factory=time.monotonic)

    def __post_init__(self) -> None:
        self.status = status_for(self.remaining_reads)

    def is_expired(self, ttl: float) -> bool:
        return time.monotonic() - self.timestamp > ttl

    def to_dict(self) -> dict[str, Any]:
        return {
            "subscription_id": self.subscription_id,
            "remaining_reads": self.remaining_reads,
            "status": self.status.value,
        }


class QuotaTracker:
    """구독별 ARM 읽기 쿼터 추적 (thread-safe)"""

    def __init__(self, ttl: float = DEFAULT_ENTRY_TTL):
        self.ttl = ttl
        self._entries: dict[str, QuotaInfo] = {}
        self._lock = threading.Lock()

    def record(self, subscription_id: str, headers: Mapping[str, str] | None) -> QuotaInfo | None:
        """응답 헤더에서 남은 읽기 수 기록

        Args:
            subscription_id: 구독 ID
            headers: HTTP 응답 헤더 (대소문자 무시 매핑 권장)

        Returns:
            갱신된 QuotaInfo (헤더가 없거나 잘못된 값이면 None)
        """
        if not headers:
            return None
        raw = headers.get(REMAINING_READS_HEADER)
        if raw is None:
            return None
        try:
            remaining = int(raw)
        except (TypeError, ValueError):
            logger.debug(f"잘못된 쿼터 헤더 값: {raw!r}")
            return None

        info = QuotaInfo(subscription_id=subscription_id, remaining_reads=remaining)
        with self._lock:
            previous = self._entries.get(subscription_id)
            self._entries[subscription_id] = info

        if info.status != QuotaStatus.OK and (previous is None or previous.status != info.status):
            logger.info(f"구독 {subscription_id} 읽기 쿼터 {info.status.value}: 남은 요청 {remaining}")
        return info

    def get(self, subscription_id: str) -> QuotaInfo | None:
        """구독의 최근 쿼터 기록 (만료 시 None)"""
        with self._lock:
            info = self._entries.get(subscription_id)
            if info is None:
                return None
            if info.is_expired(self.ttl):
                del self._entries[subscription_id]
                return None
            return info

    def status(self, subscription_id: str) -> QuotaStatus:
        info = self.get(subscription_id)
        return info.status if info else QuotaStatus.UNKNOWN

    def backoff_delay(self, subscription_id: str) -> float:
        """쿼터 상태에 따른 추가 대기 시간 (초)"""
        return BACKOFF_DELAYS[self.status(subscription_id)]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


# =============================================================================
# 싱글톤
# =============================================================================

_tracker: QuotaTracker | None = None
_tracker_lock = threading.Lock()


def get_quota_tracker() -> QuotaTracker:
    """프로세스 공유 QuotaTracker"""
    global _tracker
    with _tracker_lock:
        if _tracker is None:
            _tracker = QuotaTracker()
        return _tracker


def reset_quota_tracker() -> None:
    """공유 QuotaTracker 초기화"""
    global _tracker
    with _tracker_lock:
        _tracker = None
