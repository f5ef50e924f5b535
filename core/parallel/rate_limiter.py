"""
core/parallel/rate_limiter.py - Token Bucket Rate Limiter

ARM 읽기 요청이 구독 단위 쓰로틀링에 걸리지 않도록 페이지 요청 사이에
토큰을 소비하게 합니다. 리미터는 (구독, 서비스) 조합마다 하나씩 공유됩니다.

Example:
    from core.parallel.rate_limiter import get_rate_limiter

    limiter = get_rate_limiter("Microsoft.Network", scope=subscription_id)
    if not limiter.acquire():
        raise RateLimitError(...)
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass

from core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class RateLimiterConfig:
    """Rate limiter 설정

    Attributes:
        requests_per_second: 초당 토큰 리필 속도
        burst_size: 버킷 최대 토큰 수
        wait_timeout: acquire() 최대 대기 시간 (초)
    """

    requests_per_second: float = settings.RATE_LIMIT_RPS
    burst_size: int = settings.RATE_LIMIT_BURST
    wait_timeout: float = settings.RATE_LIMIT_WAIT_TIMEOUT

    def __post_init__(self) -> None:
        if self.requests_per_second <= 0:
            raise ValueError("requests_per_second must be > 0")
        if self.burst_size < 1:
            raise ValueError("burst_size must be >= 1")


class TokenBucketRateLimiter:
    """Thread-safe Token Bucket

    버킷은 burst_size만큼 가득 찬 상태로 시작하고 requests_per_second 속도로
    다시 채워집니다.
    """

    def __init__(self, config: RateLimiterConfig | None = None):
        self.config = config or RateLimiterConfig()
        self._tokens = float(self.config.burst_size)
        self._last_refill = time.monotonic()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(
            float(self.config.burst_size),
            self._tokens + elapsed * self.config.requests_per_second,
        )
        self._last_refill = now

    def try_acquire(self, tokens: int = 1) -> bool:
        """토큰 즉시 획득 시도 (대기 없음)"""
        with self._lock:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return True
            return False

    def acquire(self, tokens: int = 1, timeout: float | None = None) -> bool:
        """토큰 획득 (필요 시 대기)

        Args:
            tokens: 필요한 토큰 수
            timeout: 최대 대기 시간 (None이면 config.wait_timeout)

        Returns:
            획득 성공 여부 (타임아웃 시 False)
        """
        wait_timeout = self.config.wait_timeout if timeout is None else timeout
        deadline = time.monotonic() + wait_timeout

        while True:
            with self._lock:
                self._refill()
                if self._tokens >= tokens:
                    self._tokens -= tokens
                    return True
                shortage = tokens - self._tokens
                wait = shortage / self.config.requests_per_second

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.debug(f"토큰 대기 타임아웃 ({wait_timeout:.1f}초)")
                return False
            time.sleep(min(wait, remaining))

    @property
    def available_tokens(self) -> float:
        """현재 사용 가능한 토큰 수"""
        with self._lock:
            self._refill()
            return self._tokens


# 서비스(리소스 프로바이더)별 기본 설정
SERVICE_RATE_LIMITS: dict[str, RateLimiterConfig] = {
    "default": RateLimiterConfig(requests_per_second=10, burst_size=20),
    "Microsoft.Resources": RateLimiterConfig(requests_per_second=10, burst_size=20),
    "Microsoft.Authorization": RateLimiterConfig(requests_per_second=10, burst_size=20),
    "Microsoft.Network": RateLimiterConfig(requests_per_second=15, burst_size=30),
    "Microsoft.Compute": RateLimiterConfig(requests_per_second=15, burst_size=30),
    "Microsoft.AppConfiguration": RateLimiterConfig(requests_per_second=10, burst_size=20),
    "Microsoft.DBforMariaDB": RateLimiterConfig(requests_per_second=10, burst_size=20),
    "Microsoft.Security": RateLimiterConfig(requests_per_second=5, burst_size=10),
    # Azure Monitor 메트릭 API는 별도 쿼터가 더 빡빡함
    "Microsoft.Insights": RateLimiterConfig(requests_per_second=3, burst_size=6),
}

_limiters: dict[str, TokenBucketRateLimiter] = {}
_limiters_lock = threading.Lock()


def get_rate_limiter(
    service: str,
    scope: str = "",
    config: RateLimiterConfig | None = None,
) -> TokenBucketRateLimiter:
    """공유 rate limiter 조회 (없으면 생성)

    Args:
        service: 리소스 프로바이더 (예: "Microsoft.Network")
        scope: 공유 범위 (보통 구독 ID)
        config: 신규 생성 시 사용할 설정 (None이면 SERVICE_RATE_LIMITS)

    Returns:
        (scope, service) 조합에 대한 싱글톤 리미터
    """
    key = f"{scope}:{service}" if scope else service
    with _limiters_lock:
        limiter = _limiters.get(key)
        if limiter is None:
            limiter_config = config or SERVICE_RATE_LIMITS.get(service, SERVICE_RATE_LIMITS["default"])
            limiter = TokenBucketRateLimiter(limiter_config)
            _limiters[key] = limiter
        return limiter


def reset_rate_limiters() -> None:
    """공유 리미터 초기화 (테스트용)"""
    with _limiters_lock:
        _limiters.clear()
