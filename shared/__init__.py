"""공유 유틸리티 - 테이블 플러그인과 CLI에서 공통 사용.

- azure: Azure 테이블 정의 (컬럼, 페이지 스트리밍, Monitor 메트릭)

의존성 구조:
    core (인프라: 인증, 재시도, rate limit, 플러그인 모델)
       ↑
    shared (Azure 테이블)
       ↑
    cli
"""

from . import azure

__all__ = ["azure"]
