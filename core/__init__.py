# core/__init__.py
"""
core - Azure 리소스 테이블 플러그인 인프라

테이블 모델, 쿼리 실행, 인증, 재시도/Rate limit, 병렬 처리를 통합하는
최상위 패키지입니다.

아키텍처:
    core/
    ├── auth/           # Azure 세션 (azure-identity 자격 증명)
    ├── parallel/       # ARM 클라이언트, 재시도, rate limiter, 병렬 실행
    ├── plugin/         # 테이블 모델, QueryData, 로컬 호스트(QueryRunner)
    ├── config.py       # 전역 설정 / 연결 설정
    └── exceptions.py   # 통합 예외 계층

Usage:
    # 연결 설정
    from core.config import load_connections
    connections = load_connections()

    # 예외 처리
    from core.exceptions import APICallError, is_not_found
    try:
        item = client.get(resource_id, api_version="2018-06-01")
    except APICallError as e:
        if is_not_found(e):
            print("리소스가 없습니다")

    # 쿼리 실행
    from core.plugin import QueryRunner
    from shared.azure.tables import plugin
    rows = QueryRunner(plugin()).execute("azure_lb", connections["azure"], limit=10)
"""

from core import auth, config, exceptions, parallel, plugin

__all__: list[str] = [
    # 서브패키지
    "auth",
    "parallel",
    "plugin",
    # 모듈
    "config",
    "exceptions",
]
