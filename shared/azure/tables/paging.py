"""
shared/azure/tables/paging.py - ARM 페이지 목록 스트리밍

List 함수 공통 루프입니다. 페이지마다 항목을 행 싱크로 보내고,
행 예산이 소진되면 다음 항목/페이지를 요청하지 않고 즉시 멈춥니다.
다음 페이지 요청 전에는 rate limiter에서 대기합니다.

페이지 조회 에러는 그대로 전파됩니다 (재시도는 ArmClient가 담당).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from core.parallel.client import ArmClient
from core.plugin import QueryData

logger = logging.getLogger(__name__)


def stream_list(
    d: QueryData,
    client: ArmClient,
    path: str,
    api_version: str,
    params: dict[str, Any] | None = None,
    wrap: Callable[[dict[str, Any]], Any] | None = None,
) -> int:
    """페이지 목록을 순회하며 항목을 스트리밍

    Args:
        d: 쿼리 컨텍스트
        client: ARM 클라이언트
        path: 목록 경로
        api_version: ARM api-version
        params: 추가 쿼리 파라미터 (첫 페이지에만 적용)
        wrap: 항목 가공 함수 (예: 부모 이름 추가)

    Returns:
        조회한 페이지 수
    """
    page = client.get_page(path, api_version, params)
    pages = 1

    while True:
        for item in page.values:
            d.stream_list_item(wrap(item) if wrap else item)
            if d.rows_remaining() == 0:
                logger.debug(f"[{d.table.name}] 행 예산 소진, {pages}페이지에서 중단")
                return pages

        if not page.next_link:
            return pages

        d.wait_for_list_rate_limit()
        if d.rows_remaining() == 0:
            return pages

        page = client.get_page(page.next_link)
        pages += 1


def stream_items(d: QueryData, items: list[dict[str, Any]], wrap: Callable[[dict[str, Any]], Any] | None = None) -> None:
    """페이지 없는 목록 응답 스트리밍"""
    for item in items:
        d.stream_list_item(wrap(item) if wrap else item)
        if d.rows_remaining() == 0:
            return
