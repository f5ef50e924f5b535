"""
shared/azure/tables/common.py - Azure 테이블 공통 컬럼/변환

모든 테이블이 공유하는 표준 컬럼(subscription_id, cloud_environment)과
리소스 ID 기반 변환 함수를 제공합니다.

리소스 ID 형식:
    /subscriptions/{sub}/resourceGroups/{rg}/providers/{ns}/{type}/{name}/...
    분할 인덱스: [2]=구독, [4]=리소스 그룹, [8]=리소스 이름
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from core.exceptions import matches_error_codes
from core.plugin import Column, ColumnType, HydrateData, QueryData, from_value
from core.plugin.transform import TransformData, parse_timestamp

# 대부분의 리소스 Get에서 무시하는 에러 코드
NOT_FOUND_CODES = ["ResourceNotFound", "ResourceGroupNotFound", "404"]

COLUMN_DESCRIPTION_SUBSCRIPTION = "The Azure Subscription ID in which the resource is located."
COLUMN_DESCRIPTION_CLOUD_ENVIRONMENT = "The Azure Cloud Environment."
COLUMN_DESCRIPTION_TITLE = "Title of the resource."
COLUMN_DESCRIPTION_AKAS = "Array of globally unique identifier strings (also known as) for the resource."
COLUMN_DESCRIPTION_TAGS = "A map of tags for the resource."
COLUMN_DESCRIPTION_REGION = "The Azure region/location in which the resource is located."
COLUMN_DESCRIPTION_RESOURCE_GROUP = "The resource group which holds this resource."


# =============================================================================
# 무시 규칙
# =============================================================================


def is_not_found_error(codes: Iterable[str]) -> Callable[[Exception], bool]:
    """지정한 에러 코드/상태 코드와 일치하면 True를 반환하는 판정 함수 생성

    Example:
        IgnoreConfig(should_ignore_error=is_not_found_error(["ResourceNotFound", "404"]))
    """
    code_list = list(codes)

    def should_ignore(error: Exception) -> bool:
        return matches_error_codes(error, code_list)

    return should_ignore


# =============================================================================
# 공통 hydrate
# =============================================================================


def get_subscription_id(d: QueryData, h: HydrateData) -> str:
    """연결의 구독 ID"""
    return d.client.subscription_id


def get_cloud_environment(d: QueryData, h: HydrateData) -> str:
    """연결의 클라우드 환경 이름"""
    return d.client.session.environment


def azure_columns(columns: list[Column]) -> list[Column]:
    """테이블 컬럼 뒤에 구독/클라우드 환경 표준 컬럼 추가"""
    return columns + [
        Column(
            "cloud_environment",
            ColumnType.STRING,
            COLUMN_DESCRIPTION_CLOUD_ENVIRONMENT,
            transform=from_value(),
            hydrate=get_cloud_environment,
        ),
        Column(
            "subscription_id",
            ColumnType.STRING,
            COLUMN_DESCRIPTION_SUBSCRIPTION,
            transform=from_value(),
            hydrate=get_subscription_id,
        ),
    ]


# =============================================================================
# 변환 단계
# =============================================================================


def _id_segment(resource_id: Any, index: int) -> str | None:
    if not resource_id:
        return None
    parts = str(resource_id).split("/")
    if len(parts) <= index:
        return None
    return parts[index]


def id_to_akas(d: TransformData) -> list[str] | None:
    """리소스 ID → ["azure://{id}", "azure://{소문자 id}"]"""
    if not d.value:
        return None
    resource_id = str(d.value)
    return ["azure://" + resource_id, "azure://" + resource_id.lower()]


def extract_resource_group_from_id(d: TransformData) -> str | None:
    """리소스 ID의 리소스 그룹 (소문자)"""
    segment = _id_segment(d.value, 4)
    return segment.lower() if segment else None


def resource_name_from_id(d: TransformData) -> str | None:
    """리소스 ID의 최상위 리소스 이름 (예: 자식 리소스의 부모 LB 이름)"""
    return _id_segment(d.value, 8)


def last_path_element(d: TransformData) -> str | None:
    if not d.value:
        return None
    return str(d.value).rstrip("/").split("/")[-1]


def convert_date_to_time(d: TransformData) -> datetime | None:
    """ARM 날짜 문자열 → datetime"""
    return parse_timestamp(d.value)
