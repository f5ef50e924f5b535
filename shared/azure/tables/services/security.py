"""
shared/azure/tables/services/security.py - Microsoft.Security 테이블

Security Center (구독당 한 행)와 자동 프로비저닝 설정.

Security Center 행은 구독 ID 하나이며, 나머지 컬럼은 각각 별도 API를
호출하는 hydrate로 채워집니다. 선택하지 않은 컬럼의 API는 호출하지 않습니다.
"""

from __future__ import annotations

from typing import Any

from core.plugin import (
    Column,
    ColumnType,
    GetConfig,
    HydrateConfig,
    HydrateData,
    KeyColumnSet,
    ListConfig,
    QueryData,
    Table,
    from_constant,
    from_field,
    from_value,
)
from core.plugin.transform import TransformData

from ..common import (
    COLUMN_DESCRIPTION_AKAS,
    COLUMN_DESCRIPTION_SUBSCRIPTION,
    COLUMN_DESCRIPTION_TITLE,
    azure_columns,
    id_to_akas,
)
from ..paging import stream_list

SERVICE = "Microsoft.Security"

AUTO_PROVISIONING_API_VERSION = "2017-08-01-preview"
CONTACTS_API_VERSION = "2020-01-01-preview"
SETTINGS_API_VERSION = "2022-05-01"
PRICINGS_API_VERSION = "2023-01-01"
POLICY_API_VERSION = "2022-06-01"

SECURITY_CENTER_POLICY_ASSIGNMENT = "SecurityCenterBuiltIn"


def _security_path(d: QueryData) -> str:
    return f"/subscriptions/{d.client.subscription_id}/providers/Microsoft.Security"


def _summarize(items: list[dict[str, Any]], *keys: str) -> list[dict[str, Any]]:
    """목록 항목에서 지정 키만 추출"""
    return [{key: item.get(key) for key in keys} for item in items]


# =============================================================================
# Security Center
# =============================================================================


def list_security_center(d: QueryData, h: HydrateData) -> None:
    d.stream_list_item(d.client.subscription_id)


def get_auto_provisioning_details(d: QueryData, h: HydrateData) -> list[dict[str, Any]]:
    items = d.client.list_all(f"{_security_path(d)}/autoProvisioningSettings", AUTO_PROVISIONING_API_VERSION)
    return _summarize(items, "id", "name", "properties", "type")


def get_contact_details(d: QueryData, h: HydrateData) -> list[dict[str, Any]]:
    items = d.client.list_all(f"{_security_path(d)}/securityContacts", CONTACTS_API_VERSION)
    return _summarize(items, "id", "name", "properties", "type")


def get_policy_details(d: QueryData, h: HydrateData) -> dict[str, Any]:
    return d.client.get(
        f"/subscriptions/{d.client.subscription_id}/providers/Microsoft.Authorization"
        f"/policyAssignments/{SECURITY_CENTER_POLICY_ASSIGNMENT}",
        POLICY_API_VERSION,
    )


def get_pricings_details(d: QueryData, h: HydrateData) -> list[dict[str, Any]]:
    items = d.client.list_all(f"{_security_path(d)}/pricings", PRICINGS_API_VERSION)
    return _summarize(items, "id", "name", "properties", "type")


def get_setting_details(d: QueryData, h: HydrateData) -> list[dict[str, Any]]:
    items = d.client.list_all(f"{_security_path(d)}/settings", SETTINGS_API_VERSION)
    return _summarize(items, "id", "name", "kind", "type")


def security_center_akas(d: TransformData) -> list[str]:
    resource_id = f"/subscriptions/{d.value}/providers/Microsoft.Security/securityCenter"
    return ["azure://" + resource_id, "azure://" + resource_id.lower()]


def table_azure_security_center() -> Table:
    return Table(
        name="azure_security_center",
        description="Azure Security Center",
        list_config=ListConfig(
            hydrate=list_security_center,
            tags={"service": SERVICE, "action": "read"},
        ),
        hydrate_config=[
            HydrateConfig(func=get_auto_provisioning_details, tags={"service": SERVICE, "action": "autoProvisioningSettings/read"}),
            HydrateConfig(func=get_contact_details, tags={"service": SERVICE, "action": "securityContacts/read"}),
            HydrateConfig(func=get_policy_details, tags={"service": "Microsoft.Authorization", "action": "policyAssignments/read"}),
            HydrateConfig(func=get_pricings_details, tags={"service": SERVICE, "action": "pricings/read"}),
            HydrateConfig(func=get_setting_details, tags={"service": SERVICE, "action": "settings/read"}),
        ],
        columns=[
            Column(
                "auto_provisioning_settings",
                ColumnType.JSON,
                "Auto provisioning settings of the subscriptions.",
                transform=from_value(),
                hydrate=get_auto_provisioning_details,
            ),
            Column(
                "contacts",
                ColumnType.JSON,
                "Security contact configurations for the subscription.",
                transform=from_value(),
                hydrate=get_contact_details,
            ),
            Column(
                "policy",
                ColumnType.JSON,
                "Security Center policy assignment of the subscription.",
                transform=from_value(),
                hydrate=get_policy_details,
            ),
            Column(
                "pricings",
                ColumnType.JSON,
                "Security Center pricing configurations in the subscription.",
                transform=from_value(),
                hydrate=get_pricings_details,
            ),
            Column(
                "settings",
                ColumnType.JSON,
                "Security Center settings of the subscription.",
                transform=from_value(),
                hydrate=get_setting_details,
            ),
            Column("title", ColumnType.STRING, COLUMN_DESCRIPTION_TITLE, from_constant("Security Center")),
            Column("akas", ColumnType.JSON, COLUMN_DESCRIPTION_AKAS, from_value().transform(security_center_akas)),
            Column("subscription_id", ColumnType.STRING, COLUMN_DESCRIPTION_SUBSCRIPTION, from_value()),
        ],
    )


# =============================================================================
# Security Center Auto Provisioning
# =============================================================================


def list_security_center_auto_provisioning(d: QueryData, h: HydrateData) -> None:
    stream_list(d, d.client, f"{_security_path(d)}/autoProvisioningSettings", AUTO_PROVISIONING_API_VERSION)


def get_security_center_auto_provisioning(d: QueryData, h: HydrateData) -> dict[str, Any] | None:
    name = d.key_segment("name")
    if not name:
        return None
    item = d.client.get(f"{_security_path(d)}/autoProvisioningSettings/{name}", AUTO_PROVISIONING_API_VERSION)
    return item if item.get("id") else None


def table_azure_security_center_auto_provisioning() -> Table:
    return Table(
        name="azure_security_center_auto_provisioning",
        description="Azure Security Center Auto Provisioning",
        get_config=GetConfig(
            key_columns=KeyColumnSet.single("name"),
            hydrate=get_security_center_auto_provisioning,
            tags={"service": SERVICE, "action": "autoProvisioningSettings/read"},
        ),
        list_config=ListConfig(
            hydrate=list_security_center_auto_provisioning,
            tags={"service": SERVICE, "action": "autoProvisioningSettings/read"},
        ),
        columns=azure_columns(
            [
                Column("id", ColumnType.STRING, "The resource id."),
                Column("name", ColumnType.STRING, "The resource name."),
                Column("type", ColumnType.STRING, "The resource type."),
                Column(
                    "auto_provision",
                    ColumnType.STRING,
                    "Describes what kind of security agent provisioning action to take. Possible values are On and Off.",
                    from_field("properties.autoProvision"),
                ),
                Column("title", ColumnType.STRING, COLUMN_DESCRIPTION_TITLE, from_field("name")),
                Column("akas", ColumnType.JSON, COLUMN_DESCRIPTION_AKAS, from_field("id").transform(id_to_akas)),
            ]
        ),
    )
