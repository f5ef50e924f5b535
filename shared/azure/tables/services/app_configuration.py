"""
shared/azure/tables/services/app_configuration.py - App Configuration 테이블

Configuration Store 목록/조회와 진단 설정, 공용 네트워크 접근 여부,
Private Endpoint 연결 요약을 제공합니다.
"""

from __future__ import annotations

from typing import Any

from core.plugin import (
    Column,
    ColumnType,
    GetConfig,
    HydrateConfig,
    HydrateData,
    IgnoreConfig,
    KeyColumnSet,
    ListConfig,
    QueryData,
    Table,
    from_,
    from_field,
    from_value,
    to_lower,
)
from core.plugin.transform import TransformData

from ..common import (
    COLUMN_DESCRIPTION_AKAS,
    COLUMN_DESCRIPTION_REGION,
    COLUMN_DESCRIPTION_RESOURCE_GROUP,
    COLUMN_DESCRIPTION_TAGS,
    COLUMN_DESCRIPTION_TITLE,
    NOT_FOUND_CODES,
    azure_columns,
    convert_date_to_time,
    extract_resource_group_from_id,
    id_to_akas,
    is_not_found_error,
)
from ..paging import stream_list

SERVICE = "Microsoft.AppConfiguration"
API_VERSION = "2023-03-01"
DIAGNOSTIC_SETTINGS_API_VERSION = "2021-05-01-preview"


def _stores_path(d: QueryData, resource_group: str | None = None) -> str:
    base = f"/subscriptions/{d.client.subscription_id}"
    if resource_group:
        base += f"/resourceGroups/{resource_group}"
    return base + "/providers/Microsoft.AppConfiguration/configurationStores"


def list_app_configurations(d: QueryData, h: HydrateData) -> None:
    stream_list(d, d.client, _stores_path(d), API_VERSION)


def get_app_configuration(d: QueryData, h: HydrateData) -> dict[str, Any] | None:
    name = d.key_segment("name")
    resource_group = d.key_segment("resource_group")
    if not name or not resource_group:
        return None

    # 없는 리소스에 대해 에러 대신 빈 응답을 주는 경우가 있음
    item = d.client.get(f"{_stores_path(d, resource_group)}/{name}", API_VERSION)
    return item if item.get("id") else None


def list_app_configuration_diagnostic_settings(d: QueryData, h: HydrateData) -> list[dict[str, Any]]:
    items = d.client.list_all(
        f"{h.item['id']}/providers/Microsoft.Insights/diagnosticSettings",
        DIAGNOSTIC_SETTINGS_API_VERSION,
    )
    settings = []
    for item in items:
        setting = {key: item[key] for key in ("id", "name", "type") if item.get(key) is not None}
        if item.get("properties") is not None:
            setting["properties"] = item["properties"]
        settings.append(setting)
    return settings


def get_public_network_access(d: QueryData, h: HydrateData) -> str:
    """공용 네트워크 접근 여부

    스토어 생성 시 자동(Automatic)으로 두면 응답에 값이 없습니다.
    이 경우 Private Endpoint가 있으면 Disabled, 없으면 Enabled입니다.
    """
    properties = h.item.get("properties") or {}
    access = properties.get("publicNetworkAccess")
    if access:
        return access
    if properties.get("privateEndpointConnections") is None:
        return "Enabled"
    return "Disabled"


def extract_private_endpoint_connections(d: TransformData) -> list[dict[str, Any]]:
    """Private Endpoint 연결을 평탄화한 목록"""
    properties = (d.hydrate_item or {}).get("properties") or {}
    connections = []
    for conn in properties.get("privateEndpointConnections") or []:
        summary: dict[str, Any] = {}
        if conn.get("id") is not None:
            summary["id"] = conn["id"]
            summary["name"] = conn.get("name")
            summary["type"] = conn.get("type")

        props = conn.get("properties")
        if props is not None:
            endpoint = props.get("privateEndpoint")
            if endpoint is not None:
                summary["privateEndpointPropertyId"] = endpoint.get("id")
            state = props.get("privateLinkServiceConnectionState")
            if state is not None:
                if state.get("actionsRequired"):
                    summary["privateLinkServiceConnectionStateActionsRequired"] = state["actionsRequired"]
                if state.get("status"):
                    summary["privateLinkServiceConnectionStateStatus"] = state["status"]
                if state.get("description") is not None:
                    summary["privateLinkServiceConnectionStateDescription"] = state["description"]
            if props.get("provisioningState"):
                summary["provisioningState"] = props["provisioningState"]
        connections.append(summary)
    return connections


def table_azure_app_configuration() -> Table:
    return Table(
        name="azure_app_configuration",
        description="Azure App Configuration",
        get_config=GetConfig(
            key_columns=KeyColumnSet.all(["name", "resource_group"]),
            hydrate=get_app_configuration,
            tags={"service": SERVICE, "action": "configurationStores/read"},
            ignore_config=IgnoreConfig(should_ignore_error=is_not_found_error(NOT_FOUND_CODES)),
        ),
        list_config=ListConfig(
            hydrate=list_app_configurations,
            tags={"service": SERVICE, "action": "configurationStores/read"},
        ),
        hydrate_config=[
            HydrateConfig(
                func=list_app_configuration_diagnostic_settings,
                tags={"service": "Microsoft.Insights", "action": "diagnosticSettings/read"},
            ),
        ],
        columns=azure_columns(
            [
                Column("name", ColumnType.STRING, "The name of the resource."),
                Column("id", ColumnType.STRING, "The resource ID."),
                Column(
                    "provisioning_state",
                    ColumnType.STRING,
                    "The provisioning state of the configuration store.",
                    from_field("properties.provisioningState"),
                ),
                Column("type", ColumnType.STRING, "The type of the resource."),
                Column(
                    "creation_date",
                    ColumnType.TIMESTAMP,
                    "The creation date of configuration store.",
                    from_field("properties.creationDate").transform(convert_date_to_time),
                ),
                Column(
                    "endpoint",
                    ColumnType.STRING,
                    "The DNS endpoint where the configuration store API will be available.",
                    from_field("properties.endpoint"),
                ),
                Column(
                    "public_network_access",
                    ColumnType.STRING,
                    "Control permission for data plane traffic coming from public networks while private endpoint is enabled.",
                    transform=from_value(),
                    hydrate=get_public_network_access,
                ),
                Column("sku_name", ColumnType.STRING, "The SKU name of the configuration store.", from_field("sku.name")),
                Column(
                    "diagnostic_settings",
                    ColumnType.JSON,
                    "A list of active diagnostic settings for the configuration store.",
                    transform=from_value(),
                    hydrate=list_app_configuration_diagnostic_settings,
                ),
                Column(
                    "encryption",
                    ColumnType.JSON,
                    "The encryption settings of the configuration store.",
                    from_field("properties.encryption"),
                ),
                Column("identity", ColumnType.JSON, "The managed identity information, if configured."),
                Column(
                    "private_endpoint_connections",
                    ColumnType.JSON,
                    "The list of private endpoint connections that are set up for this resource.",
                    from_(extract_private_endpoint_connections),
                ),
                Column("title", ColumnType.STRING, COLUMN_DESCRIPTION_TITLE, from_field("name")),
                Column("tags", ColumnType.JSON, COLUMN_DESCRIPTION_TAGS),
                Column("akas", ColumnType.JSON, COLUMN_DESCRIPTION_AKAS, from_field("id").transform(id_to_akas)),
                Column("region", ColumnType.STRING, COLUMN_DESCRIPTION_REGION, from_field("location").transform(to_lower)),
                Column(
                    "resource_group",
                    ColumnType.STRING,
                    COLUMN_DESCRIPTION_RESOURCE_GROUP,
                    from_field("id").transform(extract_resource_group_from_id),
                ),
            ]
        ),
    )
