"""
shared/azure/tables/services/network.py - Microsoft.Network 테이블

Network Watcher, Flow Log, Load Balancer, Backend Address Pool.
Flow Log와 Backend Address Pool은 부모 리소스(Watcher, LB)를 먼저 나열한 뒤
부모마다 자식 목록을 조회합니다.
"""

from __future__ import annotations

import logging
from typing import Any

from core.plugin import (
    Column,
    ColumnType,
    GetConfig,
    HydrateData,
    IgnoreConfig,
    KeyColumnSet,
    ListConfig,
    QueryData,
    Table,
    from_field,
    to_lower,
)

from ..common import (
    COLUMN_DESCRIPTION_AKAS,
    COLUMN_DESCRIPTION_REGION,
    COLUMN_DESCRIPTION_RESOURCE_GROUP,
    COLUMN_DESCRIPTION_TAGS,
    COLUMN_DESCRIPTION_TITLE,
    NOT_FOUND_CODES,
    azure_columns,
    extract_resource_group_from_id,
    id_to_akas,
    is_not_found_error,
    resource_name_from_id,
)
from ..paging import stream_list

logger = logging.getLogger(__name__)

API_VERSION = "2023-05-01"
SERVICE = "Microsoft.Network"

_not_found = is_not_found_error(NOT_FOUND_CODES)


def _provider_path(d: QueryData, resource_group: str | None = None) -> str:
    base = f"/subscriptions/{d.client.subscription_id}"
    if resource_group:
        base += f"/resourceGroups/{resource_group}"
    return base + "/providers/Microsoft.Network"


def _resource_group_of(resource_id: str) -> str:
    parts = resource_id.split("/")
    return parts[4] if len(parts) > 4 else ""


def _get_or_none(d: QueryData, path: str) -> dict[str, Any] | None:
    """리소스 조회 (id 없는 응답은 없는 리소스로 간주)"""
    item = d.client.get(path, API_VERSION)
    if item and item.get("id"):
        return item
    return None


def _standard_columns() -> list[Column]:
    return [
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


# =============================================================================
# Network Watcher
# =============================================================================


def list_network_watchers(d: QueryData, h: HydrateData) -> None:
    stream_list(d, d.client, f"{_provider_path(d)}/networkWatchers", API_VERSION)


def get_network_watcher(d: QueryData, h: HydrateData) -> dict[str, Any] | None:
    name = d.key_segment("name")
    resource_group = d.key_segment("resource_group")
    if not name or not resource_group:
        return None
    return _get_or_none(d, f"{_provider_path(d, resource_group)}/networkWatchers/{name}")


def table_azure_network_watcher() -> Table:
    return Table(
        name="azure_network_watcher",
        description="Azure Network Watcher",
        get_config=GetConfig(
            key_columns=KeyColumnSet.all(["name", "resource_group"]),
            hydrate=get_network_watcher,
            tags={"service": SERVICE, "action": "networkWatchers/read"},
            ignore_config=IgnoreConfig(should_ignore_error=_not_found),
        ),
        list_config=ListConfig(
            hydrate=list_network_watchers,
            tags={"service": SERVICE, "action": "networkWatchers/read"},
        ),
        columns=azure_columns(
            [
                Column("name", ColumnType.STRING, "The friendly name that identifies the network watcher."),
                Column("id", ColumnType.STRING, "Contains ID to identify a network watcher uniquely."),
                Column("etag", ColumnType.STRING, "An unique read-only string that changes whenever the resource is updated."),
                Column("type", ColumnType.STRING, "The resource type of the network watcher."),
                Column(
                    "provisioning_state",
                    ColumnType.STRING,
                    "The provisioning state of the network watcher resource.",
                    from_field("properties.provisioningState"),
                ),
            ]
            + _standard_columns()
        ),
    )


# =============================================================================
# Network Watcher Flow Log
# =============================================================================


def list_network_watcher_flow_logs(d: QueryData, h: HydrateData) -> None:
    watcher = h.item
    watcher_name = watcher["name"]
    resource_group = _resource_group_of(watcher["id"])

    def with_watcher_name(item: dict[str, Any]) -> dict[str, Any]:
        return {**item, "networkWatcherName": watcher_name}

    stream_list(
        d,
        d.client,
        f"{_provider_path(d, resource_group)}/networkWatchers/{watcher_name}/flowLogs",
        API_VERSION,
        wrap=with_watcher_name,
    )


def get_network_watcher_flow_log(d: QueryData, h: HydrateData) -> dict[str, Any] | None:
    watcher_name = d.key_value("network_watcher_name")
    name = d.key_segment("name")
    resource_group = d.key_segment("resource_group")
    if not watcher_name or not name or not resource_group:
        return None

    watcher_segment = d.key_segment("network_watcher_name")
    item = _get_or_none(d, f"{_provider_path(d, resource_group)}/networkWatchers/{watcher_segment}/flowLogs/{name}")
    if item is None:
        return None
    return {**item, "networkWatcherName": watcher_name}


def table_azure_network_watcher_flow_log() -> Table:
    return Table(
        name="azure_network_watcher_flow_log",
        description="Azure Network Watcher FlowLog",
        get_config=GetConfig(
            key_columns=KeyColumnSet.all(["network_watcher_name", "name", "resource_group"]),
            hydrate=get_network_watcher_flow_log,
            tags={"service": SERVICE, "action": "networkWatchers/flowLogs/read"},
            ignore_config=IgnoreConfig(should_ignore_error=_not_found),
        ),
        list_config=ListConfig(
            parent_hydrate=list_network_watchers,
            hydrate=list_network_watcher_flow_logs,
            tags={"service": SERVICE, "action": "networkWatchers/flowLogs/read"},
        ),
        columns=azure_columns(
            [
                Column("name", ColumnType.STRING, "The friendly name that identifies the flow log."),
                Column("id", ColumnType.STRING, "Contains ID to identify a flow log uniquely."),
                Column(
                    "network_watcher_name",
                    ColumnType.STRING,
                    "The friendly name that identifies the network watcher.",
                    from_field("networkWatcherName"),
                ),
                Column("enabled", ColumnType.BOOL, "Indicates whether the flow log is enabled.", from_field("properties.enabled")),
                Column("etag", ColumnType.STRING, "An unique read-only string that changes whenever the resource is updated."),
                Column(
                    "provisioning_state",
                    ColumnType.STRING,
                    "The provisioning state of the flow log.",
                    from_field("properties.provisioningState"),
                ),
                Column("type", ColumnType.STRING, "The resource type of the flow log."),
                Column("file_type", ColumnType.STRING, "The file type of the flow log.", from_field("properties.format.type")),
                Column("version", ColumnType.INT, "The version (revision) of the flow log.", from_field("properties.format.version")),
                Column(
                    "retention_policy_days",
                    ColumnType.INT,
                    "The number of days to retain flow log records.",
                    from_field("properties.retentionPolicy.days"),
                ),
                Column(
                    "retention_policy_enabled",
                    ColumnType.BOOL,
                    "Flag to enable/disable retention.",
                    from_field("properties.retentionPolicy.enabled"),
                ),
                Column(
                    "storage_id",
                    ColumnType.STRING,
                    "The ID of the storage account which is used to store the flow log.",
                    from_field("properties.storageId"),
                ),
                Column(
                    "target_resource_guid",
                    ColumnType.STRING,
                    "The guid of network security group to which flow log will be applied.",
                    from_field("properties.targetResourceGuid"),
                ),
                Column(
                    "target_resource_id",
                    ColumnType.STRING,
                    "The ID of network security group to which flow log will be applied.",
                    from_field("properties.targetResourceId"),
                ),
                Column(
                    "traffic_analytics",
                    ColumnType.JSON,
                    "Defines the configuration of traffic analytics.",
                    from_field("properties.flowAnalyticsConfiguration.networkWatcherFlowAnalyticsConfiguration"),
                ),
            ]
            + _standard_columns()
        ),
    )


# =============================================================================
# Load Balancer
# =============================================================================


def list_load_balancers(d: QueryData, h: HydrateData) -> None:
    stream_list(d, d.client, f"{_provider_path(d)}/loadBalancers", API_VERSION)


def get_load_balancer(d: QueryData, h: HydrateData) -> dict[str, Any] | None:
    name = d.key_segment("name")
    resource_group = d.key_segment("resource_group")
    if not name or not resource_group:
        return None
    return _get_or_none(d, f"{_provider_path(d, resource_group)}/loadBalancers/{name}")


def table_azure_lb() -> Table:
    return Table(
        name="azure_lb",
        description="Azure Load Balancer",
        get_config=GetConfig(
            key_columns=KeyColumnSet.all(["name", "resource_group"]),
            hydrate=get_load_balancer,
            tags={"service": SERVICE, "action": "loadBalancers/read"},
            ignore_config=IgnoreConfig(should_ignore_error=_not_found),
        ),
        list_config=ListConfig(
            hydrate=list_load_balancers,
            tags={"service": SERVICE, "action": "loadBalancers/read"},
        ),
        columns=azure_columns(
            [
                Column("name", ColumnType.STRING, "The friendly name that identifies the load balancer."),
                Column("id", ColumnType.STRING, "The resource ID."),
                Column("etag", ColumnType.STRING, "A unique read-only string that changes whenever the resource is updated."),
                Column("type", ColumnType.STRING, "The resource type."),
                Column(
                    "provisioning_state",
                    ColumnType.STRING,
                    "The provisioning state of the load balancer resource.",
                    from_field("properties.provisioningState"),
                ),
                Column("sku_name", ColumnType.STRING, "Name of the load balancer SKU.", from_field("sku.name")),
                Column("sku_tier", ColumnType.STRING, "Tier of the load balancer SKU.", from_field("sku.tier")),
                Column(
                    "backend_address_pools",
                    ColumnType.JSON,
                    "Collection of backend address pools used by the load balancer.",
                    from_field("properties.backendAddressPools"),
                ),
                Column(
                    "frontend_ip_configurations",
                    ColumnType.JSON,
                    "Object representing the frontend IPs to be used for the load balancer.",
                    from_field("properties.frontendIPConfigurations"),
                ),
                Column(
                    "inbound_nat_rules",
                    ColumnType.JSON,
                    "Collection of inbound NAT rules used by the load balancer.",
                    from_field("properties.inboundNatRules"),
                ),
                Column(
                    "load_balancing_rules",
                    ColumnType.JSON,
                    "Object collection representing the load balancing rules of the load balancer.",
                    from_field("properties.loadBalancingRules"),
                ),
                Column(
                    "outbound_rules",
                    ColumnType.JSON,
                    "The outbound rules.",
                    from_field("properties.outboundRules"),
                ),
                Column("probes", ColumnType.JSON, "Collection of probe objects used in the load balancer.", from_field("properties.probes")),
            ]
            + _standard_columns()
        ),
    )


# =============================================================================
# Load Balancer Backend Address Pool
# =============================================================================


def list_lb_backend_address_pools(d: QueryData, h: HydrateData) -> None:
    load_balancer = h.item
    resource_group = _resource_group_of(load_balancer["id"])
    stream_list(
        d,
        d.client,
        f"{_provider_path(d, resource_group)}/loadBalancers/{load_balancer['name']}/backendAddressPools",
        API_VERSION,
    )


def get_lb_backend_address_pool(d: QueryData, h: HydrateData) -> dict[str, Any] | None:
    load_balancer_name = d.key_segment("load_balancer_name")
    name = d.key_segment("name")
    resource_group = d.key_segment("resource_group")
    if not load_balancer_name or not name or not resource_group:
        return None
    return _get_or_none(
        d, f"{_provider_path(d, resource_group)}/loadBalancers/{load_balancer_name}/backendAddressPools/{name}"
    )


def table_azure_lb_backend_address_pool() -> Table:
    return Table(
        name="azure_lb_backend_address_pool",
        description="Azure Load Balancer Backend Address Pool",
        get_config=GetConfig(
            key_columns=KeyColumnSet.all(["load_balancer_name", "name", "resource_group"]),
            hydrate=get_lb_backend_address_pool,
            tags={"service": SERVICE, "action": "loadBalancers/backendAddressPools/read"},
            ignore_config=IgnoreConfig(should_ignore_error=_not_found),
        ),
        list_config=ListConfig(
            parent_hydrate=list_load_balancers,
            hydrate=list_lb_backend_address_pools,
            tags={"service": SERVICE, "action": "loadBalancers/backendAddressPools/read"},
        ),
        columns=azure_columns(
            [
                Column("name", ColumnType.STRING, "The name of the resource that is unique within the set of backend address pools."),
                Column("id", ColumnType.STRING, "The resource ID."),
                Column(
                    "load_balancer_name",
                    ColumnType.STRING,
                    "The friendly name that identifies the load balancer.",
                    from_field("id").transform(resource_name_from_id),
                ),
                Column(
                    "provisioning_state",
                    ColumnType.STRING,
                    "The provisioning state of the backend address pool resource.",
                    from_field("properties.provisioningState"),
                ),
                Column(
                    "outbound_rule_id",
                    ColumnType.STRING,
                    "A reference to an outbound rule that uses this backend address pool.",
                    from_field("properties.outboundRule.id"),
                ),
                Column(
                    "backend_ip_configurations",
                    ColumnType.JSON,
                    "An array of references to IP addresses defined in network interfaces.",
                    from_field("properties.backendIPConfigurations"),
                ),
                Column(
                    "gateway_load_balancer_tunnel_interfaces",
                    ColumnType.JSON,
                    "An array of gateway load balancer tunnel interfaces.",
                    from_field("properties.tunnelInterfaces"),
                ),
                Column(
                    "load_balancer_backend_addresses",
                    ColumnType.JSON,
                    "An array of backend addresses.",
                    from_field("properties.loadBalancerBackendAddresses"),
                ),
                Column(
                    "load_balancing_rules",
                    ColumnType.JSON,
                    "An array of references to load balancing rules that use this backend address pool.",
                    from_field("properties.loadBalancingRules"),
                ),
                Column(
                    "outbound_rules",
                    ColumnType.JSON,
                    "An array of references to outbound rules that use this backend address pool.",
                    from_field("properties.outboundRules"),
                ),
                Column("etag", ColumnType.STRING, "A unique read-only string that changes whenever the resource is updated."),
                Column("type", ColumnType.STRING, "Type of the resource."),
                Column("title", ColumnType.STRING, COLUMN_DESCRIPTION_TITLE, from_field("name")),
                Column("akas", ColumnType.JSON, COLUMN_DESCRIPTION_AKAS, from_field("id").transform(id_to_akas)),
                Column(
                    "resource_group",
                    ColumnType.STRING,
                    COLUMN_DESCRIPTION_RESOURCE_GROUP,
                    from_field("id").transform(extract_resource_group_from_id),
                ),
            ]
        ),
    )
