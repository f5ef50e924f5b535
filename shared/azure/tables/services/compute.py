"""
shared/azure/tables/services/compute.py - Microsoft.Compute 테이블

Managed Disk 목록/조회와 디스크 읽기 IOPS 시간별 메트릭.
"""

from __future__ import annotations

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
    last_path_element,
)
from ..monitoring import list_monitor_metric_statistics, monitoring_metric_columns
from ..paging import stream_list

SERVICE = "Microsoft.Compute"
API_VERSION = "2023-04-02"


def _disks_path(d: QueryData, resource_group: str | None = None) -> str:
    base = f"/subscriptions/{d.client.subscription_id}"
    if resource_group:
        base += f"/resourceGroups/{resource_group}"
    return base + "/providers/Microsoft.Compute/disks"


# =============================================================================
# Disk
# =============================================================================


def list_compute_disks(d: QueryData, h: HydrateData) -> None:
    stream_list(d, d.client, _disks_path(d), API_VERSION)


def get_compute_disk(d: QueryData, h: HydrateData) -> dict[str, Any] | None:
    name = d.key_segment("name")
    resource_group = d.key_segment("resource_group")
    if not name or not resource_group:
        return None
    item = d.client.get(f"{_disks_path(d, resource_group)}/{name}", API_VERSION)
    return item if item.get("id") else None


def table_azure_compute_disk() -> Table:
    return Table(
        name="azure_compute_disk",
        description="Azure Compute Disk",
        get_config=GetConfig(
            key_columns=KeyColumnSet.all(["name", "resource_group"]),
            hydrate=get_compute_disk,
            tags={"service": SERVICE, "action": "disks/read"},
            ignore_config=IgnoreConfig(should_ignore_error=is_not_found_error(NOT_FOUND_CODES)),
        ),
        list_config=ListConfig(
            hydrate=list_compute_disks,
            tags={"service": SERVICE, "action": "disks/read"},
        ),
        columns=azure_columns(
            [
                Column("name", ColumnType.STRING, "The friendly name that identifies the disk."),
                Column("id", ColumnType.STRING, "The unique id identifying the resource in subscription."),
                Column("type", ColumnType.STRING, "The type of the resource in Azure."),
                Column(
                    "provisioning_state",
                    ColumnType.STRING,
                    "The disk provisioning state.",
                    from_field("properties.provisioningState"),
                ),
                Column("disk_state", ColumnType.STRING, "The state of the disk.", from_field("properties.diskState")),
                Column("disk_size_gb", ColumnType.INT, "The size of the disk in GB.", from_field("properties.diskSizeGB")),
                Column(
                    "disk_iops_read_write",
                    ColumnType.INT,
                    "The number of IOPS allowed for this disk.",
                    from_field("properties.diskIOPSReadWrite"),
                ),
                Column(
                    "disk_mbps_read_write",
                    ColumnType.INT,
                    "The bandwidth allowed for this disk in MBps.",
                    from_field("properties.diskMBpsReadWrite"),
                ),
                Column("os_type", ColumnType.STRING, "The Operating System type.", from_field("properties.osType")),
                Column("managed_by", ColumnType.STRING, "The ID of the VM the disk is attached to."),
                Column(
                    "network_access_policy",
                    ColumnType.STRING,
                    "Policy for accessing the disk via network.",
                    from_field("properties.networkAccessPolicy"),
                ),
                Column("sku_name", ColumnType.STRING, "The disk sku name.", from_field("sku.name")),
                Column("sku_tier", ColumnType.STRING, "The sku tier.", from_field("sku.tier")),
                Column(
                    "time_created",
                    ColumnType.TIMESTAMP,
                    "The time when the disk was created.",
                    from_field("properties.timeCreated"),
                ),
                Column("encryption", ColumnType.JSON, "The encryption settings of the disk.", from_field("properties.encryption")),
                Column("zones", ColumnType.JSON, "The logical zone list for the disk."),
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


# =============================================================================
# Disk metric: read operations (hourly)
# =============================================================================


def list_compute_disk_metric_read_ops_hourly(d: QueryData, h: HydrateData) -> None:
    list_monitor_metric_statistics(
        d,
        "HOURLY",
        "Microsoft.Compute/disks",
        "Composite Disk Read Operations/sec",
        h.item["id"],
    )


def table_azure_compute_disk_metric_read_ops_hourly() -> Table:
    return Table(
        name="azure_compute_disk_metric_read_ops_hourly",
        description="Azure Compute Disk Metrics - Read Ops (Hourly)",
        list_config=ListConfig(
            parent_hydrate=list_compute_disks,
            hydrate=list_compute_disk_metric_read_ops_hourly,
            tags={"service": "Microsoft.Insights", "action": "metrics/read"},
        ),
        columns=monitoring_metric_columns(
            [
                Column(
                    "name",
                    ColumnType.STRING,
                    "The name of the disk.",
                    from_field("dimension_value").transform(last_path_element),
                ),
            ]
        ),
    )
