"""
shared/azure/tables/services/database.py - MariaDB 서버 테이블

없는 서버를 이름/리소스 그룹으로 조회하면 (ResourceNotFound 등) 빈 결과를 반환합니다.
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
)
from ..paging import stream_list

SERVICE = "Microsoft.DBforMariaDB"
API_VERSION = "2018-06-01"


def _servers_path(d: QueryData, resource_group: str | None = None) -> str:
    base = f"/subscriptions/{d.client.subscription_id}"
    if resource_group:
        base += f"/resourceGroups/{resource_group}"
    return base + "/providers/Microsoft.DBforMariaDB/servers"


def list_mariadb_servers(d: QueryData, h: HydrateData) -> None:
    stream_list(d, d.client, _servers_path(d), API_VERSION)


def get_mariadb_server(d: QueryData, h: HydrateData) -> dict[str, Any] | None:
    name = d.key_segment("name")
    resource_group = d.key_segment("resource_group")
    if not name or not resource_group:
        return None
    item = d.client.get(f"{_servers_path(d, resource_group)}/{name}", API_VERSION)
    return item if item.get("id") else None


def table_azure_mariadb_server() -> Table:
    return Table(
        name="azure_mariadb_server",
        description="Azure MariaDB Server",
        get_config=GetConfig(
            key_columns=KeyColumnSet.all(["name", "resource_group"]),
            hydrate=get_mariadb_server,
            tags={"service": SERVICE, "action": "servers/read"},
            ignore_config=IgnoreConfig(should_ignore_error=is_not_found_error(NOT_FOUND_CODES)),
        ),
        list_config=ListConfig(
            hydrate=list_mariadb_servers,
            tags={"service": SERVICE, "action": "servers/read"},
        ),
        columns=azure_columns(
            [
                Column("name", ColumnType.STRING, "The friendly name that identifies the server."),
                Column("id", ColumnType.STRING, "Contains ID to identify a server uniquely."),
                Column("type", ColumnType.STRING, "The resource type of the server."),
                Column(
                    "fully_qualified_domain_name",
                    ColumnType.STRING,
                    "The fully qualified domain name of the server.",
                    from_field("properties.fullyQualifiedDomainName"),
                ),
                Column(
                    "user_visible_state",
                    ColumnType.STRING,
                    "A state of a server that is visible to user.",
                    from_field("properties.userVisibleState"),
                ),
                Column("version", ColumnType.STRING, "Specifies the server version.", from_field("properties.version")),
                Column(
                    "administrator_login",
                    ColumnType.STRING,
                    "The administrator's login name of the server.",
                    from_field("properties.administratorLogin"),
                ),
                Column(
                    "ssl_enforcement",
                    ColumnType.STRING,
                    "Enable ssl enforcement or not when connect to server.",
                    from_field("properties.sslEnforcement"),
                ),
                Column(
                    "minimal_tls_version",
                    ColumnType.STRING,
                    "Enforce a minimal tls version for the server.",
                    from_field("properties.minimalTlsVersion"),
                ),
                Column(
                    "public_network_access",
                    ColumnType.STRING,
                    "Whether or not public network access is allowed for this server.",
                    from_field("properties.publicNetworkAccess"),
                ),
                Column(
                    "backup_retention_days",
                    ColumnType.INT,
                    "Backup retention days for the server.",
                    from_field("properties.storageProfile.backupRetentionDays"),
                ),
                Column(
                    "geo_redundant_backup_enabled",
                    ColumnType.STRING,
                    "Indicates whether geo-redundant backup is enabled.",
                    from_field("properties.storageProfile.geoRedundantBackup"),
                ),
                Column(
                    "storage_mb",
                    ColumnType.INT,
                    "The max storage allowed for a server.",
                    from_field("properties.storageProfile.storageMB"),
                ),
                Column("sku_name", ColumnType.STRING, "The name of the sku.", from_field("sku.name")),
                Column("sku_tier", ColumnType.STRING, "The tier of the particular SKU.", from_field("sku.tier")),
                Column("sku_capacity", ColumnType.INT, "The scale up/out capacity of the particular SKU.", from_field("sku.capacity")),
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
