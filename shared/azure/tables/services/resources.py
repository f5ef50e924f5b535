"""
shared/azure/tables/services/resources.py - 구독 테이블

연결된 구독 자체를 한 행으로 반환합니다.
"""

from __future__ import annotations

from core.plugin import (
    Column,
    ColumnType,
    HydrateData,
    ListConfig,
    QueryData,
    Table,
    from_field,
    from_value,
)

from ..common import (
    COLUMN_DESCRIPTION_AKAS,
    COLUMN_DESCRIPTION_CLOUD_ENVIRONMENT,
    COLUMN_DESCRIPTION_TAGS,
    COLUMN_DESCRIPTION_TITLE,
    get_cloud_environment,
    id_to_akas,
)

API_VERSION = "2022-12-01"


def list_subscription(d: QueryData, h: HydrateData) -> None:
    subscription = d.client.get(f"/subscriptions/{d.client.subscription_id}", API_VERSION)
    d.stream_list_item(subscription)


def table_azure_subscription() -> Table:
    return Table(
        name="azure_subscription",
        description="Azure Subscription",
        list_config=ListConfig(
            hydrate=list_subscription,
            tags={"service": "Microsoft.Resources", "action": "subscriptions/read"},
        ),
        columns=[
            Column("id", ColumnType.STRING, "The fully qualified ID for the subscription."),
            Column("subscription_id", ColumnType.STRING, "The subscription ID."),
            Column("display_name", ColumnType.STRING, "A friendly name that identifies a subscription."),
            Column("tenant_id", ColumnType.STRING, "The subscription tenant ID."),
            Column("state", ColumnType.STRING, "The subscription state. Possible values are Enabled, Warned, PastDue, Disabled, and Deleted."),
            Column("authorization_source", ColumnType.STRING, "The authorization source of the request."),
            Column("managed_by_tenants", ColumnType.JSON, "An array containing the tenants managing the subscription."),
            Column("subscription_policies", ColumnType.JSON, "The subscription policies."),
            Column("title", ColumnType.STRING, COLUMN_DESCRIPTION_TITLE, from_field("displayName")),
            Column("tags", ColumnType.JSON, COLUMN_DESCRIPTION_TAGS),
            Column("akas", ColumnType.JSON, COLUMN_DESCRIPTION_AKAS, from_field("id").transform(id_to_akas)),
            Column(
                "cloud_environment",
                ColumnType.STRING,
                COLUMN_DESCRIPTION_CLOUD_ENVIRONMENT,
                transform=from_value(),
                hydrate=get_cloud_environment,
            ),
        ],
    )
