"""
shared/azure/tables/services/authorization.py - Microsoft.Authorization 테이블

Policy Assignment, Role Definition.
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
)

from ..common import (
    COLUMN_DESCRIPTION_AKAS,
    COLUMN_DESCRIPTION_TITLE,
    azure_columns,
    id_to_akas,
    is_not_found_error,
)
from ..paging import stream_list

logger = logging.getLogger(__name__)

SERVICE = "Microsoft.Authorization"
POLICY_API_VERSION = "2022-06-01"
ROLE_API_VERSION = "2022-04-01"

_not_found = is_not_found_error(["ResourceNotFound", "ResourceGroupNotFound"])


def _authorization_path(d: QueryData) -> str:
    return f"/subscriptions/{d.client.subscription_id}/providers/Microsoft.Authorization"


# =============================================================================
# Policy Assignment
# =============================================================================


def list_policy_assignments(d: QueryData, h: HydrateData) -> None:
    stream_list(d, d.client, f"{_authorization_path(d)}/policyAssignments", POLICY_API_VERSION)


def get_policy_assignment(d: QueryData, h: HydrateData) -> dict[str, Any] | None:
    assignment_id = d.key_value("id")
    # 리소스 ID만 허용 (전체 URL 불가)
    if not assignment_id.startswith("/"):
        return None
    item = d.client.get(assignment_id, POLICY_API_VERSION)
    return item if item.get("id") else None


def table_azure_policy_assignment() -> Table:
    return Table(
        name="azure_policy_assignment",
        description="Azure Policy Assignment",
        get_config=GetConfig(
            key_columns=KeyColumnSet.single("id"),
            hydrate=get_policy_assignment,
            tags={"service": SERVICE, "action": "policyAssignments/read"},
            ignore_config=IgnoreConfig(should_ignore_error=_not_found),
        ),
        list_config=ListConfig(
            hydrate=list_policy_assignments,
            tags={"service": SERVICE, "action": "policyAssignments/read"},
        ),
        columns=azure_columns(
            [
                Column("id", ColumnType.STRING, "The ID of the policy assignment."),
                Column("name", ColumnType.STRING, "The name of the policy assignment."),
                Column(
                    "display_name",
                    ColumnType.STRING,
                    "The display name of the policy assignment.",
                    from_field("properties.displayName"),
                ),
                Column(
                    "policy_definition_id",
                    ColumnType.STRING,
                    "The ID of the policy definition or policy set definition being assigned.",
                    from_field("properties.policyDefinitionId"),
                ),
                Column("description", ColumnType.STRING, "This message will be part of response in case of policy violation.", from_field("properties.description")),
                Column(
                    "enforcement_mode",
                    ColumnType.STRING,
                    "The policy assignment enforcement mode. Possible values are Default and DoNotEnforce.",
                    from_field("properties.enforcementMode"),
                ),
                Column("scope", ColumnType.STRING, "The scope for the policy assignment.", from_field("properties.scope")),
                Column("sku_name", ColumnType.STRING, "The name of the policy sku.", from_field("sku.name")),
                Column("sku_tier", ColumnType.STRING, "The policy sku tier.", from_field("sku.tier")),
                Column("type", ColumnType.STRING, "The type of the policy assignment."),
                Column("identity", ColumnType.JSON, "The managed identity associated with the policy assignment."),
                Column("metadata", ColumnType.JSON, "The policy assignment metadata.", from_field("properties.metadata")),
                Column("not_scopes", ColumnType.JSON, "The policy's excluded scopes.", from_field("properties.notScopes")),
                Column("parameters", ColumnType.JSON, "The parameter values for the assigned policy rule.", from_field("properties.parameters")),
                Column("title", ColumnType.STRING, COLUMN_DESCRIPTION_TITLE, from_field("name")),
                Column("akas", ColumnType.JSON, COLUMN_DESCRIPTION_AKAS, from_field("id").transform(id_to_akas)),
            ]
        ),
    )


# =============================================================================
# Role Definition
# =============================================================================


def list_role_definitions(d: QueryData, h: HydrateData) -> None:
    stream_list(d, d.client, f"{_authorization_path(d)}/roleDefinitions", ROLE_API_VERSION)


def get_role_definition(d: QueryData, h: HydrateData) -> dict[str, Any] | None:
    name = d.key_segment("name")
    if not name:
        return None
    item = d.client.get(f"{_authorization_path(d)}/roleDefinitions/{name}", ROLE_API_VERSION)
    return item if item.get("id") else None


def table_azure_role_definition() -> Table:
    return Table(
        name="azure_role_definition",
        description="Azure Role Definition",
        get_config=GetConfig(
            key_columns=KeyColumnSet.single("name"),
            hydrate=get_role_definition,
            tags={"service": SERVICE, "action": "roleDefinitions/read"},
            ignore_config=IgnoreConfig(should_ignore_error=_not_found),
        ),
        list_config=ListConfig(
            hydrate=list_role_definitions,
            tags={"service": SERVICE, "action": "roleDefinitions/read"},
        ),
        columns=azure_columns(
            [
                Column("name", ColumnType.STRING, "The friendly name that identifies the role definition."),
                Column("id", ColumnType.STRING, "Contains ID to identify a role definition uniquely."),
                Column("description", ColumnType.STRING, "The role definition description.", from_field("properties.description")),
                Column("role_name", ColumnType.STRING, "The name of the role definition.", from_field("properties.roleName")),
                Column("role_type", ColumnType.STRING, "The type of the role definition (BuiltInRole or CustomRole).", from_field("properties.type")),
                Column("type", ColumnType.STRING, "Contains the resource type."),
                Column(
                    "assignable_scopes",
                    ColumnType.JSON,
                    "A list of assignable scopes for which the role definition can be assigned.",
                    from_field("properties.assignableScopes"),
                ),
                Column(
                    "permissions",
                    ColumnType.JSON,
                    "A list of actions, which can be accessed.",
                    from_field("properties.permissions"),
                ),
                Column("title", ColumnType.STRING, COLUMN_DESCRIPTION_TITLE, from_field("properties.roleName")),
                Column("akas", ColumnType.JSON, COLUMN_DESCRIPTION_AKAS, from_field("id").transform(id_to_akas)),
            ]
        ),
    )
