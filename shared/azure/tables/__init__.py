"""
shared/azure/tables - Azure 테이블 플러그인

Example:
    from core.plugin import QueryRunner
    from shared.azure.tables import plugin

    runner = QueryRunner(plugin())
    print(plugin().table_names())
"""

from core.plugin import Plugin

from .services import (
    table_azure_app_configuration,
    table_azure_compute_disk,
    table_azure_compute_disk_metric_read_ops_hourly,
    table_azure_lb,
    table_azure_lb_backend_address_pool,
    table_azure_mariadb_server,
    table_azure_network_watcher,
    table_azure_network_watcher_flow_log,
    table_azure_policy_assignment,
    table_azure_role_definition,
    table_azure_security_center,
    table_azure_security_center_auto_provisioning,
    table_azure_subscription,
)

PLUGIN_NAME = "azure"

TABLE_MAP = {
    "azure_app_configuration": table_azure_app_configuration,
    "azure_compute_disk": table_azure_compute_disk,
    "azure_compute_disk_metric_read_ops_hourly": table_azure_compute_disk_metric_read_ops_hourly,
    "azure_lb": table_azure_lb,
    "azure_lb_backend_address_pool": table_azure_lb_backend_address_pool,
    "azure_mariadb_server": table_azure_mariadb_server,
    "azure_network_watcher": table_azure_network_watcher,
    "azure_network_watcher_flow_log": table_azure_network_watcher_flow_log,
    "azure_policy_assignment": table_azure_policy_assignment,
    "azure_role_definition": table_azure_role_definition,
    "azure_security_center": table_azure_security_center,
    "azure_security_center_auto_provisioning": table_azure_security_center_auto_provisioning,
    "azure_subscription": table_azure_subscription,
}


def plugin() -> Plugin:
    """Azure 테이블 레지스트리"""
    return Plugin(name=PLUGIN_NAME, table_map=dict(TABLE_MAP))


__all__ = ["PLUGIN_NAME", "TABLE_MAP", "plugin"]
