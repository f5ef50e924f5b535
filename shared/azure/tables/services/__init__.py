"""
shared/azure/tables/services - 서비스별 테이블 정의

모듈마다 List/Get/Hydrate 함수와 table_azure_*() 팩토리를 제공합니다.
"""

from .app_configuration import table_azure_app_configuration
from .authorization import table_azure_policy_assignment, table_azure_role_definition
from .compute import table_azure_compute_disk, table_azure_compute_disk_metric_read_ops_hourly
from .database import table_azure_mariadb_server
from .network import (
    table_azure_lb,
    table_azure_lb_backend_address_pool,
    table_azure_network_watcher,
    table_azure_network_watcher_flow_log,
)
from .resources import table_azure_subscription
from .security import table_azure_security_center, table_azure_security_center_auto_provisioning

__all__: list[str] = [
    "table_azure_app_configuration",
    "table_azure_compute_disk",
    "table_azure_compute_disk_metric_read_ops_hourly",
    "table_azure_lb",
    "table_azure_lb_backend_address_pool",
    "table_azure_mariadb_server",
    "table_azure_network_watcher",
    "table_azure_network_watcher_flow_log",
    "table_azure_policy_assignment",
    "table_azure_role_definition",
    "table_azure_security_center",
    "table_azure_security_center_auto_provisioning",
    "table_azure_subscription",
]
