"""
tests/shared/azure/tables/test_azure_monitoring.py - Azure Monitor 메트릭 공통 테스트
"""

from datetime import datetime, timezone

from conftest import FakeArmClient

from core.config import ConnectionConfig
from core.plugin import QueryData, Table
from shared.azure.tables.monitoring import (
    METRIC_AGGREGATIONS,
    MetricRow,
    list_monitor_metric_statistics,
    metric_window,
    monitoring_metric_columns,
)

DISK_ID = "/subscriptions/sub-1/resourceGroups/RG-A/providers/Microsoft.Compute/disks/disk-1"
METRICS_PATH = f"{DISK_ID}/providers/Microsoft.Insights/metrics"
NOW = datetime(2024, 3, 1, 12, 30, 15, 999, tzinfo=timezone.utc)


def _metrics_body(points):
    return {
        "value": [
            {
                "name": {"value": "Composite Disk Read Operations/sec"},
                "unit": "CountPerSecond",
                "timeseries": [{"data": points}],
            }
        ]
    }


def _query(client, limit=None):
    rows = []

    def sink(item):
        rows.append(item)
        d.record_row()

    d = QueryData(
        table=Table("azure_compute_disk_metric_read_ops_hourly", "test", []),
        connection=ConnectionConfig(name="test"),
        client=client,
        limit=limit,
        sink=sink,
    )
    return d, rows


class TestMetricWindow:
    """집계 단위별 조회 범위"""

    def test_hourly(self):
        assert metric_window("HOURLY", NOW) == ("PT1H", "2024-01-01T12:30:15Z/2024-03-01T12:30:15Z")

    def test_daily(self):
        interval, timespan = metric_window("daily", NOW)

        assert interval == "P1D"
        assert timespan.startswith("2023-03-02T12:30:15Z/")

    def test_default(self):
        interval, timespan = metric_window("FIVE_MINUTES", NOW)

        assert interval == "PT1M"
        assert timespan == "2024-02-25T12:30:15Z/2024-03-01T12:30:15Z"


class TestListMonitorMetricStatistics:
    """메트릭 데이터 포인트 스트리밍"""

    def test_request_params(self):
        client = FakeArmClient(resources={METRICS_PATH: _metrics_body([])})
        d, _ = _query(client)

        list_monitor_metric_statistics(d, "HOURLY", "Microsoft.Compute/disks", "Composite Disk Read Operations/sec", DISK_ID, now=NOW)

        assert client.calls == [METRICS_PATH]
        params = client.params[0]
        assert params["metricnames"] == "Composite Disk Read Operations/sec"
        assert params["metricnamespace"] == "Microsoft.Compute/disks"
        assert params["aggregation"] == METRIC_AGGREGATIONS
        assert params["interval"] == "PT1H"

    def test_rows(self):
        client = FakeArmClient(
            resources={
                METRICS_PATH: _metrics_body(
                    [
                        {"timeStamp": "2024-03-01T10:00:00Z", "average": 1.5, "maximum": 3.0, "minimum": 0.0, "total": 90.0, "count": 60},
                        {"timeStamp": "2024-03-01T11:00:00Z", "average": 2.0},
                    ]
                )
            }
        )
        d, rows = _query(client)

        list_monitor_metric_statistics(d, "HOURLY", "Microsoft.Compute/disks", "m", DISK_ID, now=NOW)

        assert len(rows) == 2
        first = rows[0]
        assert isinstance(first, MetricRow)
        assert first.dimension_value == DISK_ID
        assert first.sum == 90.0
        assert first.sample_count == 60
        assert first.unit == "CountPerSecond"
        assert first.resource_group == "rg-a"
        assert rows[1].maximum is None

    def test_budget(self):
        points = [{"timeStamp": f"2024-03-01T0{i}:00:00Z", "average": float(i)} for i in range(5)]
        client = FakeArmClient(resources={METRICS_PATH: _metrics_body(points)})
        d, rows = _query(client, limit=2)

        list_monitor_metric_statistics(d, "HOURLY", "Microsoft.Compute/disks", "m", DISK_ID, now=NOW)

        assert len(rows) == 2

    def test_no_metrics(self):
        client = FakeArmClient(resources={METRICS_PATH: {}})
        d, rows = _query(client)

        list_monitor_metric_statistics(d, "DAILY", "Microsoft.Compute/disks", "m", DISK_ID, now=NOW)

        assert rows == []


class TestMonitoringMetricColumns:
    def test_columns(self):
        names = [c.name for c in monitoring_metric_columns([])]

        assert names[:8] == ["maximum", "minimum", "average", "sample_count", "sum", "timestamp", "unit", "resource_group"]
        assert names[-2:] == ["cloud_environment", "subscription_id"]
