"""
shared/azure/tables/monitoring.py - Azure Monitor 메트릭 테이블 공통

리소스 하나의 메트릭 통계를 Azure Monitor(Microsoft.Insights/metrics)에서
조회해 데이터 포인트마다 한 행씩 스트리밍합니다.

집계 단위별 조회 범위:
    - HOURLY: PT1H 간격, 최근 60일
    - DAILY: P1D 간격, 최근 1년
    - 그 외(5분 등): PT1M 간격, 최근 5일

Example:
    def list_disk_read_ops_hourly(d: QueryData, h: HydrateData) -> None:
        list_monitor_metric_statistics(
            d, "HOURLY", "Microsoft.Compute/disks",
            "Composite Disk Read Operations/sec", h.item["id"],
        )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from core.plugin import Column, ColumnType, QueryData, from_field
from core.plugin.transform import TransformData

from .common import COLUMN_DESCRIPTION_RESOURCE_GROUP, azure_columns, extract_resource_group_from_id

logger = logging.getLogger(__name__)

METRICS_API_VERSION = "2018-01-01"
METRIC_AGGREGATIONS = "average,count,maximum,minimum,total"

# 집계 단위 → (interval, 조회 기간)
GRANULARITY_WINDOWS: dict[str, tuple[str, timedelta]] = {
    "HOURLY": ("PT1H", timedelta(days=60)),
    "DAILY": ("P1D", timedelta(days=365)),
}
DEFAULT_WINDOW: tuple[str, timedelta] = ("PT1M", timedelta(days=5))


@dataclass
class MetricRow:
    """메트릭 데이터 포인트 한 건

    Attributes:
        dimension_value: 메트릭 대상 리소스 ID
        timestamp: 데이터 포인트 시각 (ISO-8601)
        unit: 메트릭 단위 (예: "CountPerSecond")
    """

    dimension_value: str
    timestamp: str | None
    maximum: float | None = None
    minimum: float | None = None
    average: float | None = None
    sum: float | None = None
    sample_count: float | None = None
    unit: str | None = None
    resource_group: str | None = None


def metric_window(granularity: str, now: datetime | None = None) -> tuple[str, str]:
    """집계 단위 → (interval, "start/end" timespan)"""
    interval, period = GRANULARITY_WINDOWS.get(granularity.upper(), DEFAULT_WINDOW)
    end = (now or datetime.now(timezone.utc)).astimezone(timezone.utc).replace(microsecond=0)
    start = end - period
    fmt = "%Y-%m-%dT%H:%M:%SZ"
    return interval, f"{start.strftime(fmt)}/{end.strftime(fmt)}"


def list_monitor_metric_statistics(
    d: QueryData,
    granularity: str,
    namespace: str,
    metric_name: str,
    resource_id: str,
    now: datetime | None = None,
) -> None:
    """리소스 메트릭 통계 조회 후 데이터 포인트별 스트리밍

    Args:
        d: 쿼리 컨텍스트
        granularity: "HOURLY" | "DAILY" | 그 외
        namespace: 메트릭 네임스페이스 (예: "Microsoft.Compute/disks")
        metric_name: 메트릭 이름
        resource_id: 대상 리소스 ID
        now: 기준 시각 (테스트용)
    """
    interval, timespan = metric_window(granularity, now)
    body = d.client.get(
        f"{resource_id}/providers/Microsoft.Insights/metrics",
        METRICS_API_VERSION,
        params={
            "metricnames": metric_name,
            "metricnamespace": namespace,
            "aggregation": METRIC_AGGREGATIONS,
            "timespan": timespan,
            "interval": interval,
        },
    )

    resource_group = extract_resource_group_from_id(TransformData(hydrate_item=None, column_name="", value=resource_id))
    for metric in body.get("value") or []:
        unit = metric.get("unit")
        for series in metric.get("timeseries") or []:
            for point in series.get("data") or []:
                d.stream_list_item(_to_row(point, resource_id, unit, resource_group))
                if d.rows_remaining() == 0:
                    return

    logger.debug(f"[{d.table.name}] {metric_name} 메트릭 조회 완료 ({resource_id})")


def _to_row(point: dict[str, Any], resource_id: str, unit: str | None, resource_group: str | None) -> MetricRow:
    return MetricRow(
        dimension_value=resource_id,
        timestamp=point.get("timeStamp"),
        maximum=point.get("maximum"),
        minimum=point.get("minimum"),
        average=point.get("average"),
        sum=point.get("total"),
        sample_count=point.get("count"),
        unit=unit,
        resource_group=resource_group,
    )


def monitoring_metric_columns(columns: list[Column]) -> list[Column]:
    """메트릭 테이블 공통 컬럼 추가"""
    return azure_columns(
        columns
        + [
            Column("maximum", ColumnType.DOUBLE, "The maximum metric value for the data point.", from_field("maximum")),
            Column("minimum", ColumnType.DOUBLE, "The minimum metric value for the data point.", from_field("minimum")),
            Column("average", ColumnType.DOUBLE, "The average of the metric values that correspond to the data point.", from_field("average")),
            Column("sample_count", ColumnType.DOUBLE, "The number of metric values that contributed to the aggregate value of this data point.", from_field("sample_count")),
            Column("sum", ColumnType.DOUBLE, "The sum of the metric values for the data point.", from_field("sum")),
            Column("timestamp", ColumnType.TIMESTAMP, "The time stamp used for the data point.", from_field("timestamp")),
            Column("unit", ColumnType.STRING, "The units in which the metric value is reported.", from_field("unit")),
            Column("resource_group", ColumnType.STRING, COLUMN_DESCRIPTION_RESOURCE_GROUP, from_field("resource_group")),
        ]
    )
