# -*- coding: utf-8 -*-
"""
CloudWatch Metric 导出器（OpenTelemetry SDK 适配）

提供：
- OpenTelemetry Metric -> ViewData 转换
- MetricExporter 实现，每个 Metric 调用一次 CloudWatchExporter.export_view
- Push 模式构建器（PeriodicExportingMetricReader）
"""

import logging
from typing import Any, Dict, List, Optional

from opentelemetry.sdk.metrics import (
    Counter,
    Histogram as HistogramInstrument,
    ObservableCounter,
    ObservableGauge,
    ObservableUpDownCounter,
    UpDownCounter,
)
from opentelemetry.sdk.metrics.export import (
    AggregationTemporality,
    Gauge,
    Histogram,
    Metric,
    MetricExporter,
    MetricExportResult,
    MetricReader,
    MetricsData,
    PeriodicExportingMetricReader,
    Sum,
)

from cloudwatch_exporter.config import CloudWatchOptions
from cloudwatch_exporter.exporter import CloudWatchExporter
from cloudwatch_exporter.metric.meter import PushExporterBuilder
from cloudwatch_exporter.view import (
    AggregationKind,
    DistributionData,
    LastValueData,
    Row,
    SumData,
    UnknownData,
    ViewData,
    tags_from_attributes,
)

logger = logging.getLogger(__name__)

# CloudWatch 按统计周期聚合，计数类指标使用 Delta
DELTA_TEMPORALITY: Dict[type, AggregationTemporality] = {
    Counter: AggregationTemporality.DELTA,
    HistogramInstrument: AggregationTemporality.DELTA,
    ObservableCounter: AggregationTemporality.DELTA,
    UpDownCounter: AggregationTemporality.CUMULATIVE,
    ObservableUpDownCounter: AggregationTemporality.CUMULATIVE,
    ObservableGauge: AggregationTemporality.CUMULATIVE,
}


def view_data_from_metric(metric: Metric) -> ViewData:
    """
    将 OpenTelemetry Metric 转换为 ViewData

    - Sum -> SumData
    - Gauge -> LastValueData
    - Histogram -> DistributionData
    - 其他（ExponentialHistogram 等）-> UnknownData
    """
    data = metric.data
    rows: List[Row] = []

    if isinstance(data, Sum):
        aggregation = AggregationKind.SUM
        for dp in data.data_points:
            rows.append(Row(data=SumData(value=dp.value), tags=tags_from_attributes(dp.attributes)))
    elif isinstance(data, Gauge):
        aggregation = AggregationKind.LAST_VALUE
        for dp in data.data_points:
            rows.append(
                Row(data=LastValueData(value=dp.value), tags=tags_from_attributes(dp.attributes))
            )
    elif isinstance(data, Histogram):
        aggregation = AggregationKind.DISTRIBUTION
        for dp in data.data_points:
            distribution = DistributionData(
                count=dp.count,
                sum=dp.sum,
                min=dp.min,
                max=dp.max,
                bucket_bounds=tuple(dp.explicit_bounds),
                bucket_counts=tuple(dp.bucket_counts),
            )
            rows.append(Row(data=distribution, tags=tags_from_attributes(dp.attributes)))
    else:
        aggregation = AggregationKind.UNKNOWN
        kind_name = type(data).__name__
        for dp in getattr(data, "data_points", ()):
            rows.append(
                Row(data=UnknownData(kind_name=kind_name), tags=tags_from_attributes(dp.attributes))
            )

    return ViewData(
        name=metric.name,
        rows=tuple(rows),
        aggregation=aggregation,
        description=metric.description or "",
        unit=metric.unit or "",
    )


def view_data_from_metrics_data(metrics_data: MetricsData) -> List[ViewData]:
    """展开 MetricsData 中的全部 Metric"""
    views: List[ViewData] = []
    for resource_metrics in metrics_data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                views.append(view_data_from_metric(metric))
    return views


class CloudWatchMetricExporter(MetricExporter):
    """
    OpenTelemetry MetricExporter 实现

    由 PeriodicExportingMetricReader 定时调用 export，每个 Metric 发送一次
    PutMetricData（超过单次上限时拆分）。错误已经交给 on_error，
    本类只根据是否出错返回 SUCCESS/FAILURE。
    """

    def __init__(
        self,
        exporter: CloudWatchExporter,
        preferred_temporality: Optional[Dict[type, AggregationTemporality]] = None,
    ):
        super().__init__(preferred_temporality=preferred_temporality or DELTA_TEMPORALITY)
        self._exporter = exporter

    @property
    def exporter(self) -> CloudWatchExporter:
        return self._exporter

    def export(
        self,
        metrics_data: MetricsData,
        timeout_millis: float = 10_000,
        **kwargs: Any,
    ) -> MetricExportResult:
        failed = False
        for view_data in view_data_from_metrics_data(metrics_data):
            if self._exporter.export_view(view_data):
                failed = True

        if failed:
            return MetricExportResult.FAILURE
        return MetricExportResult.SUCCESS

    def force_flush(self, timeout_millis: float = 10_000) -> bool:
        # 没有内部缓冲
        return True

    def shutdown(self, timeout_millis: float = 30_000, **kwargs: Any) -> None:
        logger.debug("CloudWatch metric exporter shutdown")


class CloudWatchMetricExporterBuilder(PushExporterBuilder):
    """
    CloudWatch Metric 导出器构建器

    示例:
        ```python
        builder = CloudWatchMetricExporterBuilder(
            CloudWatchOptions(namespace="demo", use_shared_config=True),
            export_interval_ms=60000,
        )
        reader = builder.build()
        ```
    """

    def __init__(
        self,
        options: CloudWatchOptions,
        export_interval_ms: int = 60000,
        export_timeout_ms: int = 30000,
        client: Optional[Any] = None,
    ):
        """
        初始化 CloudWatch 导出器构建器

        Args:
            options: CloudWatch 配置
            export_interval_ms: 导出间隔（毫秒）
            export_timeout_ms: 单次导出超时（毫秒）
            client: 可选，已创建的 CloudWatch 客户端
        """
        self._options = options
        self._export_interval_ms = export_interval_ms
        self._export_timeout_ms = export_timeout_ms
        self._client = client

    def build(self) -> MetricReader:
        """构建 MetricReader"""
        exporter = CloudWatchMetricExporter(
            CloudWatchExporter(self._options, client=self._client)
        )

        logger.info(
            "CloudWatch Metric exporter created: namespace=%s, export_interval=%dms",
            self._options.namespace,
            self._export_interval_ms,
        )

        return PeriodicExportingMetricReader(
            exporter=exporter,
            export_interval_millis=self._export_interval_ms,
            export_timeout_millis=self._export_timeout_ms,
        )
