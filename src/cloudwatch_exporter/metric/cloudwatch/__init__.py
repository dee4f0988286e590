# -*- coding: utf-8 -*-
"""
CloudWatch Metric 导出模块
"""

from cloudwatch_exporter.metric.cloudwatch.exporter import (
    CloudWatchMetricExporter,
    CloudWatchMetricExporterBuilder,
    view_data_from_metric,
    view_data_from_metrics_data,
)

__all__ = [
    "CloudWatchMetricExporter",
    "CloudWatchMetricExporterBuilder",
    "view_data_from_metric",
    "view_data_from_metrics_data",
]
