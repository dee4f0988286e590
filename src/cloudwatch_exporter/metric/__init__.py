# -*- coding: utf-8 -*-
"""
OpenTelemetry Metric 模块

提供：
- CloudWatch 导出器（Push 模式）
- MeterProvider 管理
"""

from cloudwatch_exporter.metric.meter import (
    Meter,
    MeterExporterBuilder,
    PushExporterBuilder,
    install_meter,
    get_meter,
)

__all__ = [
    "Meter",
    "MeterExporterBuilder",
    "PushExporterBuilder",
    "install_meter",
    "get_meter",
]
