# -*- coding: utf-8 -*-
"""
OpenTelemetry Meter 安装

将 CloudWatch 导出器注册到 OpenTelemetry SDK：
- MeterProvider 创建和管理
- Push 模式导出（PeriodicExportingMetricReader 定时调用导出器）
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader
from opentelemetry.sdk.resources import Resource

logger = logging.getLogger(__name__)


class MeterExporterBuilder(ABC):
    """
    Meter 导出器构建器基类

    所有导出器实现都需要继承此类。
    """

    @abstractmethod
    def build(self) -> MetricReader:
        """
        构建 MetricReader

        Returns:
            MetricReader 实例
        """
        pass


class PushExporterBuilder(MeterExporterBuilder):
    """
    Push 模式导出器构建器基类

    由 SDK 定时推送数据给导出器。
    """
    pass


class Meter:
    """
    Meter 管理器

    负责：
    - 创建和配置 MeterProvider
    - 管理导出器
    """

    def __init__(
        self,
        resource: Resource,
        push_exporter_builder: Optional[PushExporterBuilder] = None,
        set_global: bool = True,
    ):
        """
        初始化 Meter

        Args:
            resource: OpenTelemetry Resource
            push_exporter_builder: Push 导出器构建器
            set_global: 是否设置为全局 MeterProvider
        """
        self._resource = resource
        self._push_exporter_builder = push_exporter_builder
        self._set_global = set_global
        self._provider: Optional[MeterProvider] = None

    def install(self) -> MeterProvider:
        """
        安装 MeterProvider

        Returns:
            MeterProvider 实例
        """
        readers = []

        if self._push_exporter_builder:
            readers.append(self._push_exporter_builder.build())

        self._provider = MeterProvider(
            resource=self._resource,
            metric_readers=readers,
        )

        if self._set_global:
            metrics.set_meter_provider(self._provider)

        logger.info(
            "Meter installed: readers=%d, global=%s",
            len(readers),
            self._set_global,
        )

        return self._provider

    def shutdown(self) -> None:
        """关闭 MeterProvider（最后一次导出由 SDK 在关闭时触发）"""
        if self._provider:
            self._provider.shutdown()
            logger.info("Meter shutdown completed")

    @property
    def provider(self) -> Optional[MeterProvider]:
        """获取 MeterProvider"""
        return self._provider


def install_meter(
    resource: Resource,
    push_exporter_builder: Optional[PushExporterBuilder] = None,
) -> MeterProvider:
    """
    快捷函数：安装 Meter

    Args:
        resource: OpenTelemetry Resource
        push_exporter_builder: Push 导出器构建器

    Returns:
        MeterProvider 实例
    """
    meter = Meter(resource=resource, push_exporter_builder=push_exporter_builder)
    return meter.install()


def get_meter(name: str, version: str = "") -> metrics.Meter:
    """
    获取 Meter 实例

    示例:
        ```python
        meter = get_meter("my.module")
        counter = meter.create_counter("requests_total")
        counter.add(1, {"method": "GET"})
        ```
    """
    return metrics.get_meter(name=name, version=version)
