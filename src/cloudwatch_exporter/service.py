# -*- coding: utf-8 -*-
"""
CloudWatch Metric 服务类

提供：
- 统一的初始化入口
- 配置驱动的导出器安装
- 支持 YAML 配置文件
"""

import logging
from typing import Any, Optional

from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource

from cloudwatch_exporter.config import (
    ExporterConfig,
    load_config,
    load_config_from_file,
)
from cloudwatch_exporter.errors import ConfigurationError
from cloudwatch_exporter.metric.cloudwatch.exporter import CloudWatchMetricExporterBuilder
from cloudwatch_exporter.metric.meter import Meter

logger = logging.getLogger(__name__)


class CloudWatchMetricService:
    """
    CloudWatch Metric 服务

    示例:
        ```python
        # 从 YAML 配置文件创建
        service = CloudWatchMetricService.from_config_file("config.yaml")
        service.install()

        # 使用 Builder
        config = (
            ExporterConfigBuilder()
            .with_resource(service_name="my-service")
            .with_cloudwatch(namespace="demo", use_shared_config=True)
            .build()
        )
        service = CloudWatchMetricService(config)
        service.install()
        ```
    """

    def __init__(self, config: ExporterConfig, client: Optional[Any] = None):
        """
        初始化服务

        Args:
            config: ExporterConfig 配置对象
            client: 可选，已创建的 CloudWatch 客户端
        """
        self._config = config
        self._client = client
        self._meter: Optional[Meter] = None
        self._meter_provider: Optional[MeterProvider] = None

    @classmethod
    def from_config_file(cls, config_file: str) -> "CloudWatchMetricService":
        """从 YAML 配置文件创建"""
        return cls(load_config_from_file(config_file))

    @classmethod
    def from_config_dict(cls, config_dict: dict) -> "CloudWatchMetricService":
        """从配置字典创建"""
        return cls(load_config(config_dict=config_dict))

    def _create_resource(self) -> Resource:
        resource_config = self._config.resource
        attributes = {"service.name": resource_config.service_name}
        if resource_config.service_version:
            attributes["service.version"] = resource_config.service_version
        attributes.update(resource_config.attributes)
        return Resource.create(attributes)

    def install(self, set_global: bool = True) -> Optional[MeterProvider]:
        """
        安装 CloudWatch 导出器

        Args:
            set_global: 是否设置为全局 MeterProvider

        Returns:
            MeterProvider 实例（如果启用）

        Raises:
            ConfigurationError: CloudWatch 配置或采集间隔不合法
        """
        metric_config = self._config.metric
        if not metric_config.enabled:
            logger.info("CloudWatch metric exporter is disabled")
            return None

        export_interval_ms = int(metric_config.collect_interval_seconds * 1000)
        export_timeout_ms = int(metric_config.timeout_seconds * 1000)
        if export_interval_ms <= 0:
            raise ConfigurationError(
                f"invalid collect_interval {metric_config.collect_interval!r}: "
                "must be at least 1ms"
            )
        if export_timeout_ms <= 0:
            raise ConfigurationError(
                f"invalid timeout {metric_config.timeout!r}: must be at least 1ms"
            )

        builder = CloudWatchMetricExporterBuilder(
            metric_config.cloudwatch,
            export_interval_ms=export_interval_ms,
            export_timeout_ms=export_timeout_ms,
            client=self._client,
        )

        self._meter = Meter(
            resource=self._create_resource(),
            push_exporter_builder=builder,
            set_global=set_global,
        )
        self._meter_provider = self._meter.install()

        logger.info(
            "CloudWatch metric service installed: namespace=%s, collect_interval=%ss",
            metric_config.cloudwatch.namespace,
            metric_config.collect_interval_seconds,
        )

        return self._meter_provider

    def shutdown(self) -> None:
        """关闭服务"""
        if self._meter:
            self._meter.shutdown()
        logger.info("CloudWatch metric service shutdown completed")

    @property
    def config(self) -> ExporterConfig:
        """获取配置"""
        return self._config

    @property
    def meter_provider(self) -> Optional[MeterProvider]:
        """获取 MeterProvider"""
        return self._meter_provider
