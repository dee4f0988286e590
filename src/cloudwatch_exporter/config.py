# -*- coding: utf-8 -*-
"""
CloudWatch 导出器配置模块

提供配置定义，支持 YAML 文件加载和环境变量覆盖。
"""

import os
import re
from typing import Any, Callable, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from cloudwatch_exporter.errors import ConfigurationError

# PutMetricData 单次请求最多 1000 个 MetricDatum
MAX_RECORDS_PER_REQUEST = 1000

ENV_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
ENV_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
ENV_SESSION_TOKEN = "AWS_SESSION_TOKEN"


def parse_duration(value: Union[str, int, float]) -> float:
    """
    解析时间字符串为秒数

    支持格式：
    - 纯数字：直接作为秒数
    - "30s"：30 秒
    - "5m"：5 分钟
    - "1h"：1 小时
    - "1h30m"：1 小时 30 分钟
    - "100ms"：100 毫秒

    Args:
        value: 时间值

    Returns:
        秒数（float）
    """
    if isinstance(value, (int, float)):
        return float(value)

    if not isinstance(value, str):
        return 0.0

    value = value.strip()
    if not value:
        return 0.0

    # 纯数字
    if value.replace(".", "", 1).isdigit():
        return float(value)

    units = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001, "us": 0.000001}
    matches = re.findall(r"(\d+(?:\.\d+)?)\s*(ms|us|h|m|s)", value, re.IGNORECASE)
    if not matches:
        return 0.0

    return sum(float(number) * units[unit.lower()] for number, unit in matches)


class CloudWatchOptions(BaseModel):
    """
    CloudWatch 导出器配置

    use_shared_config 与 use_env_credentials 必须且只能选择一个：
    - use_shared_config：从 ~/.aws/credentials 和 ~/.aws/config 加载凭证和配置
    - use_env_credentials：从 AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY 加载凭证，
      此时必须指定 region
    """
    model_config = ConfigDict(frozen=True)

    namespace: str = Field(default="", description="CloudWatch 命名空间")
    on_error: Optional[Callable[[Exception], Any]] = Field(
        default=None,
        exclude=True,
        description="导出失败时的回调",
    )
    use_shared_config: bool = Field(default=False, description="使用共享配置文件")
    use_env_credentials: bool = Field(default=False, description="使用环境变量凭证")
    region: str = Field(default="", description="AWS 区域")
    profile_name: Optional[str] = Field(default=None, description="共享配置中的 profile")
    endpoint_url: Optional[str] = Field(default=None, description="自定义 CloudWatch 端点")
    max_records_per_request: int = Field(
        default=MAX_RECORDS_PER_REQUEST,
        ge=1,
        le=MAX_RECORDS_PER_REQUEST,
        description="单次 PutMetricData 最大记录数",
    )

    def validate_options(self) -> None:
        """
        校验配置

        Raises:
            ConfigurationError: 配置不合法
        """
        if not self.namespace:
            raise ConfigurationError("namespace must be specified")

        if not self.use_shared_config and not self.use_env_credentials:
            raise ConfigurationError(
                "no credential source specified: "
                "one of use_shared_config, use_env_credentials must be set"
            )
        if self.use_shared_config and self.use_env_credentials:
            raise ConfigurationError(
                "use_shared_config and use_env_credentials are mutually exclusive"
            )

        if self.use_env_credentials and not self.region:
            raise ConfigurationError("region must be specified when use_env_credentials is set")


class ResourceConfig(BaseModel):
    """Resource 资源配置"""
    service_name: str = Field(default="unknown-service", description="服务名称")
    service_version: str = Field(default="", description="服务版本")
    attributes: Dict[str, str] = Field(default_factory=dict, description="自定义属性")


class MetricConfig(BaseModel):
    """Metric 配置"""
    enabled: bool = Field(default=False, description="是否启用 Metric")
    collect_interval: str = Field(default="60s", description="采集间隔")
    timeout: str = Field(default="30s", description="单次导出超时时间")
    cloudwatch: CloudWatchOptions = Field(
        default_factory=CloudWatchOptions,
        description="CloudWatch 配置",
    )

    @field_validator("collect_interval", "timeout", mode="before")
    @classmethod
    def check_duration(cls, v):
        """时间字符串必须能解析为正数秒"""
        if parse_duration(v) <= 0:
            raise ValueError(f"invalid duration {v!r}, expected a positive value such as '60s'")
        return str(v)

    @property
    def collect_interval_seconds(self) -> float:
        """获取采集间隔秒数"""
        return parse_duration(self.collect_interval)

    @property
    def timeout_seconds(self) -> float:
        """获取超时秒数"""
        return parse_duration(self.timeout)


class ExporterConfig(BaseModel):
    """导出器完整配置"""
    metric: MetricConfig = Field(default_factory=MetricConfig, description="Metric 配置")
    resource: ResourceConfig = Field(default_factory=ResourceConfig, description="Resource 配置")


def load_config(
    config_file: Optional[str] = None,
    config_dict: Optional[Dict[str, Any]] = None,
    env_prefix: str = "",
) -> ExporterConfig:
    """
    加载导出器配置

    优先级：环境变量 > config_dict > config_file > 默认值

    Args:
        config_file: YAML 配置文件路径
        config_dict: 配置字典
        env_prefix: 环境变量前缀

    Returns:
        ExporterConfig 实例
    """
    data: Dict[str, Any] = {}

    # 1. 从文件加载
    if config_file:
        if not os.path.exists(config_file):
            raise ConfigurationError(f"config file not found: {config_file}")
        with open(config_file, "r", encoding="utf-8") as f:
            file_data = yaml.safe_load(f) or {}
            # 支持 cloudwatch_exporter 作为根键
            data = file_data.get("cloudwatch_exporter") or file_data

    # 2. 合并字典配置（不修改调用方的字典）
    if config_dict:
        dict_data = config_dict.get("cloudwatch_exporter") or config_dict
        _deep_merge(data, dict_data)

    # 3. 从环境变量覆盖（如果指定了前缀）
    if env_prefix:
        _override_from_env(data, env_prefix)

    return ExporterConfig(**data)


def load_config_from_file(config_file: str) -> ExporterConfig:
    """从 YAML 文件加载配置"""
    return load_config(config_file=config_file)


def _deep_merge(base: Dict, override: Dict) -> None:
    """
    深度合并字典

    override 中的嵌套字典逐层复制进 base，不共享引用；叶子值（如 on_error 回调）原样引用。
    """
    for key, value in override.items():
        if isinstance(value, dict):
            if not isinstance(base.get(key), dict):
                base[key] = {}
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _override_from_env(data: Dict, prefix: str) -> None:
    """从环境变量覆盖配置"""
    prefix = prefix.upper()

    env_mappings = {
        f"{prefix}_METRIC_ENABLED": ("metric", "enabled"),
        f"{prefix}_METRIC_COLLECT_INTERVAL": ("metric", "collect_interval"),
        f"{prefix}_CLOUDWATCH_NAMESPACE": ("metric", "cloudwatch", "namespace"),
        f"{prefix}_CLOUDWATCH_REGION": ("metric", "cloudwatch", "region"),
        f"{prefix}_CLOUDWATCH_USE_SHARED_CONFIG": ("metric", "cloudwatch", "use_shared_config"),
        f"{prefix}_CLOUDWATCH_USE_ENV_CREDENTIALS": ("metric", "cloudwatch", "use_env_credentials"),
        f"{prefix}_RESOURCE_SERVICE_NAME": ("resource", "service_name"),
    }

    for env_var, path in env_mappings.items():
        value = os.environ.get(env_var)
        if value is not None:
            _set_nested(data, path, _parse_env_value(value))


def _set_nested(data: Dict, path: tuple, value: Any) -> None:
    """设置嵌套字典的值"""
    for key in path[:-1]:
        data = data.setdefault(key, {})
    data[path[-1]] = value


def _parse_env_value(value: str) -> Any:
    """解析环境变量值"""
    lower = value.lower()
    if lower in ("true", "yes"):
        return True
    if lower in ("false", "no"):
        return False
    return value


class ExporterConfigBuilder:
    """导出器配置构建器"""

    def __init__(self):
        self._config: Dict[str, Any] = {
            "metric": {"enabled": True},
            "resource": {},
        }

    def with_resource(
        self,
        service_name: str,
        service_version: str = "",
        **attributes: str,
    ) -> "ExporterConfigBuilder":
        """设置 Resource 配置"""
        self._config["resource"] = {
            "service_name": service_name,
            "service_version": service_version,
            "attributes": attributes,
        }
        return self

    def with_cloudwatch(
        self,
        namespace: str,
        on_error: Optional[Callable[[Exception], Any]] = None,
        use_shared_config: bool = False,
        use_env_credentials: bool = False,
        region: str = "",
        profile_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        max_records_per_request: int = MAX_RECORDS_PER_REQUEST,
    ) -> "ExporterConfigBuilder":
        """配置 CloudWatch 导出"""
        self._config["metric"]["cloudwatch"] = {
            "namespace": namespace,
            "on_error": on_error,
            "use_shared_config": use_shared_config,
            "use_env_credentials": use_env_credentials,
            "region": region,
            "profile_name": profile_name,
            "endpoint_url": endpoint_url,
            "max_records_per_request": max_records_per_request,
        }
        return self

    def with_collect_interval(self, collect_interval: str) -> "ExporterConfigBuilder":
        """设置采集间隔"""
        self._config["metric"]["collect_interval"] = collect_interval
        return self

    def build(self) -> ExporterConfig:
        """构建配置对象"""
        return ExporterConfig(**self._config)
