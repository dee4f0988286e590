"""
cloudwatch_exporter 将 OpenTelemetry 采集的指标导出到 Amazon CloudWatch。

Modules:
- cloudwatch_exporter.view: View 快照数据模型
- cloudwatch_exporter.translator: View -> MetricDatum 翻译
- cloudwatch_exporter.exporter: PutMetricData 导出器
- cloudwatch_exporter.metric: OpenTelemetry SDK 集成
- cloudwatch_exporter.service: 配置驱动的安装入口
"""

from cloudwatch_exporter.__version__ import __version__
from cloudwatch_exporter.config import (
    CloudWatchOptions,
    ExporterConfig,
    ExporterConfigBuilder,
    MetricConfig,
    ResourceConfig,
    load_config,
    load_config_from_file,
)
from cloudwatch_exporter.errors import (
    CloudWatchExporterError,
    ConfigurationError,
    TranslationError,
)
from cloudwatch_exporter.exporter import CloudWatchExporter
from cloudwatch_exporter.service import CloudWatchMetricService
from cloudwatch_exporter.translator import (
    Dimension,
    MetricRecord,
    TranslationResult,
    sanitize,
    translate,
)
from cloudwatch_exporter.view import (
    AggregationKind,
    CountData,
    DistributionData,
    LastValueData,
    Row,
    SumData,
    Tag,
    UnknownData,
    ViewData,
)

__all__ = [
    "__version__",
    # Config
    "CloudWatchOptions",
    "ExporterConfig",
    "ExporterConfigBuilder",
    "MetricConfig",
    "ResourceConfig",
    "load_config",
    "load_config_from_file",
    # Errors
    "CloudWatchExporterError",
    "ConfigurationError",
    "TranslationError",
    # Exporter
    "CloudWatchExporter",
    "CloudWatchMetricService",
    # Translator
    "Dimension",
    "MetricRecord",
    "TranslationResult",
    "sanitize",
    "translate",
    # View
    "AggregationKind",
    "CountData",
    "DistributionData",
    "LastValueData",
    "Row",
    "SumData",
    "Tag",
    "UnknownData",
    "ViewData",
]
