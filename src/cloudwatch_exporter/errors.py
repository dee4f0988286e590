# -*- coding: utf-8 -*-
"""
CloudWatch 导出器错误定义

- ConfigurationError：构造阶段配置错误（致命，不重试）
- TranslationError：单行翻译失败（不支持的聚合类型）

传输错误直接使用 botocore 的异常，原样交给 on_error 回调。
"""

from typing import Optional


class CloudWatchExporterError(Exception):
    """导出器错误基类"""

    pass


class ConfigurationError(CloudWatchExporterError):
    """配置错误"""

    pass


class TranslationError(CloudWatchExporterError):
    """
    翻译错误

    某一行的聚合类型不受支持时产生，不影响同一快照中其他行的翻译。
    """

    def __init__(self, view_name: str, aggregation: str, message: Optional[str] = None):
        self.view_name = view_name
        self.aggregation = aggregation
        super().__init__(
            message or f"aggregation {aggregation} is not yet supported (view={view_name})"
        )
