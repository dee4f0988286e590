# -*- coding: utf-8 -*-
"""
CloudWatch 导出器

负责：
- 根据配置解析凭证来源，创建 CloudWatch 客户端
- 接收采集层推送的 View 快照，翻译后调用 PutMetricData
- 失败时调用 on_error 回调，而不是向上抛出

导出器只持有构造时确定的不可变配置，并发调用 export_view 的线程安全性
取决于底层客户端（boto3 client 是线程安全的）。本模块不做超时控制，
超时由 botocore 客户端配置决定。
"""

import logging
import os
from typing import Any, Callable, List, Optional, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from cloudwatch_exporter.config import (
    ENV_ACCESS_KEY_ID,
    ENV_SECRET_ACCESS_KEY,
    ENV_SESSION_TOKEN,
    CloudWatchOptions,
)
from cloudwatch_exporter.errors import ConfigurationError, TranslationError
from cloudwatch_exporter.translator import MetricRecord, translate
from cloudwatch_exporter.view import ViewData

logger = logging.getLogger(__name__)

# 传输错误：原样交给 on_error
TRANSPORT_ERRORS = (BotoCoreError, ClientError)


def create_session(options: CloudWatchOptions) -> boto3.session.Session:
    """
    根据凭证来源创建 boto3 Session

    Args:
        options: 已校验的 CloudWatchOptions

    Returns:
        boto3 Session

    Raises:
        ConfigurationError: 未指定凭证来源，或环境变量凭证缺失
    """
    if options.use_shared_config:
        # 共享配置：~/.aws/credentials + ~/.aws/config
        return boto3.session.Session(
            profile_name=options.profile_name,
            region_name=options.region or None,
        )

    if options.use_env_credentials:
        access_key = os.environ.get(ENV_ACCESS_KEY_ID, "")
        secret_key = os.environ.get(ENV_SECRET_ACCESS_KEY, "")
        if not access_key or not secret_key:
            raise ConfigurationError(
                f"{ENV_ACCESS_KEY_ID} and {ENV_SECRET_ACCESS_KEY} must be set "
                "when use_env_credentials is set"
            )
        return boto3.session.Session(
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            aws_session_token=os.environ.get(ENV_SESSION_TOKEN) or None,
            region_name=options.region,
        )

    raise ConfigurationError("no credential source specified")


class CloudWatchExporter:
    """
    CloudWatch 导出器

    示例:
        ```python
        exporter = CloudWatchExporter(
            CloudWatchOptions(
                namespace="demo",
                use_shared_config=True,
                on_error=lambda err: logger.error("push failed: %s", err),
            )
        )
        exporter.export_view(view_data)
        ```
    """

    def __init__(self, options: CloudWatchOptions, client: Optional[Any] = None):
        """
        初始化 CloudWatch 导出器

        Args:
            options: 导出器配置
            client: 可选，已创建的 CloudWatch 客户端（需提供 put_metric_data）

        Raises:
            ConfigurationError: 配置不合法
        """
        options.validate_options()
        self._options = options

        if client is None:
            session = create_session(options)
            client = session.client("cloudwatch", endpoint_url=options.endpoint_url)
        self._client = client

        logger.info(
            "CloudWatch exporter created: namespace=%s, credentials=%s, region=%s",
            options.namespace,
            "shared_config" if options.use_shared_config else "env",
            options.region or "<default>",
        )

    @property
    def options(self) -> CloudWatchOptions:
        """获取配置"""
        return self._options

    @property
    def namespace(self) -> str:
        return self._options.namespace

    @property
    def client(self) -> Any:
        """获取 CloudWatch 客户端"""
        return self._client

    def export_view(self, view_data: ViewData) -> List[Exception]:
        """
        导出一个 View 快照

        翻译错误和传输错误都交给 on_error，本方法不抛出。
        记录数超过单次请求上限时拆分为多次请求。

        Args:
            view_data: View 快照

        Returns:
            本次已交给 on_error 的错误列表（成功时为空）
        """
        result = translate(view_data)
        errors: List[Exception] = list(result.errors)

        for err in result.errors:
            self._handle_error(err)

        if not result.records:
            logger.debug("No metric records to export for view %s, skip", view_data.name)
            return errors

        for chunk in self._chunks(result.records):
            try:
                self.put_metric_data(chunk)
            except TRANSPORT_ERRORS as e:
                errors.append(e)
                self._handle_error(e)

        return errors

    def put_metric_data(self, records: Sequence[MetricRecord]) -> Any:
        """
        发送一次 PutMetricData 请求

        Args:
            records: 本次发送的记录（不超过单次请求上限）

        Returns:
            客户端响应

        Raises:
            BotoCoreError / ClientError: 传输或 API 错误
        """
        response = self._client.put_metric_data(
            Namespace=self._options.namespace,
            MetricData=[r.to_cloudwatch_data() for r in records],
        )
        logger.debug(
            "Put %d metric records to namespace %s", len(records), self._options.namespace
        )
        return response

    def _chunks(self, records: List[MetricRecord]) -> List[List[MetricRecord]]:
        size = self._options.max_records_per_request
        return [records[i:i + size] for i in range(0, len(records), size)]

    def _handle_error(self, err: Exception) -> None:
        """
        错误出口：记录日志后调用 on_error

        回调自身抛出的异常只记录日志；SystemExit 等由回调决定的进程终止不拦截。
        """
        if isinstance(err, TranslationError):
            logger.warning("Failed to translate view %s: %s", err.view_name, err)
        else:
            logger.error("Failed to put metric data to CloudWatch: %s", err)

        on_error: Optional[Callable[[Exception], Any]] = self._options.on_error
        if on_error is None:
            return

        try:
            on_error(err)
        except Exception:
            logger.exception("on_error callback raised")
