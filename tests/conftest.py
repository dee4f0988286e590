#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
pytest 配置文件

提供测试夹具和配置
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# 将 src 目录添加到 Python 路径
ROOT_DIR = Path(__file__).parent.parent
SRC_DIR = ROOT_DIR / "src"
sys.path.insert(0, str(SRC_DIR))

from cloudwatch_exporter.config import CloudWatchOptions  # noqa: E402


class FakeCloudWatchClient:
    """记录 put_metric_data 请求的 CloudWatch 客户端替身"""

    def __init__(self, error: Optional[Exception] = None):
        self.requests: List[Dict[str, Any]] = []
        self.error = error

    def put_metric_data(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return {}


@pytest.fixture(scope="session")
def project_root() -> Path:
    """项目根目录"""
    return ROOT_DIR


@pytest.fixture(scope="function")
def fake_client() -> FakeCloudWatchClient:
    """每个测试独立的 CloudWatch 客户端替身"""
    return FakeCloudWatchClient()


@pytest.fixture(scope="function")
def options() -> CloudWatchOptions:
    """命名空间为 bar 的共享配置"""
    return CloudWatchOptions(namespace="bar", use_shared_config=True)


@pytest.fixture(scope="session")
def fake_client_cls():
    """客户端替身类，用于构造会失败的客户端"""
    return FakeCloudWatchClient
