#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CloudWatch 导出示例

每 2 秒记录一个 [-100, 100) 的随机数，按正负打上 sign 标签，
由 SDK 定时导出到 CloudWatch 的 demo 命名空间。
"""

import logging
import random
import time
from pathlib import Path

from opentelemetry.metrics import Observation

from cloudwatch_exporter import CloudWatchMetricService, load_config
from cloudwatch_exporter.metric import get_meter

logger = logging.getLogger(__name__)


def on_error(err: Exception) -> None:
    logger.error("Failed to push metrics: %s", err)


def main():
    logging.basicConfig(level=logging.INFO)

    config_file = Path(__file__).parent / "config.yaml"
    config = load_config(
        config_file=str(config_file),
        config_dict={"metric": {"cloudwatch": {"on_error": on_error}}},
        env_prefix="CLOUDWATCH_EXPORTER",
    )
    service = CloudWatchMetricService(config)
    service.install()

    last_value = {"value": 0.0, "sign": "positive"}

    def observe(options):
        yield Observation(last_value["value"], {"sign": last_value["sign"]})

    meter = get_meter("example")
    meter.create_observable_gauge(
        "example.random_last",
        callbacks=[observe],
        description="The last of random numbers",
        unit="ms",
    )

    try:
        while True:
            result = random.uniform(-100, 100)
            last_value["value"] = result
            last_value["sign"] = "negative" if result < 0 else "positive"
            time.sleep(2)
    except KeyboardInterrupt:
        pass
    finally:
        service.shutdown()


if __name__ == "__main__":
    main()
