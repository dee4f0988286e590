# -*- coding: utf-8 -*-
"""
View -> CloudWatch MetricDatum 翻译器

纯函数，不访问网络和状态：
- 指标名称清洗（每个快照只清洗一次）
- 标签 1:1 映射为维度（保持顺序，不做清洗）
- 按聚合类型分派，不支持的类型产生 TranslationError
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from cloudwatch_exporter.errors import TranslationError
from cloudwatch_exporter.view import (
    CountData,
    LastValueData,
    Row,
    SumData,
    Tag,
    ViewData,
)

# CloudWatch 无量纲单位
UNIT_NONE = "None"

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]+")


@dataclass(frozen=True)
class Dimension:
    """CloudWatch 维度"""
    name: str
    value: str

    def to_cloudwatch_data(self) -> Dict[str, str]:
        return {"Name": self.name, "Value": self.value}


@dataclass(frozen=True)
class MetricRecord:
    """翻译结果，对应一个 CloudWatch MetricDatum"""
    name: str
    value: float
    unit: str = UNIT_NONE
    dimensions: Tuple[Dimension, ...] = ()

    def to_cloudwatch_data(self) -> Dict[str, Any]:
        """转换为 boto3 PutMetricData 的 MetricDatum 字典"""
        return {
            "MetricName": self.name,
            "Value": self.value,
            "Unit": self.unit,
            "Dimensions": [d.to_cloudwatch_data() for d in self.dimensions],
        }


@dataclass
class TranslationResult:
    """翻译结果：成功的记录与失败的错误分开累积"""
    records: List[MetricRecord] = field(default_factory=list)
    errors: List[TranslationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def sanitize(text: str) -> str:
    """
    清洗指标名称

    每一段连续的非 [A-Za-z0-9] 字符替换为单个下划线，例如：
    - "a/b c" -> "a_b_c"
    - "a//b" -> "a_b"
    """
    return _NON_ALPHANUMERIC.sub("_", text)


def dimensions_from_tags(tags: Iterable[Tag]) -> Tuple[Dimension, ...]:
    """标签 -> 维度，保持顺序，名称和值原样保留"""
    return tuple(Dimension(name=t.key, value=t.value) for t in tags)


def translate_row(
    metric_name: str,
    row: Row,
    view_name: Optional[str] = None,
) -> MetricRecord:
    """
    翻译单行

    Args:
        metric_name: 已清洗的指标名称
        row: 待翻译的行
        view_name: 原始 View 名称（用于错误信息）

    Returns:
        MetricRecord

    Raises:
        TranslationError: 聚合类型不受支持（Distribution 及未知类型）
    """
    data = row.data

    if isinstance(data, (CountData, SumData, LastValueData)):
        value = float(data.value)
    else:
        # Distribution 暂不支持，需要转换为 StatisticSet 或 Values/Counts
        kind_name = getattr(data, "kind_name", "") or _kind_name(data)
        raise TranslationError(view_name or metric_name, kind_name)

    return MetricRecord(
        name=metric_name,
        value=value,
        unit=UNIT_NONE,
        dimensions=dimensions_from_tags(row.tags),
    )


def translate(view_data: ViewData) -> TranslationResult:
    """
    翻译整个 View 快照

    每一行独立翻译，某一行失败不影响其他行。

    Args:
        view_data: View 快照

    Returns:
        TranslationResult
    """
    result = TranslationResult()
    metric_name = sanitize(view_data.name)

    for row in view_data.rows:
        try:
            record = translate_row(metric_name, row, view_name=view_data.name)
        except TranslationError as e:
            result.errors.append(e)
            continue
        result.records.append(record)

    return result


def _kind_name(data: Any) -> str:
    kind = getattr(data, "kind", None)
    if kind is not None:
        return getattr(kind, "value", str(kind))
    return type(data).__name__
