# -*- coding: utf-8 -*-
"""
View 数据模型

采集层在导出时产生的只读快照：
- ViewData：一个命名指标及其全部行
- Row：一组标签 + 一个聚合值
- 聚合值是封闭的变体集合：Count / Sum / LastValue / Distribution / Unknown
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union


class AggregationKind(str, Enum):
    """聚合类型"""
    COUNT = "count"
    SUM = "sum"
    LAST_VALUE = "last_value"
    DISTRIBUTION = "distribution"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CountData:
    """计数聚合"""
    value: int = 0

    @property
    def kind(self) -> AggregationKind:
        return AggregationKind.COUNT


@dataclass(frozen=True)
class SumData:
    """求和聚合"""
    value: float = 0.0

    @property
    def kind(self) -> AggregationKind:
        return AggregationKind.SUM


@dataclass(frozen=True)
class LastValueData:
    """最新值聚合"""
    value: float = 0.0

    @property
    def kind(self) -> AggregationKind:
        return AggregationKind.LAST_VALUE


@dataclass(frozen=True)
class DistributionData:
    """
    分布聚合

    bucket_counts 比 bucket_bounds 多一个（最后一个桶为 +Inf）。
    """
    count: int = 0
    sum: float = 0.0
    min: Optional[float] = None
    max: Optional[float] = None
    bucket_bounds: Tuple[float, ...] = ()
    bucket_counts: Tuple[int, ...] = ()

    @property
    def kind(self) -> AggregationKind:
        return AggregationKind.DISTRIBUTION


@dataclass(frozen=True)
class UnknownData:
    """模型中没有对应变体的聚合结果，kind_name 记录来源类型名"""
    kind_name: str = ""

    @property
    def kind(self) -> AggregationKind:
        return AggregationKind.UNKNOWN


AggregationData = Union[CountData, SumData, LastValueData, DistributionData, UnknownData]


@dataclass(frozen=True)
class Tag:
    """标签键值对"""
    key: str
    value: str


@dataclass(frozen=True)
class Row:
    """一个标签组合的聚合结果"""
    data: AggregationData
    tags: Tuple[Tag, ...] = ()

    def __post_init__(self):
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))


@dataclass(frozen=True)
class ViewData:
    """
    View 快照

    Attributes:
        name: 指标名称（非空）
        rows: 有序的行
        aggregation: 该 View 声明的聚合类型
        description: 描述
        unit: 采集层的单位（仅作记录，CloudWatch 单位由翻译器决定）
    """
    name: str
    rows: Tuple[Row, ...] = ()
    aggregation: AggregationKind = AggregationKind.UNKNOWN
    description: str = ""
    unit: str = ""

    def __post_init__(self):
        if not self.name:
            raise ValueError("view name must not be empty")
        # 允许传入 list，统一存为 tuple
        if not isinstance(self.rows, tuple):
            object.__setattr__(self, "rows", tuple(self.rows))


def tags_from_attributes(attributes: Optional[Mapping[str, Any]]) -> Tuple[Tag, ...]:
    """
    将属性字典转换为有序标签

    保持字典的迭代顺序，值统一转为字符串。
    """
    if not attributes:
        return ()
    return tuple(Tag(key=str(k), value=str(v)) for k, v in attributes.items())
