# -*- coding: utf-8 -*-
"""
翻译器测试

运行测试命令:
    pytest tests/unit/test_translator.py -v
"""

import pytest

from cloudwatch_exporter.errors import TranslationError
from cloudwatch_exporter.translator import (
    UNIT_NONE,
    Dimension,
    MetricRecord,
    dimensions_from_tags,
    sanitize,
    translate,
    translate_row,
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

TEST_TAGS = (Tag("test", "testvalue"),)


class TestSanitize:
    """指标名称清洗测试"""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("a/b c", "a_b_c"),
            ("a//b", "a_b"),
            ("example/random_last", "example_random_last"),
            ("foo", "foo"),
            ("http.server.duration", "http_server_duration"),
            ("__x__", "_x_"),
            ("", ""),
        ],
    )
    def test_sanitize(self, text, expected):
        """非字母数字的连续片段替换为单个下划线"""
        assert sanitize(text) == expected

    @pytest.mark.parametrize("text", ["a/b c", "a//b", "x-_-y", "ok_name", "温度/°C"])
    def test_idempotent(self, text):
        """清洗是幂等的"""
        once = sanitize(text)
        assert sanitize(once) == once

    def test_clean_name_unchanged(self):
        """只含字母数字和单个下划线的名称保持不变"""
        assert sanitize("requests_total_2") == "requests_total_2"

    @pytest.mark.parametrize(
        "text, expected",
        [("a__b", "a_b"), ("requests___total", "requests_total"), ("_a", "_a")],
    )
    def test_repeated_underscores_collapse(self, text, expected):
        """下划线本身不是字母数字，连续下划线同样合并为一个"""
        assert sanitize(text) == expected


class TestDimensions:
    """标签 -> 维度测试"""

    def test_preserves_order_and_values(self):
        """保持顺序，名称和值不清洗"""
        tags = [Tag("b key", "v/1"), Tag("a", "v 2")]
        assert dimensions_from_tags(tags) == (
            Dimension("b key", "v/1"),
            Dimension("a", "v 2"),
        )

    def test_empty(self):
        assert dimensions_from_tags(()) == ()


class TestTranslate:
    """快照翻译测试"""

    @pytest.mark.parametrize(
        "data",
        [CountData(value=1), SumData(value=1.0), LastValueData(value=1.0)],
        ids=["count", "sum", "last_value"],
    )
    def test_supported_kinds_produce_one_record(self, data):
        """Count/Sum/LastValue 每行产生一条记录"""
        view_data = ViewData(name="foo", rows=(Row(data=data, tags=TEST_TAGS),))

        result = translate(view_data)

        assert result.ok
        assert result.records == [
            MetricRecord(
                name="foo",
                value=1.0,
                unit=UNIT_NONE,
                dimensions=(Dimension("test", "testvalue"),),
            )
        ]

    def test_count_converted_to_float(self):
        """Count 转为浮点"""
        record = translate_row("foo", Row(data=CountData(value=7)))
        assert isinstance(record.value, float)
        assert record.value == 7.0

    def test_distribution_not_supported(self):
        """Distribution 不产生记录，产生一个错误"""
        distribution = DistributionData(
            count=3, sum=6.0, bucket_bounds=(1.0, 5.0), bucket_counts=(1, 1, 1)
        )
        view_data = ViewData(
            name="latency",
            rows=(Row(data=distribution, tags=TEST_TAGS),),
            aggregation=AggregationKind.DISTRIBUTION,
        )

        result = translate(view_data)

        assert result.records == []
        assert len(result.errors) == 1
        assert result.errors[0].aggregation == "distribution"
        assert result.errors[0].view_name == "latency"
        assert "distribution" in str(result.errors[0])

    def test_unknown_kind_not_supported(self):
        """未知聚合类型使用来源类型名"""
        view_data = ViewData(name="x", rows=(Row(data=UnknownData("ExponentialHistogram")),))

        result = translate(view_data)

        assert result.records == []
        assert result.errors[0].aggregation == "ExponentialHistogram"

    def test_partial_success(self):
        """某一行失败不影响其他行"""
        view_data = ViewData(
            name="mixed/metric",
            rows=(
                Row(data=SumData(2.5), tags=(Tag("k", "1"),)),
                Row(data=DistributionData(count=1, sum=1.0)),
                Row(data=SumData(4.0), tags=(Tag("k", "2"),)),
            ),
        )

        result = translate(view_data)

        assert [r.value for r in result.records] == [2.5, 4.0]
        assert all(r.name == "mixed_metric" for r in result.records)
        assert len(result.errors) == 1
        assert not result.ok

    def test_empty_snapshot(self):
        """没有行时结果为空"""
        result = translate(ViewData(name="foo"))
        assert result.records == []
        assert result.errors == []

    def test_translate_row_raises(self):
        """translate_row 对不支持的类型抛出 TranslationError"""
        with pytest.raises(TranslationError):
            translate_row("foo", Row(data=DistributionData()))


class TestMetricRecord:
    """MetricDatum 渲染测试"""

    def test_to_cloudwatch_data(self):
        record = MetricRecord(
            name="foo",
            value=1.0,
            dimensions=(Dimension("test", "testvalue"),),
        )
        assert record.to_cloudwatch_data() == {
            "MetricName": "foo",
            "Value": 1.0,
            "Unit": "None",
            "Dimensions": [{"Name": "test", "Value": "testvalue"}],
        }
