# -*- coding: utf-8 -*-
"""
OpenTelemetry 适配测试

运行测试命令:
    pytest tests/unit/test_cloudwatch_metric_exporter.py -v
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from opentelemetry.metrics import Observation
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    AggregationTemporality,
    InMemoryMetricReader,
    MetricExportResult,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource

from cloudwatch_exporter.config import CloudWatchOptions
from cloudwatch_exporter.exporter import CloudWatchExporter
from cloudwatch_exporter.metric.cloudwatch import (
    CloudWatchMetricExporter,
    CloudWatchMetricExporterBuilder,
    view_data_from_metrics_data,
)
from cloudwatch_exporter.metric.meter import Meter
from cloudwatch_exporter.view import (
    AggregationKind,
    DistributionData,
    LastValueData,
    SumData,
    Tag,
)


@pytest.fixture
def reader_and_meter():
    """带内存 Reader 的独立 MeterProvider"""
    reader = InMemoryMetricReader()
    provider = MeterProvider(metric_readers=[reader])
    yield reader, provider.get_meter("test")
    provider.shutdown()


def _by_name(views):
    return {v.name: v for v in views}


class TestViewDataFromMetrics:
    """OpenTelemetry Metric -> ViewData 转换测试"""

    def test_counter_to_sum(self, reader_and_meter):
        reader, meter = reader_and_meter
        counter = meter.create_counter("requests")
        counter.add(3, {"method": "GET", "status": "200"})

        views = _by_name(view_data_from_metrics_data(reader.get_metrics_data()))

        view_data = views["requests"]
        assert view_data.aggregation == AggregationKind.SUM
        assert len(view_data.rows) == 1
        row = view_data.rows[0]
        assert row.data == SumData(value=3)
        assert row.tags == (Tag("method", "GET"), Tag("status", "200"))

    def test_gauge_to_last_value(self, reader_and_meter):
        reader, meter = reader_and_meter

        def observe(options):
            yield Observation(42.5, {"sign": "positive"})

        meter.create_observable_gauge("random_last", callbacks=[observe])

        views = _by_name(view_data_from_metrics_data(reader.get_metrics_data()))

        view_data = views["random_last"]
        assert view_data.aggregation == AggregationKind.LAST_VALUE
        assert view_data.rows[0].data == LastValueData(value=42.5)
        assert view_data.rows[0].tags == (Tag("sign", "positive"),)

    def test_histogram_to_distribution(self, reader_and_meter):
        reader, meter = reader_and_meter
        histogram = meter.create_histogram("latency", unit="ms")
        histogram.record(3.0)
        histogram.record(7.0)

        views = _by_name(view_data_from_metrics_data(reader.get_metrics_data()))

        view_data = views["latency"]
        assert view_data.aggregation == AggregationKind.DISTRIBUTION
        assert view_data.unit == "ms"
        data = view_data.rows[0].data
        assert isinstance(data, DistributionData)
        assert data.count == 2
        assert data.sum == 10.0
        assert data.min == 3.0
        assert data.max == 7.0
        assert len(data.bucket_counts) == len(data.bucket_bounds) + 1


class TestCloudWatchMetricExporter:
    """MetricExporter 实现测试"""

    def test_export_sends_supported_metrics(self, reader_and_meter, options, fake_client):
        reader, meter = reader_and_meter
        meter.create_counter("http.requests").add(1, {"test": "testvalue"})

        exporter = CloudWatchMetricExporter(CloudWatchExporter(options, client=fake_client))
        result = exporter.export(reader.get_metrics_data())

        assert result == MetricExportResult.SUCCESS
        assert fake_client.requests == [
            {
                "Namespace": "bar",
                "MetricData": [
                    {
                        "MetricName": "http_requests",
                        "Value": 1.0,
                        "Unit": "None",
                        "Dimensions": [{"Name": "test", "Value": "testvalue"}],
                    }
                ],
            }
        ]

    def test_histogram_reports_failure(self, reader_and_meter, fake_client):
        """直方图不支持：on_error 收到错误，导出结果为 FAILURE"""
        reader, meter = reader_and_meter
        meter.create_histogram("latency").record(1.0)
        on_error = MagicMock()
        options = CloudWatchOptions(namespace="bar", use_shared_config=True, on_error=on_error)

        exporter = CloudWatchMetricExporter(CloudWatchExporter(options, client=fake_client))
        result = exporter.export(reader.get_metrics_data())

        assert result == MetricExportResult.FAILURE
        on_error.assert_called_once()
        assert fake_client.requests == []

    def test_transport_error_reports_failure(self, reader_and_meter, options, fake_client_cls):
        reader, meter = reader_and_meter
        meter.create_counter("requests").add(1)
        client = fake_client_cls(
            error=ClientError({"Error": {"Code": "Throttling"}}, "PutMetricData")
        )

        exporter = CloudWatchMetricExporter(CloudWatchExporter(options, client=client))

        assert exporter.export(reader.get_metrics_data()) == MetricExportResult.FAILURE

    def test_preferred_temporality_delta_for_counter(self, options, fake_client):
        from opentelemetry.sdk.metrics import Counter

        exporter = CloudWatchMetricExporter(CloudWatchExporter(options, client=fake_client))

        assert exporter._preferred_temporality[Counter] == AggregationTemporality.DELTA
        assert exporter.force_flush() is True


class TestCloudWatchMetricExporterBuilder:
    """构建器与 Meter 安装测试"""

    def test_build_reader(self, options, fake_client):
        builder = CloudWatchMetricExporterBuilder(
            options, export_interval_ms=60000, client=fake_client
        )
        reader = builder.build()
        assert isinstance(reader, PeriodicExportingMetricReader)
        reader.shutdown()

    def test_meter_flush_exports(self, options, fake_client):
        """force_flush 触发一次导出"""
        builder = CloudWatchMetricExporterBuilder(
            options, export_interval_ms=600000, client=fake_client
        )
        meter = Meter(
            resource=Resource.create({"service.name": "test"}),
            push_exporter_builder=builder,
            set_global=False,
        )
        provider = meter.install()
        try:
            provider.get_meter("test").create_counter("jobs").add(2, {"queue": "default"})
            provider.force_flush()
        finally:
            meter.shutdown()

        first = fake_client.requests[0]
        assert first["Namespace"] == "bar"
        assert first["MetricData"][0]["MetricName"] == "jobs"
        assert first["MetricData"][0]["Value"] == 2.0
        assert first["MetricData"][0]["Dimensions"] == [{"Name": "queue", "Value": "default"}]
