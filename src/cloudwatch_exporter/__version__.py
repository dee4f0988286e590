# -*- coding: utf-8 -*-

__title__ = "cloudwatch-exporter"
__description__ = "OpenTelemetry metric exporter for Amazon CloudWatch."
__url__ = "https://github.com/kaydxh/cloudwatch-exporter"
__version__ = "0.1.0"
__author__ = "kaydxh"
__author_email__ = "kaydxh@example.com"
__license__ = "MIT"
