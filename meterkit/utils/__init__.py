"""Utility helpers for meterkit."""

from .logging import (
    JsonlMetricsSink,
    LoggingMetricsSink,
    MetricsEvent,
    MetricsSink,
    TensorBoardMetricsSink,
    build_sink,
)

__all__ = [
    "JsonlMetricsSink",
    "LoggingMetricsSink",
    "MetricsEvent",
    "MetricsSink",
    "TensorBoardMetricsSink",
    "build_sink",
]
