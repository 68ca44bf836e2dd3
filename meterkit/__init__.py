"""meterkit: sliding-window rate meters and a sampling metric registry."""

from .config import RegistryConfig
from .counters import FunctionGauge, GaugeCounter, SettableGauge, SimpleCounter, UnsupportedOperation
from .interfaces import SAMPLING_INTERVAL_SECONDS, Counter, Gauge, Meter, Metric, MetricView
from .meter import DEFAULT_TIME_SPAN_SECONDS, MeterView
from .registry import MetricRegistry, ViewUpdater

__all__ = [
    "DEFAULT_TIME_SPAN_SECONDS",
    "SAMPLING_INTERVAL_SECONDS",
    "Counter",
    "FunctionGauge",
    "Gauge",
    "GaugeCounter",
    "Meter",
    "MeterView",
    "Metric",
    "MetricRegistry",
    "MetricView",
    "RegistryConfig",
    "SettableGauge",
    "SimpleCounter",
    "UnsupportedOperation",
    "ViewUpdater",
]
