from __future__ import annotations

import abc
import os
from typing import Any


def _interval_from_env(default: int = 5) -> int:
    raw = os.environ.get("METERKIT_SAMPLING_INTERVAL_SECONDS")
    if raw is None:
        return default
    value = int(raw)
    if value <= 0:
        raise ValueError("METERKIT_SAMPLING_INTERVAL_SECONDS must be positive")
    return value


SAMPLING_INTERVAL_SECONDS: int = _interval_from_env()
"""Process-wide cadence, in seconds, at which views are sampled."""


def whole_seconds(value: Any, name: str) -> int:
    """Return ``value`` as an int, accepting floats only when they are whole."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a whole number of seconds, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{name} must be a whole number of seconds, got {value!r}")
        return int(value)
    return value


class Metric(abc.ABC):
    """Marker base class for everything a registry can hold."""


class Counter(Metric):
    """Accumulator that can be incremented, decremented and read."""

    @abc.abstractmethod
    def inc(self, n: int = 1) -> None: ...

    @abc.abstractmethod
    def dec(self, n: int = 1) -> None: ...

    @abc.abstractmethod
    def get_count(self) -> int: ...


class Gauge(Metric):
    """Read-only numeric value maintained outside of the metric system."""

    @abc.abstractmethod
    def get_value(self) -> float | int: ...


class Meter(Metric):
    """Measures the average rate of events per second."""

    @abc.abstractmethod
    def record_event(self, n: int = 1) -> None:
        """Record ``n`` occurrences of the event."""

    @abc.abstractmethod
    def current_count(self) -> int:
        """Total number of events recorded so far."""

    @abc.abstractmethod
    def current_rate(self) -> float:
        """Average events per second over the meter's time span."""


class MetricView(abc.ABC):
    """A metric whose value is refreshed by a background scheduler.

    The scheduler calls :meth:`sample` once every
    :data:`SAMPLING_INTERVAL_SECONDS`, never concurrently for the same view.
    """

    @abc.abstractmethod
    def sample(self) -> None: ...


__all__ = [
    "SAMPLING_INTERVAL_SECONDS",
    "Counter",
    "Gauge",
    "Meter",
    "Metric",
    "MetricView",
    "whole_seconds",
]
