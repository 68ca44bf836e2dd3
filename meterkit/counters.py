"""Counter and gauge implementations."""

from __future__ import annotations

import math
import threading
from typing import Callable

from .interfaces import Counter, Gauge

_LONG_MIN = -(2**63)
_LONG_MAX = 2**63 - 1


class UnsupportedOperation(RuntimeError):
    """Raised when a read-only metric is asked to mutate."""


class SimpleCounter(Counter):
    """Counter that is safe to update from many producer threads."""

    def __init__(self, initial: int = 0) -> None:
        self._count = int(initial)
        self._lock = threading.Lock()

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= n

    def get_count(self) -> int:
        return self._count

    def __repr__(self) -> str:
        return f"SimpleCounter(count={self._count})"


class FunctionGauge(Gauge):
    """Gauge whose value is computed by ``fn`` on every read."""

    def __init__(self, fn: Callable[[], float | int]) -> None:
        if not callable(fn):
            raise TypeError("FunctionGauge requires a callable")
        self._fn = fn

    def get_value(self) -> float | int:
        return self._fn()


class SettableGauge(Gauge):
    """Gauge holding the last value pushed through :meth:`set`."""

    def __init__(self, value: float | int = 0) -> None:
        self._value = value

    def set(self, value: float | int) -> None:
        self._value = value

    def get_value(self) -> float | int:
        return self._value


def to_long(value: float | int) -> int:
    """Narrow ``value`` to a signed 64-bit integer.

    Fractions are truncated toward zero, NaN maps to 0 and out-of-range values
    saturate at the int64 bounds.
    """

    if isinstance(value, float):
        if math.isnan(value):
            return 0
        if math.isinf(value):
            return _LONG_MAX if value > 0 else _LONG_MIN
    return max(_LONG_MIN, min(_LONG_MAX, int(value)))


class GaugeCounter(Counter):
    """Exposes a numeric gauge through the read side of the counter contract.

    The wrapped value is maintained elsewhere, so every mutator raises
    :class:`UnsupportedOperation`.
    """

    def __init__(self, gauge: Gauge) -> None:
        self.gauge = gauge

    def inc(self, n: int = 1) -> None:
        raise UnsupportedOperation("Cannot increment a gauge-backed counter")

    def dec(self, n: int = 1) -> None:
        raise UnsupportedOperation("Cannot decrement a gauge-backed counter")

    def get_count(self) -> int:
        return to_long(self.gauge.get_value())


__all__ = [
    "FunctionGauge",
    "GaugeCounter",
    "SettableGauge",
    "SimpleCounter",
    "UnsupportedOperation",
    "to_long",
]
