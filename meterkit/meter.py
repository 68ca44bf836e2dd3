"""Sliding-window rate meter driven by a periodic sampler."""

from __future__ import annotations

import threading
from typing import Optional

from . import interfaces
from .counters import GaugeCounter, SimpleCounter
from .interfaces import Counter, Gauge, Meter, MetricView

DEFAULT_TIME_SPAN_SECONDS = 60


class MeterView(Meter, MetricView):
    """Average rate of events per second over a trailing time span.

    The rate is not maintained by the threads recording events. Instead, a
    circular history of counter snapshots is refreshed by :meth:`sample`, which
    the owning registry invokes once per sampling interval. The rate is the
    difference between the newest and the oldest snapshot divided by the time
    span, so reads are O(1) and reflect the state as of the last sample.

    A short time span uses less memory and follows short-term changes more
    closely. The minimum is one sampling interval. A longer time span keeps a
    longer history but yields smoother transitions between rates.

    Args:
        counter: Counter backing the meter. A :class:`SimpleCounter` is created
            when omitted.
        time_span_seconds: Requested window. It is floored to a multiple of the
            sampling interval, and to at least one interval.
        sampling_interval_seconds: Override for
            :data:`~meterkit.interfaces.SAMPLING_INTERVAL_SECONDS`. Must match
            the cadence at which :meth:`sample` is called.
    """

    def __init__(
        self,
        counter: Optional[Counter] = None,
        time_span_seconds: int = DEFAULT_TIME_SPAN_SECONDS,
        *,
        sampling_interval_seconds: Optional[int] = None,
    ) -> None:
        interval = sampling_interval_seconds
        if interval is None:
            interval = interfaces.SAMPLING_INTERVAL_SECONDS
        interval = interfaces.whole_seconds(interval, "sampling_interval_seconds")
        if interval <= 0:
            raise ValueError("sampling_interval_seconds must be positive")
        time_span_seconds = interfaces.whole_seconds(time_span_seconds, "time_span_seconds")
        self._counter: Counter = counter if counter is not None else SimpleCounter()
        self._interval = interval
        # Two snapshots are needed to span the window, hence the extra slot.
        self._time_span = max(time_span_seconds - (time_span_seconds % interval), interval)
        self._values = [0] * (self._time_span // interval + 1)
        self._time = 0
        self._rate = 0.0
        self._lock = threading.Lock()

    @classmethod
    def from_gauge(
        cls,
        gauge: Gauge,
        time_span_seconds: int = DEFAULT_TIME_SPAN_SECONDS,
        *,
        sampling_interval_seconds: Optional[int] = None,
    ) -> "MeterView":
        """Build a read-only meter reporting the rate of change of ``gauge``."""

        return cls(
            GaugeCounter(gauge),
            time_span_seconds,
            sampling_interval_seconds=sampling_interval_seconds,
        )

    @property
    def counter(self) -> Counter:
        return self._counter

    @property
    def time_span_seconds(self) -> int:
        return self._time_span

    @property
    def sampling_interval_seconds(self) -> int:
        return self._interval

    @property
    def history_length(self) -> int:
        return len(self._values)

    def record_event(self, n: int = 1) -> None:
        self._counter.inc(n)

    def current_count(self) -> int:
        return self._counter.get_count()

    def current_rate(self) -> float:
        with self._lock:
            return self._rate

    def sample(self) -> None:
        length = len(self._values)
        cursor = (self._time + 1) % length
        oldest = self._values[(cursor + 1) % length]
        newest = self._counter.get_count()
        self._values[cursor] = newest
        with self._lock:
            self._time = cursor
            self._rate = (newest - oldest) / self._time_span

    def __repr__(self) -> str:
        return (
            f"MeterView(time_span_seconds={self._time_span}, "
            f"count={self.current_count()}, rate={self._rate:.3f})"
        )


__all__ = ["DEFAULT_TIME_SPAN_SECONDS", "MeterView"]
