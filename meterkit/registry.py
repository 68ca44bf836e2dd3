"""Named metric registry and the background threads that drive it."""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Any, Callable, Mapping, Optional, Sequence

from omegaconf import DictConfig

from .config import RegistryConfig
from .counters import FunctionGauge, SimpleCounter
from .interfaces import Counter, Gauge, Meter, Metric, MetricView
from .meter import MeterView
from .utils.logging import MetricsEvent, MetricsSink, build_sink

logger = logging.getLogger(__name__)


class _PeriodicWorker:
    """Daemon thread invoking ``target`` every ``interval_s`` seconds."""

    def __init__(self, target: Callable[[], None], interval_s: float, *, name: str) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self._target = target
        self._interval_s = interval_s
        self._name = name
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError(f"{self._name} has already been started")
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        next_tick = time.monotonic() + self._interval_s
        while not self._stop_event.wait(max(0.0, next_tick - time.monotonic())):
            self._target()
            next_tick += self._interval_s
            now = time.monotonic()
            if next_tick < now:
                # Missed ticks are dropped rather than replayed back to back.
                next_tick = now + self._interval_s

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None


class ViewUpdater:
    """Samples every registered :class:`MetricView` once per interval.

    Calls to :meth:`update_all` are serialized, so a view is never sampled
    concurrently with itself.
    """

    def __init__(self, interval_s: float) -> None:
        self._views: list[MetricView] = []
        self._lock = threading.Lock()
        self._update_lock = threading.Lock()
        self._worker = _PeriodicWorker(self.update_all, interval_s, name="metric-view-updater")

    def add(self, view: MetricView) -> None:
        with self._lock:
            self._views.append(view)

    def remove(self, view: MetricView) -> None:
        with self._lock:
            try:
                self._views.remove(view)
            except ValueError:
                logger.debug("View %r was not registered with the updater", view)

    def __len__(self) -> int:
        with self._lock:
            return len(self._views)

    def update_all(self) -> None:
        with self._lock:
            views = list(self._views)
        with self._update_lock:
            for view in views:
                try:
                    view.sample()
                except Exception:
                    logger.warning("Failed to sample metric view %r", view, exc_info=True)

    def start(self) -> None:
        self._worker.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._worker.stop(timeout=timeout)


class MetricRegistry:
    """Holds named metrics, samples their views and publishes snapshots.

    Args:
        config: A :class:`RegistryConfig`, an omegaconf ``DictConfig`` or a
            plain mapping. Defaults are used when omitted.
        sinks: Sinks receiving :meth:`report` output, in addition to the ones
            declared in ``config.sinks``.
    """

    def __init__(
        self,
        config: RegistryConfig | DictConfig | Mapping[str, Any] | None = None,
        *,
        sinks: Sequence[MetricsSink] | None = None,
    ) -> None:
        if not isinstance(config, RegistryConfig):
            config = RegistryConfig.from_config(config)
        self.config = config
        self._metrics: dict[str, Metric] = {}
        self._lock = threading.Lock()
        self._sinks: list[MetricsSink] = [build_sink(spec) for spec in config.sinks]
        self._sinks.extend(sinks or [])
        self._updater = ViewUpdater(config.sampling_interval_seconds)
        self._reporter = _PeriodicWorker(
            self.report, config.report_interval_seconds, name="metric-reporter"
        )
        self._report_step = 0
        self._started = False

    # ------------------------------------------------------------------
    # registration
    # ------------------------------------------------------------------
    def register(self, name: str, metric: Metric) -> Metric:
        if not isinstance(metric, Metric):
            raise TypeError(f"Cannot register {type(metric).__name__} as a metric")
        with self._lock:
            if name in self._metrics:
                raise ValueError(f"Metric '{name}' is already registered")
            self._metrics[name] = metric
        if isinstance(metric, MetricView):
            self._updater.add(metric)
        logger.debug("Registered metric %s (%s)", name, type(metric).__name__)
        return metric

    def unregister(self, name: str) -> Metric:
        with self._lock:
            metric = self._metrics.pop(name)
        if isinstance(metric, MetricView):
            self._updater.remove(metric)
        logger.debug("Unregistered metric %s", name)
        return metric

    def counter(self, name: str, counter: Optional[Counter] = None) -> Counter:
        return self.register(name, counter if counter is not None else SimpleCounter())

    def gauge(self, name: str, fn: Callable[[], float | int] | Gauge) -> Gauge:
        gauge = fn if isinstance(fn, Gauge) else FunctionGauge(fn)
        return self.register(name, gauge)

    def meter(
        self,
        name: str,
        counter: Optional[Counter] = None,
        time_span_seconds: Optional[int] = None,
    ) -> MeterView:
        view = MeterView(
            counter,
            self._time_span(time_span_seconds),
            sampling_interval_seconds=self.config.sampling_interval_seconds,
        )
        return self.register(name, view)

    def gauge_meter(
        self,
        name: str,
        gauge: Gauge | Callable[[], float | int],
        time_span_seconds: Optional[int] = None,
    ) -> MeterView:
        """Register a meter reporting the rate of change of ``gauge``."""

        if not isinstance(gauge, Gauge):
            gauge = FunctionGauge(gauge)
        view = MeterView.from_gauge(
            gauge,
            self._time_span(time_span_seconds),
            sampling_interval_seconds=self.config.sampling_interval_seconds,
        )
        return self.register(name, view)

    def _time_span(self, time_span_seconds: Optional[int]) -> int:
        if time_span_seconds is None:
            return self.config.default_time_span_seconds
        return time_span_seconds

    def get(self, name: str) -> Metric:
        with self._lock:
            return self._metrics[name]

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._metrics)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._metrics

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)

    # ------------------------------------------------------------------
    # sampling and reporting
    # ------------------------------------------------------------------
    def update_views(self) -> None:
        """Run one sampling tick synchronously."""

        self._updater.update_all()

    def snapshot(self) -> dict[str, float]:
        with self._lock:
            items = list(self._metrics.items())
        values: dict[str, float] = {}
        for name, metric in items:
            if isinstance(metric, Meter):
                values[f"{name}.count"] = metric.current_count()
                values[f"{name}.rate"] = metric.current_rate()
            elif isinstance(metric, Counter):
                values[name] = metric.get_count()
            elif isinstance(metric, Gauge):
                values[name] = metric.get_value()
        return values

    def report(self) -> MetricsEvent:
        with self._lock:
            step = self._report_step
            self._report_step += 1
        event = MetricsEvent(
            timestamp=time.time(),
            scope=self.config.scope,
            metrics=self.snapshot(),
            step=step,
            process_id=os.getpid(),
        )
        for sink in self._sinks:
            try:
                sink.write(event)
            except Exception:
                logger.warning("Metrics sink %s failed", type(sink).__name__, exc_info=True)
        return event

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._started:
            raise RuntimeError("MetricRegistry has already been started")
        self._updater.start()
        if self._sinks:
            self._reporter.start()
        self._started = True
        logger.info(
            "Metric registry '%s' started (sampling every %ss, %d sinks)",
            self.config.scope,
            self.config.sampling_interval_seconds,
            len(self._sinks),
        )

    def close(self, timeout: float | None = 5.0) -> None:
        self._updater.stop(timeout=timeout)
        self._reporter.stop(timeout=timeout)
        for sink in self._sinks:
            try:
                sink.close()
            except Exception:
                logger.warning("Failed to close metrics sink %s", type(sink).__name__, exc_info=True)
        self._sinks = []
        self._started = False
        logger.info("Metric registry '%s' closed", self.config.scope)

    def __enter__(self) -> "MetricRegistry":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["MetricRegistry", "ViewUpdater"]
