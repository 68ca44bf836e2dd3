"""Sinks that publish registry snapshots."""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

try:  # pragma: no cover - optional dependency
    from torch.utils.tensorboard import SummaryWriter
except Exception:  # pragma: no cover - tensorboard is optional
    SummaryWriter = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MetricsEvent:
    """A single publication of metric values.

    Attributes:
        timestamp: Seconds since the UNIX epoch.
        scope: Name of the registry that produced the snapshot, used as a tag
            prefix by the sinks.
        metrics: Mapping from metric names to numeric values.
        step: Index of the report within the registry's lifetime.
        process_id: Operating system process identifier.
        extra: Arbitrary metadata preserved in structured output.
    """

    timestamp: float
    scope: str
    metrics: Mapping[str, float]
    step: Optional[int] = None
    process_id: Optional[int] = None
    extra: Mapping[str, Any] | None = None


class MetricsSink:
    """Abstract interface implemented by metrics consumers."""

    def write(self, event: MetricsEvent) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def close(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class LoggingMetricsSink(MetricsSink):
    """Writes each event as one log record."""

    def __init__(self, level: int | str = logging.INFO, logger_name: str | None = None) -> None:
        if isinstance(level, str):
            level = logging.getLevelName(level.upper())
            if not isinstance(level, int):
                raise ValueError(f"Unknown log level: {level}")
        self._level = level
        self._logger = logging.getLogger(logger_name) if logger_name else logger

    def write(self, event: MetricsEvent) -> None:
        if not self._logger.isEnabledFor(self._level):
            return
        rendered = " ".join(f"{key}={_format_value(value)}" for key, value in sorted(event.metrics.items()))
        self._logger.log(self._level, "[%s] step=%s %s", event.scope, event.step, rendered)

    def close(self) -> None:
        return None


class JsonlMetricsSink(MetricsSink):
    """Persists metrics as structured JSON lines."""

    def __init__(self, path: os.PathLike[str] | str) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("a", encoding="utf-8")
        self._lock = threading.Lock()

    def write(self, event: MetricsEvent) -> None:
        payload = {
            "timestamp": event.timestamp,
            "scope": event.scope,
            "metrics": dict(event.metrics),
            "step": event.step,
            "process_id": event.process_id,
            "extra": dict(event.extra) if event.extra else None,
        }
        with self._lock:
            self._file.write(json.dumps(payload, sort_keys=True) + "\n")
            self._file.flush()

    def close(self) -> None:
        with self._lock:
            self._file.close()


class TensorBoardMetricsSink(MetricsSink):
    """Emits metrics to TensorBoard via :class:`SummaryWriter`."""

    def __init__(self, log_dir: os.PathLike[str] | str) -> None:
        if SummaryWriter is None:  # pragma: no cover - optional dependency
            raise RuntimeError("TensorBoard is not available in this environment")
        self._writer = SummaryWriter(log_dir=str(log_dir))
        self._event_index = 0

    def write(self, event: MetricsEvent) -> None:
        step = event.step if event.step is not None else self._event_index
        for key, value in event.metrics.items():
            self._writer.add_scalar(tensorboard_tag(event.scope, key), value, step)
        self._event_index += 1

    def close(self) -> None:
        self._writer.flush()
        self._writer.close()


def tensorboard_tag(scope: str, key: str) -> str:
    """Group meter readings by kind, e.g. ``svc/rate/requests`` for ``requests.rate``."""

    name, _, suffix = key.rpartition(".")
    if name and suffix in ("rate", "count"):
        return f"{scope}/{suffix}/{name}"
    return f"{scope}/{key}"


def _format_value(value: float) -> str:
    if isinstance(value, float):
        return f"{value:.4g}"
    return str(value)


def build_sink(spec: Mapping[str, Any]) -> MetricsSink:
    """Construct a sink from a config mapping such as ``{"type": "jsonl", "path": ...}``."""

    options = dict(spec)
    kind = options.pop("type", None)
    if kind == "logging":
        return LoggingMetricsSink(**options)
    if kind == "jsonl":
        return JsonlMetricsSink(**options)
    if kind == "tensorboard":
        return TensorBoardMetricsSink(**options)
    raise ValueError(f"Unsupported metrics sink type: {kind}")


__all__ = [
    "JsonlMetricsSink",
    "LoggingMetricsSink",
    "MetricsEvent",
    "MetricsSink",
    "TensorBoardMetricsSink",
    "build_sink",
    "tensorboard_tag",
]
