from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional

from omegaconf import DictConfig, OmegaConf

from . import interfaces
from .meter import DEFAULT_TIME_SPAN_SECONDS


@dataclass
class RegistryConfig:
    """Settings for a :class:`~meterkit.registry.MetricRegistry`."""

    scope: str = "meterkit"
    sampling_interval_seconds: int = field(
        default_factory=lambda: interfaces.SAMPLING_INTERVAL_SECONDS
    )
    default_time_span_seconds: int = DEFAULT_TIME_SPAN_SECONDS
    report_interval_seconds: float = 10.0
    sinks: list[dict[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.sampling_interval_seconds = interfaces.whole_seconds(
            self.sampling_interval_seconds, "sampling_interval_seconds"
        )
        self.default_time_span_seconds = interfaces.whole_seconds(
            self.default_time_span_seconds, "default_time_span_seconds"
        )
        if self.sampling_interval_seconds <= 0:
            raise ValueError("sampling_interval_seconds must be positive")
        if self.report_interval_seconds <= 0:
            raise ValueError("report_interval_seconds must be positive")
        if self.default_time_span_seconds <= 0:
            raise ValueError("default_time_span_seconds must be positive")

    @classmethod
    def from_config(cls, cfg: Optional[DictConfig | Mapping[str, Any]]) -> "RegistryConfig":
        if cfg is None:
            return cls()
        if isinstance(cfg, DictConfig):
            data = OmegaConf.to_container(cfg, resolve=True)
        else:
            data = dict(cfg)
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown registry config keys: {', '.join(unknown)}")
        if "sinks" in data:
            data["sinks"] = [dict(spec) for spec in data["sinks"] or []]
        return cls(**data)


__all__ = ["RegistryConfig"]
