from __future__ import annotations

import pytest
from omegaconf import OmegaConf

from meterkit import RegistryConfig


def test_from_dictconfig() -> None:
    cfg = OmegaConf.create(
        {
            "scope": "api",
            "sampling_interval_seconds": 2,
            "default_time_span_seconds": 30,
            "sinks": [{"type": "logging", "level": "DEBUG"}],
        }
    )
    config = RegistryConfig.from_config(cfg)
    assert config.scope == "api"
    assert config.sampling_interval_seconds == 2
    assert config.default_time_span_seconds == 30
    assert config.sinks == [{"type": "logging", "level": "DEBUG"}]


def test_from_none_uses_defaults() -> None:
    config = RegistryConfig.from_config(None)
    assert config.scope == "meterkit"
    assert config.sinks == []


def test_unknown_keys_rejected() -> None:
    with pytest.raises(ValueError):
        RegistryConfig.from_config({"sampling_interval": 5})


def test_invalid_values_rejected() -> None:
    with pytest.raises(ValueError):
        RegistryConfig(sampling_interval_seconds=0)
    with pytest.raises(ValueError):
        RegistryConfig(report_interval_seconds=-1.0)


def test_whole_number_float_interval_is_coerced() -> None:
    config = RegistryConfig.from_config(
        OmegaConf.create({"sampling_interval_seconds": 1.0, "default_time_span_seconds": 10.0})
    )
    assert config.sampling_interval_seconds == 1
    assert isinstance(config.sampling_interval_seconds, int)
    assert isinstance(config.default_time_span_seconds, int)


@pytest.mark.parametrize("interval", [1.5, "5", True])
def test_non_integer_interval_rejected(interval) -> None:
    with pytest.raises(ValueError):
        RegistryConfig(sampling_interval_seconds=interval)
