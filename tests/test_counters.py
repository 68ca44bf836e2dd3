from __future__ import annotations

import threading

import pytest

from meterkit import FunctionGauge, GaugeCounter, SettableGauge, SimpleCounter, UnsupportedOperation
from meterkit.counters import to_long


def test_simple_counter_inc_dec() -> None:
    counter = SimpleCounter()
    counter.inc()
    counter.inc(10)
    counter.dec()
    counter.dec(3)
    assert counter.get_count() == 7


def test_simple_counter_concurrent_increments_are_not_lost() -> None:
    counter = SimpleCounter()

    def work() -> None:
        for _ in range(10_000):
            counter.inc()

    threads = [threading.Thread(target=work) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert counter.get_count() == 80_000


def test_gauge_counter_rejects_mutation() -> None:
    adapter = GaugeCounter(SettableGauge(3))
    with pytest.raises(UnsupportedOperation):
        adapter.inc()
    with pytest.raises(UnsupportedOperation):
        adapter.inc(5)
    with pytest.raises(UnsupportedOperation):
        adapter.dec()
    with pytest.raises(UnsupportedOperation):
        adapter.dec(5)
    assert adapter.get_count() == 3


def test_gauge_counter_reads_live_value() -> None:
    gauge = SettableGauge(1.9)
    adapter = GaugeCounter(gauge)
    assert adapter.get_count() == 1
    gauge.set(42.7)
    assert adapter.get_count() == 42
    gauge.set(-2.5)
    assert adapter.get_count() == -2


def test_gauge_counter_calls_function_gauge_each_read() -> None:
    calls = []

    def read() -> int:
        calls.append(1)
        return len(calls) * 10

    adapter = GaugeCounter(FunctionGauge(read))
    assert adapter.get_count() == 10
    assert adapter.get_count() == 20


def test_to_long_narrowing() -> None:
    assert to_long(3.99) == 3
    assert to_long(-3.99) == -3
    assert to_long(float("nan")) == 0
    assert to_long(float("inf")) == 2**63 - 1
    assert to_long(float("-inf")) == -(2**63)
    assert to_long(2**70) == 2**63 - 1


def test_function_gauge_requires_callable() -> None:
    with pytest.raises(TypeError):
        FunctionGauge(5)  # type: ignore[arg-type]
