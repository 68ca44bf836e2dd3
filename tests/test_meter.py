from __future__ import annotations

import pytest

from meterkit import MeterView, SettableGauge, SimpleCounter, UnsupportedOperation


def make_meter(time_span: int = 10, counter: SimpleCounter | None = None) -> MeterView:
    return MeterView(counter, time_span, sampling_interval_seconds=5)


@pytest.mark.parametrize(
    ("requested", "effective", "length"),
    [(62, 60, 13), (60, 60, 13), (3, 5, 2), (5, 5, 2), (10, 10, 3), (0, 5, 2)],
)
def test_time_span_is_floored_to_interval(requested: int, effective: int, length: int) -> None:
    meter = make_meter(requested)
    assert meter.time_span_seconds == effective
    assert meter.history_length == length


def test_rate_is_zero_before_first_sample() -> None:
    meter = make_meter()
    meter.record_event(100)
    assert meter.current_rate() == 0.0
    assert meter.current_count() == 100


def test_single_sample_uses_zero_as_oldest_value() -> None:
    meter = make_meter()
    meter.record_event(50)
    meter.sample()
    assert meter.current_rate() == pytest.approx(5.0)


def test_steady_state_rate_converges() -> None:
    meter = make_meter()
    for _ in range(10):
        meter.record_event(20)
        meter.sample()
    assert meter.current_rate() == pytest.approx(20 / 5)


def test_rate_reflects_only_the_window() -> None:
    meter = make_meter()
    meter.record_event(1000)
    meter.sample()
    meter.sample()
    meter.sample()
    assert meter.current_rate() == 0.0


def test_decreasing_counter_yields_negative_rate() -> None:
    counter = SimpleCounter(100)
    meter = make_meter(counter=counter)
    meter.sample()
    meter.sample()
    counter.dec(40)
    meter.sample()
    assert meter.current_rate() < 0
    assert meter.current_rate() == pytest.approx(-4.0)


def test_reads_do_not_advance_state() -> None:
    meter = make_meter()
    meter.record_event(30)
    meter.sample()
    rates = [meter.current_rate() for _ in range(5)]
    counts = [meter.current_count() for _ in range(5)]
    assert rates == [rates[0]] * 5
    assert rates[0] == pytest.approx(3.0)
    assert counts == [30] * 5


def test_current_count_bypasses_sampling() -> None:
    meter = make_meter()
    meter.sample()
    meter.record_event(7)
    assert meter.current_count() == 7
    assert meter.current_rate() == 0.0


def test_default_counter_is_created() -> None:
    meter = MeterView(time_span_seconds=10, sampling_interval_seconds=5)
    assert isinstance(meter.counter, SimpleCounter)
    meter.record_event()
    assert meter.current_count() == 1


def test_gauge_meter_reports_rate_of_change() -> None:
    gauge = SettableGauge(0)
    meter = MeterView.from_gauge(gauge, 10, sampling_interval_seconds=5)
    gauge.set(10)
    meter.sample()
    gauge.set(30.9)
    meter.sample()
    assert meter.current_count() == 30
    assert meter.current_rate() == pytest.approx(3.0)
    with pytest.raises(UnsupportedOperation):
        meter.record_event()


def test_invalid_interval_rejected() -> None:
    with pytest.raises(ValueError):
        MeterView(time_span_seconds=10, sampling_interval_seconds=0)


def test_whole_number_float_interval_is_accepted() -> None:
    meter = MeterView(time_span_seconds=10.0, sampling_interval_seconds=5.0)
    assert meter.sampling_interval_seconds == 5
    assert meter.time_span_seconds == 10
    assert meter.history_length == 3


def test_fractional_interval_rejected() -> None:
    with pytest.raises(ValueError):
        MeterView(time_span_seconds=10, sampling_interval_seconds=2.5)
    with pytest.raises(ValueError):
        MeterView(time_span_seconds=7.5, sampling_interval_seconds=5)
