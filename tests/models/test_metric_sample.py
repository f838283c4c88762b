from __future__ import annotations

from monitoring_bridge.models.metric import MetricSample, format_value


def test_format_value_integers_and_bools() -> None:
    assert format_value(5) == "5"
    assert format_value(0) == "0"
    assert format_value(True) == "1"
    assert format_value(False) == "0"


def test_format_value_integral_float_drops_fraction() -> None:
    assert format_value(512.0) == "512"
    assert format_value(0.0) == "0"


def test_format_value_fractional_float() -> None:
    assert format_value(12.5) == "12.5"
    assert format_value(0.1) == "0.1"


def test_sample_value_text() -> None:
    sample = MetricSample("gt_cpu_usage", 3.0)
    assert sample.value_text == "3"
    assert sample.labels == {}
    assert sample.timestamp_seconds is None
