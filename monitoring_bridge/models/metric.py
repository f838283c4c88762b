from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class MetricSample:
    """One value of a metric family, with its labels.

    Labels render in insertion order, so a family built from the same
    snapshot always produces the same text.
    """

    name: str
    value: int | float
    labels: dict[str, str] = field(default_factory=dict)
    timestamp_seconds: int | None = None

    @property
    def value_text(self) -> str:
        return format_value(self.value)


def format_value(value: int | float | bool) -> str:
    """Render a sample value the way the exposition and query APIs expect.

    Integral floats drop the fractional part (3.0 -> "3"); other floats
    use the shortest repr that round-trips.
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)
