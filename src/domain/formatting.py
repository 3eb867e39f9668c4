"""Duration and percentage rendering plus the averaging helpers."""

from __future__ import annotations

import math
import statistics
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

# A second, a minute, an hour and a day.
DURATIONS_MS = (1000, 1000 * 60, 1000 * 60 * 60, 1000 * 60 * 60 * 24)

NOT_AVAILABLE = "N/A"


def ms_to_duration(ms: float, *, omit_days: bool = False, omit_ms: bool = False) -> str:
    """Render milliseconds as `DD:HH:MM:SS.mmm`, dropping leading zero units.

    With `omit_days` the largest unit is hours (which may exceed 23).
    """
    if ms < 0:
        raise ValueError(f"duration must be >= 0, got {ms}")
    remaining = int(ms)
    durations = DURATIONS_MS[:-1] if omit_days else DURATIONS_MS

    parts: list[int] = []
    for duration in reversed(durations):
        value = remaining // duration
        if not parts and value == 0:
            continue
        parts.append(value)
        remaining -= value * duration

    main = ":".join(
        str(value) if index == 0 else f"{value:02d}" for index, value in enumerate(parts)
    ) or "0"
    if omit_ms:
        return main
    return f"{main}.{remaining:03d}"


def duration_in_ms(duration: str) -> int:
    """Parse a `DD:HH:MM:SS.mmm` string (any number of leading units) back to ms."""
    main, _, remainder = duration.partition(".")
    values = [int(value) for value in main.split(":")]
    if len(values) > len(DURATIONS_MS):
        raise ValueError(f"too many units in duration {duration!r}")
    total = sum(value * unit for value, unit in zip(reversed(values), DURATIONS_MS))
    return total + (int(remainder) if remainder else 0)


def round_half_up(value: float, places: int = 0) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def format_ratio(ratio: float, *, add_sign: bool = False) -> str:
    """Render a 0..1 ratio as `NN.NN%`."""
    rendered = f"{round_half_up(ratio * 100, 2)}%"
    if add_sign and ratio > 0:
        return f"+{rendered}"
    return rendered


def format_percentage(amount: int, total: int) -> str:
    if total == 0:
        return NOT_AVAILABLE
    percentage = (Decimal(amount) / Decimal(total) * 100).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )
    return f"{percentage}%"


def format_differential(regular_rate: float, specific_rate: float) -> str:
    """Signed difference between two ratios, e.g. `+3.25%` or `-0.50%`."""
    rate = specific_rate - regular_rate
    sign = "+" if rate > 0 else "-"
    return f"{sign}{round_half_up(abs(rate) * 100, 2)}%"


def floor_average(values: Sequence[float]) -> int | None:
    if not values:
        return None
    return math.floor(sum(values) / len(values))


def rounded_average(values: Sequence[float]) -> int | None:
    if not values:
        return None
    return int(round_half_up(sum(values) / len(values)))


def median(values: Sequence[float]) -> float | None:
    if not values:
        return None
    return statistics.median(values)


__all__ = [
    "DURATIONS_MS",
    "NOT_AVAILABLE",
    "duration_in_ms",
    "floor_average",
    "format_differential",
    "format_percentage",
    "format_ratio",
    "median",
    "ms_to_duration",
    "round_half_up",
    "rounded_average",
]
