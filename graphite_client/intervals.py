"""
Time window helpers.

Translates absolute intervals and relative durations into the textual date
formats accepted by Graphite's `from` / `until` parameters.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from .errors import ValidationError


@dataclass(frozen=True)
class TimeInterval:
    """Absolute query window. `from_time` must not be after `to_time`."""
    from_time: datetime
    to_time: datetime

    def validate(self) -> None:
        try:
            reversed_bounds = self.from_time > self.to_time
        except TypeError as e:
            raise ValidationError("from_time and to_time must both be naive or both be aware") from e
        if reversed_bounds:
            raise ValidationError(
                f"from_time ({self.from_time}) must not be after to_time ({self.to_time})"
            )


def format_absolute(t: datetime) -> str:
    """
    Render a timestamp as HH:MM_YYYYMMDD.

    Uses the datetime's own wall-clock fields: naive values are taken as local
    time, aware values are rendered in their own zone.
    """
    return f"{t.hour:02d}:{t.minute:02d}_{t.year}{t.month:02d}{t.day:02d}"


def format_relative(ago: timedelta) -> str:
    """
    Render "ago" as a relative Graphite offset, e.g. timedelta(minutes=5) -> "-5minutes".

    `ago` is a positive duration meaning how far in the past; it is rounded
    half-up to whole minutes.

    Raises:
        ValidationError: If `ago` is zero or negative
    """
    if ago <= timedelta(0):
        raise ValidationError(f"duration is expected to be positive, got {ago}")

    minutes = int(ago.total_seconds() / 60 + 0.5)
    return f"{-minutes}minutes"
