"""
Series and datapoint types.

A decoded series keeps its numeric tokens exactly as written on the wire
(JsonNumber). Whether the series holds integers or floats is only decided when
the caller asks for as_ints() or as_floats().
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import pandas as pd

from .errors import ConversionError, GraphiteError


class JsonNumber(str):
    """JSON number literal kept as text, e.g. JsonNumber("185.0")."""

    def __repr__(self) -> str:
        return f"JsonNumber({str.__repr__(self)})"


# (value token or None, timestamp token)
RawPoint = Tuple[Optional[JsonNumber], JsonNumber]

_VALUE_TYPES = ("float", "int")

_INT_LITERAL = re.compile(r"-?[0-9]+")
# below the interpreter's str->int digit limit (4300 by default)
_DIGIT_CHUNK = 1000


@dataclass(frozen=True)
class IntDatapoint:
    time: datetime
    value: Optional[int] = None

    @property
    def has_value(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class FloatDatapoint:
    time: datetime
    value: Optional[float] = None

    @property
    def has_value(self) -> bool:
        return self.value is not None


def _parse_time(token) -> datetime:
    if not isinstance(token, JsonNumber):
        raise ConversionError(f"timestamp not numeric: {token!r}")
    try:
        seconds = int(token)
    except ValueError as e:
        raise ConversionError(f"timestamp not numeric: {token} is not an integer") from e
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ConversionError(f"timestamp out of range: {token}") from e


def _parse_long_int(literal: str) -> int:
    """Exact int of a decimal literal of any length, in fixed-size digit chunks."""
    digits = literal.lstrip("-")
    value = 0
    for start in range(0, len(digits), _DIGIT_CHUNK):
        chunk = digits[start:start + _DIGIT_CHUNK]
        value = value * 10 ** len(chunk) + int(chunk)
    return -value if literal.startswith("-") else value


def _parse_int_value(token) -> Optional[int]:
    if token is None:
        return None
    if not isinstance(token, JsonNumber):
        raise ConversionError(f"value not numeric: {token!r}")
    if _INT_LITERAL.fullmatch(token):
        return _parse_long_int(token)

    # Written with a decimal point: the series is floating point.
    if "." in token:
        raise ConversionError(f"value {token} is not an integer")

    # Exponent form such as 2e3: parse as float, truncate toward zero.
    try:
        return int(float(token))
    except (ValueError, OverflowError) as e:
        raise ConversionError(f"value not numeric: {token}") from e


def _parse_float_value(token) -> Optional[float]:
    if token is None:
        return None
    if not isinstance(token, JsonNumber):
        raise ConversionError(f"value not numeric: {token!r}")
    try:
        return float(token)
    except ValueError as e:
        raise ConversionError(f"value not numeric: {token}") from e


@dataclass(frozen=True)
class RawSeries:
    """One decoded series: target name plus untyped (value, timestamp) tokens in wire order."""
    target: str
    points: Tuple[RawPoint, ...] = ()

    def as_ints(self) -> List[IntDatapoint]:
        """
        Convert every point to IntDatapoint.

        Raises:
            ConversionError: On a non-integer timestamp, a float literal value
                or a token that is not a number
        """
        return [IntDatapoint(_parse_time(ts), _parse_int_value(value)) for value, ts in self.points]

    def as_floats(self) -> List[FloatDatapoint]:
        """
        Convert every point to FloatDatapoint.

        Raises:
            ConversionError: On a non-integer timestamp or a token that is not a number
        """
        return [FloatDatapoint(_parse_time(ts), _parse_float_value(value)) for value, ts in self.points]

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class Datapoints:
    """
    Result of a single-series query.

    Holds either a RawSeries or the error that stopped the query. A stored
    error is re-raised by both typed accessors without further work, so a
    caller can chain `client.query(...).as_floats()` and handle one exception.
    """
    series: Optional[RawSeries] = None
    error: Optional[GraphiteError] = None

    @classmethod
    def of(cls, series: RawSeries) -> "Datapoints":
        return cls(series=series)

    @classmethod
    def failed(cls, error: GraphiteError) -> "Datapoints":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def target(self) -> str:
        return self.series.target if self.series is not None else ""

    @property
    def points(self) -> Tuple[RawPoint, ...]:
        return self.series.points if self.series is not None else ()

    def _require_series(self) -> RawSeries:
        if self.error is not None:
            raise self.error
        if self.series is None:
            return RawSeries(target="")
        return self.series

    def as_ints(self) -> List[IntDatapoint]:
        return self._require_series().as_ints()

    def as_floats(self) -> List[FloatDatapoint]:
        return self._require_series().as_floats()

    def to_series(self, as_type: str = "float") -> pd.Series:
        """
        Typed points as a pandas Series indexed by UTC timestamp.

        Missing values become NaN for floats and <NA> (nullable Int64) for ints.
        """
        if as_type not in _VALUE_TYPES:
            raise ValueError(f"as_type must be one of {_VALUE_TYPES}, got {as_type!r}")

        points = self.as_ints() if as_type == "int" else self.as_floats()
        index = pd.DatetimeIndex([p.time for p in points], name="timestamp")
        dtype = "Int64" if as_type == "int" else "float64"
        return pd.Series([p.value for p in points], index=index, dtype=dtype, name=self.target)


class MultiDatapoints(tuple):
    """Ordered, immutable collection of Datapoints, one per matched series."""

    def as_map(self) -> Dict[str, Datapoints]:
        """Map target name to Datapoints. A repeated target keeps the last entry."""
        return {dp.target: dp for dp in self}

    def targets(self) -> List[str]:
        return [dp.target for dp in self]

    def to_frame(self, as_type: str = "float") -> pd.DataFrame:
        """
        Long-form DataFrame with columns: target, timestamp, value.

        Rows keep series order, then wire order within each series.
        """
        if as_type not in _VALUE_TYPES:
            raise ValueError(f"as_type must be one of {_VALUE_TYPES}, got {as_type!r}")

        dtype = "Int64" if as_type == "int" else "float64"
        targets, times, values = [], [], []
        for dp in self:
            points = dp.as_ints() if as_type == "int" else dp.as_floats()
            for p in points:
                targets.append(dp.target)
                times.append(p.time)
                values.append(p.value)

        return pd.DataFrame({
            "target": pd.Series(targets, dtype="object"),
            "timestamp": pd.to_datetime(pd.Series(times, dtype="object"), utc=True),
            "value": pd.Series(values, dtype=dtype),
        })
