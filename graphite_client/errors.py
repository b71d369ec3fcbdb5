"""
Exception hierarchy for the Graphite query client.

Every failure surfaced by this package derives from GraphiteError, so callers
can catch one type. Lower-level causes (urllib, json, pydantic) are chained.
"""

from typing import Optional


class GraphiteError(Exception):
    """Base class for all graphite_client errors."""


class UrlParseError(GraphiteError):
    """Base URL given at construction is not usable."""


class ValidationError(GraphiteError):
    """Caller supplied an invalid interval or duration."""


class TransportError(GraphiteError):
    """Network or HTTP level failure."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class DecodeError(GraphiteError):
    """Response body is not JSON or does not have the expected shape."""


class CardinalityError(GraphiteError):
    """Single-series query matched zero or several series."""


class ConversionError(GraphiteError):
    """A wire token could not be converted to the requested numeric type."""
