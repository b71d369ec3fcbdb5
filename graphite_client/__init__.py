"""
Graphite query client

Organized by concern:
- intervals.py: absolute/relative time window formatting
- decoder.py: render and find response decoding
- datapoints.py: deferred int/float series and typed datapoints
- http_client.py: urllib transport with an immutable base URL
- client.py: GraphiteClient query API
- config.py: YAML/environment configuration
"""

from .client import GraphiteClient
from .config import ClientConfig, load_config, load_config_from
from .datapoints import (
    Datapoints,
    FloatDatapoint,
    IntDatapoint,
    JsonNumber,
    MultiDatapoints,
    RawSeries,
)
from .decoder import FindResultItem, decode_find, decode_render
from .errors import (
    CardinalityError,
    ConversionError,
    DecodeError,
    GraphiteError,
    TransportError,
    UrlParseError,
    ValidationError,
)
from .intervals import TimeInterval, format_absolute, format_relative

__all__ = [
    # Client
    'GraphiteClient',

    # Configuration
    'ClientConfig',
    'load_config',
    'load_config_from',

    # Series types
    'Datapoints',
    'MultiDatapoints',
    'RawSeries',
    'IntDatapoint',
    'FloatDatapoint',
    'JsonNumber',
    'FindResultItem',

    # Decoding
    'decode_render',
    'decode_find',

    # Time windows
    'TimeInterval',
    'format_absolute',
    'format_relative',

    # Errors
    'GraphiteError',
    'UrlParseError',
    'ValidationError',
    'TransportError',
    'DecodeError',
    'CardinalityError',
    'ConversionError',
]
