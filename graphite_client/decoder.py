"""
Graphite response decoding.

Render responses are parsed with number hooks so every numeric literal is kept
as JsonNumber text; shape is then checked with pydantic models. Find responses
map the 0/1 wire flags to booleans.
"""

import json
import logging
from typing import Any, List, Sequence, Tuple

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .datapoints import JsonNumber, RawSeries
from .errors import CardinalityError, DecodeError

logger = logging.getLogger("graphite_client.decoder")


class RenderTarget(BaseModel):
    """One element of a /render?format=json response."""
    target: str
    # [[value or null, unix seconds], ...]; tokens stay JsonNumber, never coerced
    datapoints: List[Tuple[Any, Any]]

    @field_validator("target", mode="before")
    @classmethod
    def target_is_json_string(cls, v):
        # JsonNumber subclasses str; a numeric target must not pass as a name
        if isinstance(v, JsonNumber):
            raise ValueError(f"target must be a string, got number {v}")
        return v


class FindResultItem(BaseModel):
    """One node returned by /metrics/find."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    leaf: bool
    text: str
    id: str
    expandable: bool
    allow_children: bool = Field(alias="allowChildren")

    @field_validator("leaf", "expandable", "allow_children", mode="before")
    @classmethod
    def flag_to_bool(cls, v):
        # Graphite sends 0/1 integers; anything above zero is set
        return int(v) > 0


_render_adapter = pydantic.TypeAdapter(List[RenderTarget])
_find_adapter = pydantic.TypeAdapter(List[FindResultItem])


def _loads(body: bytes) -> Any:
    try:
        return json.loads(
            body,
            parse_int=JsonNumber,
            parse_float=JsonNumber,
            parse_constant=JsonNumber,
        )
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("response is not valid JSON: %s", e)
        raise DecodeError(f"response is not valid JSON: {e}") from e


def decode_render(body: bytes) -> List[RawSeries]:
    """
    Decode a render response into RawSeries, in response order.

    Raises:
        DecodeError: If the body is not JSON or not an array of
            {"target": str, "datapoints": [[value, timestamp], ...]}
    """
    data = _loads(body)
    try:
        targets = _render_adapter.validate_python(data)
    except pydantic.ValidationError as e:
        logger.warning("unexpected render response shape: %s", e)
        raise DecodeError(f"unexpected render response shape: {e}") from e

    return [RawSeries(target=t.target, points=tuple(t.datapoints)) for t in targets]


def decode_find(body: bytes) -> List[FindResultItem]:
    """
    Decode a /metrics/find response.

    Raises:
        DecodeError: If the body is not JSON or items miss required fields
    """
    data = _loads(body)
    try:
        return _find_adapter.validate_python(data)
    except (pydantic.ValidationError, ValueError, TypeError) as e:
        logger.warning("unexpected find response shape: %s", e)
        raise DecodeError(f"unexpected find response shape: {e}") from e


def single_series(series: Sequence[RawSeries]) -> RawSeries:
    """
    Return the only series of a response.

    Raises:
        CardinalityError: If no series or more than one series came back
    """
    if not series:
        raise CardinalityError("unexpected Graphite response: no target matched")
    if len(series) > 1:
        raise CardinalityError(
            f"unexpected Graphite response: more than one target matched ({len(series)})"
        )
    return series[0]
