"""Graphite render and find API client."""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple
from urllib.parse import SplitResult

from .config import ClientConfig
from .datapoints import Datapoints, FloatDatapoint, IntDatapoint, MultiDatapoints
from .decoder import FindResultItem, decode_find, decode_render, single_series
from .errors import GraphiteError, ValidationError
from .http_client import GraphiteHttpClient
from .intervals import TimeInterval, format_absolute, format_relative

logger = logging.getLogger("graphite_client.client")


def target_params(targets: Sequence[str]) -> List[Tuple[str, str]]:
    """One `target` parameter per pattern, plus format=json."""
    if isinstance(targets, str):
        raise ValidationError(f"targets must be a sequence of patterns, not a single string: {targets!r}")
    params = [("target", t) for t in targets]
    params.append(("format", "json"))
    return params


class GraphiteClient:
    """Client for the Graphite HTTP query API."""

    def __init__(self, base_url: str, timeout: float = 10, verify_tls: bool = True,
                 http_client: Optional[GraphiteHttpClient] = None):
        """
        Initialize Graphite client.

        Args:
            base_url: Base address of graphite-web, without the "/render" suffix
            timeout: Request timeout in seconds
            verify_tls: Verify server certificates on HTTPS
            http_client: Transport to use instead of building one from base_url

        Raises:
            UrlParseError: If base_url is not an absolute http(s) URL
        """
        self.http = http_client or GraphiteHttpClient(base_url, timeout=timeout, verify_tls=verify_tls)

    @classmethod
    def from_url(cls, url: SplitResult, timeout: float = 10, verify_tls: bool = True) -> "GraphiteClient":
        """Create a client from an already parsed base URL."""
        return cls("", http_client=GraphiteHttpClient(url, timeout=timeout, verify_tls=verify_tls))

    @classmethod
    def from_config(cls, config: ClientConfig) -> "GraphiteClient":
        return cls(config.base_url, timeout=config.timeout, verify_tls=config.verify_tls)

    @property
    def base_url(self) -> str:
        return self.http.base_url.geturl()

    # ---------------- render ----------------

    def _render(self, params: List[Tuple[str, str]]) -> MultiDatapoints:
        body = self.http.get("/render", params)
        series = decode_render(body)
        logger.debug("render returned %d series", len(series))
        return MultiDatapoints(Datapoints.of(s) for s in series)

    def _render_single(self, params: List[Tuple[str, str]]) -> Datapoints:
        try:
            body = self.http.get("/render", params)
            return Datapoints.of(single_series(decode_render(body)))
        except GraphiteError as e:
            return Datapoints.failed(e)

    def query(self, target: str, interval: TimeInterval) -> Datapoints:
        """
        Fetch exactly one series over an absolute interval.

        Integer/float interpretation is deferred to the returned Datapoints.
        Errors (invalid interval, transport, decode, zero or several matched
        series) are stored on the result and raised by as_ints()/as_floats().
        """
        try:
            interval.validate()
        except GraphiteError as e:
            return Datapoints.failed(e)

        params = target_params([target])
        params.append(("from", format_absolute(interval.from_time)))
        params.append(("until", format_absolute(interval.to_time)))
        return self._render_single(params)

    def query_since(self, target: str, ago: timedelta) -> Datapoints:
        """Fetch exactly one series from `ago` before now until now."""
        try:
            since = format_relative(ago)
        except GraphiteError as e:
            return Datapoints.failed(e)

        params = target_params([target])
        params.append(("from", since))
        return self._render_single(params)

    def query_multi(self, targets: Sequence[str], interval: TimeInterval) -> MultiDatapoints:
        """
        Fetch any number of series over an absolute interval.

        Glob patterns are resolved by Graphite; every matched series is
        returned, including none.

        Raises:
            ValidationError: If the interval is invalid or targets is a bare string
            TransportError: On HTTP failures
            DecodeError: On a malformed response
        """
        interval.validate()

        params = target_params(targets)
        params.append(("from", format_absolute(interval.from_time)))
        params.append(("until", format_absolute(interval.to_time)))
        return self._render(params)

    def query_multi_since(self, targets: Sequence[str], ago: timedelta) -> MultiDatapoints:
        """Fetch any number of series from `ago` before now until now."""
        params = target_params(targets)
        params.append(("from", format_relative(ago)))
        return self._render(params)

    def query_ints(self, target: str, interval: TimeInterval) -> List[IntDatapoint]:
        return self.query(target, interval).as_ints()

    def query_floats(self, target: str, interval: TimeInterval) -> List[FloatDatapoint]:
        return self.query(target, interval).as_floats()

    def query_ints_since(self, target: str, ago: timedelta) -> List[IntDatapoint]:
        return self.query_since(target, ago).as_ints()

    def query_floats_since(self, target: str, ago: timedelta) -> List[FloatDatapoint]:
        return self.query_since(target, ago).as_floats()

    # ---------------- find ----------------

    def find(self, query: str, from_time: Optional[datetime] = None,
             until: Optional[datetime] = None) -> List[FindResultItem]:
        """
        Query the metrics tree, e.g. find("servers.*.cpu").

        Raises:
            TransportError: On HTTP failures
            DecodeError: On a malformed response
        """
        params = [("query", query)]
        if from_time is not None:
            params.append(("from", format_absolute(from_time)))
        if until is not None:
            params.append(("until", format_absolute(until)))

        body = self.http.get("/metrics/find", params)
        return decode_find(body)
