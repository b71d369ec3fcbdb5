"""
HTTP transport for the Graphite query client.

Holds the parsed base URL (never mutated after construction) and performs
blocking GET requests with urllib. Each request builds its own URL value from
the base, so one instance can be shared between threads.
"""

import http.client
import logging
import ssl
from typing import Optional, Sequence, Tuple, Union
from urllib.error import HTTPError, URLError
from urllib.parse import SplitResult, urlencode, urlsplit
from urllib.request import Request, urlopen

from .errors import TransportError, UrlParseError

logger = logging.getLogger("graphite_client.http")

QueryParams = Sequence[Tuple[str, str]]


def parse_base_url(url: str) -> SplitResult:
    """
    Parse and check a Graphite base URL (without "/render").

    Raises:
        UrlParseError: If the URL is not an absolute http(s) URL
    """
    try:
        parts = urlsplit(url)
    except (ValueError, AttributeError) as e:
        raise UrlParseError(f"invalid base URL {url!r}: {e}") from e

    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise UrlParseError(f"invalid base URL {url!r}: expected http(s)://host[:port][/path]")
    return parts


class GraphiteHttpClient:
    """HTTP client for communicating with a Graphite web server."""

    def __init__(self, base_url: Union[str, SplitResult], timeout: float = 10, verify_tls: bool = True):
        """
        Initialize HTTP client.

        Args:
            base_url: Base URL of graphite-web (e.g., https://graphite:8080)
            timeout: Request timeout in seconds
            verify_tls: Verify server certificates on HTTPS
        """
        self.base_url = base_url if isinstance(base_url, SplitResult) else parse_base_url(base_url)
        self.timeout = timeout
        self.verify_tls = verify_tls
        self._ssl_context = self._create_ssl_context()

    def _create_ssl_context(self) -> ssl.SSLContext:
        """Create SSL context for HTTPS, optionally trusting any server certificate."""
        ssl_context = ssl.create_default_context()
        if not self.verify_tls:
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE
        return ssl_context

    def build_url(self, endpoint: str, params: Optional[QueryParams] = None) -> str:
        """
        Build a request URL from the base URL, an endpoint path and query parameters.

        The base path is kept: base http://host/graphite with endpoint /render
        gives http://host/graphite/render. Repeated keys are preserved in order.
        """
        path = self.base_url.path.rstrip("/") + "/" + endpoint.lstrip("/")
        query = urlencode(list(params or []))
        return self.base_url._replace(path=path, query=query, fragment="").geturl()

    def get(self, endpoint: str, params: Optional[QueryParams] = None) -> bytes:
        """
        Make a GET request and return the full response body.

        Args:
            endpoint: API endpoint path (e.g., /render)
            params: Query parameters as (key, value) pairs

        Returns:
            Raw response body

        Raises:
            TransportError: On HTTP errors, malformed or truncated responses,
                connection errors or timeouts
        """
        url = self.build_url(endpoint, params)
        req = Request(url, headers={"Accept": "application/json"}, method="GET")

        # Use SSL context for HTTPS URLs
        ssl_context = self._ssl_context if url.startswith("https://") else None

        logger.debug("GET %s", url)
        try:
            with urlopen(req, timeout=self.timeout, context=ssl_context) as resp:
                body = resp.read()
        except HTTPError as e:
            try:
                msg = e.read().decode("utf-8", errors="replace").strip()
            except Exception:
                msg = str(e.reason)
            logger.warning("HTTP %s from %s: %s", e.code, url, msg)
            raise TransportError(f"HTTP {e.code} from {url}: {msg}", status=e.code) from e
        except URLError as e:
            logger.warning("failed to reach %s: %s", url, e.reason)
            raise TransportError(f"failed to reach {url}: {e.reason}") from e
        except (http.client.HTTPException, OSError) as e:
            # truncated bodies, bad status lines, timeouts, resets
            logger.warning("request to %s failed: %s", url, e)
            raise TransportError(f"request to {url} failed: {e}") from e

        logger.debug("received %d bytes from %s", len(body), url)
        return body
