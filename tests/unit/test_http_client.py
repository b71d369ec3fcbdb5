"""Unit tests for the urllib transport"""
import http.client
import socket
from urllib.error import HTTPError
from urllib.parse import parse_qsl, urlsplit

import pytest

from graphite_client.errors import TransportError, UrlParseError
from graphite_client.http_client import GraphiteHttpClient, parse_base_url


class TestParseBaseUrl:
    """Test base URL checks"""

    def test_valid(self):
        parts = parse_base_url("https://graphite.example.com:8443/graphite")
        assert parts.scheme == "https"
        assert parts.netloc == "graphite.example.com:8443"
        assert parts.path == "/graphite"

    @pytest.mark.parametrize("url", ["", "graphite:8080", "/render", "mailto:ops@example.com", "http://[::1"])
    def test_invalid(self, url):
        with pytest.raises(UrlParseError):
            parse_base_url(url)


class TestBuildUrl:
    """Test per-request URL construction"""

    def test_repeated_keys_in_order(self):
        http = GraphiteHttpClient("http://graphite")
        url = http.build_url("/render", [("target", "a.*"), ("target", "b"), ("format", "json")])

        parts = urlsplit(url)
        assert parts.path == "/render"
        assert parse_qsl(parts.query) == [("target", "a.*"), ("target", "b"), ("format", "json")]

    @pytest.mark.parametrize("base", ["http://graphite/web", "http://graphite/web/"])
    def test_base_path_joined(self, base):
        http = GraphiteHttpClient(base)
        assert urlsplit(http.build_url("/metrics/find")).path == "/web/metrics/find"

    def test_base_query_and_fragment_replaced(self):
        http = GraphiteHttpClient("http://graphite/?x=1#top")
        assert http.build_url("/render", [("format", "json")]) == "http://graphite/render?format=json"

    def test_base_never_mutated(self):
        http = GraphiteHttpClient("http://graphite/web")
        before = http.base_url

        http.build_url("/render", [("target", "a")])
        http.build_url("/metrics/find", [("query", "b")])

        assert http.base_url is before
        assert http.base_url.geturl() == "http://graphite/web"


class TestGet:
    """Test GET requests and error mapping"""

    def test_returns_body_and_passes_timeout(self, mock_urlopen):
        mock_urlopen.respond(b'[{"ok": 1}]')
        http = GraphiteHttpClient("http://graphite", timeout=4)

        assert http.get("/render") == b'[{"ok": 1}]'

        request = mock_urlopen.call_args[0][0]
        assert request.get_method() == "GET"
        assert request.full_url == "http://graphite/render"
        assert mock_urlopen.call_args[1]["timeout"] == 4
        assert mock_urlopen.call_args[1]["context"] is None

    def test_http_error(self, mock_urlopen):
        mock_urlopen.side_effect = HTTPError("http://graphite/render", 404, "Not Found", {}, None)

        with pytest.raises(TransportError) as excinfo:
            GraphiteHttpClient("http://graphite").get("/render")

        assert excinfo.value.status == 404
        assert "HTTP 404" in str(excinfo.value)

    def test_timeout(self, mock_urlopen):
        mock_urlopen.side_effect = socket.timeout("timed out")

        with pytest.raises(TransportError, match="timed out") as excinfo:
            GraphiteHttpClient("http://graphite").get("/render")

        assert excinfo.value.status is None

    def test_bad_status_line(self, mock_urlopen):
        mock_urlopen.side_effect = http.client.BadStatusLine("GARBAGE")

        with pytest.raises(TransportError, match="GARBAGE") as excinfo:
            GraphiteHttpClient("http://graphite").get("/render")

        assert isinstance(excinfo.value.__cause__, http.client.BadStatusLine)

    def test_truncated_body(self, mock_urlopen):
        mock_urlopen.return_value.read.side_effect = http.client.IncompleteRead(b"0123456789", 90)

        with pytest.raises(TransportError) as excinfo:
            GraphiteHttpClient("http://graphite").get("/render")

        assert isinstance(excinfo.value.__cause__, http.client.IncompleteRead)

    def test_truncated_body_from_server(self, raw_server):
        raw_server.reply = b"HTTP/1.1 200 OK\r\nContent-Length: 100\r\n\r\n0123456789"

        with pytest.raises(TransportError):
            GraphiteHttpClient(raw_server.base_url, timeout=5).get("/render")

    def test_bad_status_line_from_server(self, raw_server):
        raw_server.reply = b"GARBAGE\r\n\r\n"

        with pytest.raises(TransportError):
            GraphiteHttpClient(raw_server.base_url, timeout=5).get("/render")

    def test_verified_tls_by_default(self):
        http = GraphiteHttpClient("https://graphite")
        assert http._ssl_context.check_hostname is True
