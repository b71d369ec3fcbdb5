"""Pytest configuration and shared fixtures"""
import socketserver
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import MagicMock, patch
from urllib.parse import urlsplit

import pytest


# Real-world shaped render responses
FLOAT_SERIES_RESPONSE = (
    b'[{"target": "machine.jvm.gc.PS-MarkSweep.runs", "datapoints": '
    b'[[185.0, 1409763000], [741.0, 1409790300], [null, 1409790600], [756.0, 1409790900]]}]'
)

INT_SERIES_RESPONSE = (
    b'[{"target": "machine.jvm.gc.PS-MarkSweep.runs", "datapoints": '
    b'[[185, 1409763000], [741, 1409790300], [null, 1409790600], [756, 1409790900]]}]'
)

MULTI_SERIES_RESPONSE = (
    b'[{"target": "machine.jvm.gc.PS-MarkSweep.runs", "datapoints": '
    b'[[185, 1409763000], [741, 1409790300], [null, 1409790600]]},'
    b'{"target": "machine2.jvm.gc.PS-MarkSweep.runs", "datapoints": '
    b'[[185, 1409763000], [741, 1409790300]]}]'
)

FIND_RESPONSE = (
    b'[{"leaf": 0, "text": "machine", "id": "machine", "expandable": 1, "allowChildren": 1},'
    b' {"leaf": 1, "text": "runs", "id": "machine.runs", "expandable": 0, "allowChildren": 0}]'
)


@pytest.fixture
def mock_urlopen():
    """Patch urlopen in the transport; call respond(body) to set the response body"""
    with patch('graphite_client.http_client.urlopen') as urlopen:
        mock_response = MagicMock()
        mock_response.read.return_value = b"[]"
        mock_response.__enter__.return_value = mock_response
        urlopen.return_value = mock_response

        def respond(body: bytes):
            mock_response.read.return_value = body

        urlopen.respond = respond
        yield urlopen


class _GraphiteHandler(BaseHTTPRequestHandler):
    """Serves canned bodies keyed by request path and records every request"""

    def do_GET(self):
        self.server.requests.append(self.path)
        status, body = self.server.responses.get(urlsplit(self.path).path, (404, b"not found"))
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def graphite_server(monkeypatch):
    """Local HTTP server standing in for graphite-web"""
    # Never route loopback requests through a proxy from the environment
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")

    server = ThreadingHTTPServer(("127.0.0.1", 0), _GraphiteHandler)
    server.responses = {}
    server.requests = []
    server.base_url = f"http://127.0.0.1:{server.server_port}"

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield server

    # Cleanup
    server.shutdown()
    server.server_close()
    thread.join(timeout=5)


class _RawReplyHandler(socketserver.StreamRequestHandler):
    """Reads one request head, writes the server's raw reply bytes and hangs up"""

    def handle(self):
        while self.rfile.readline() not in (b"\r\n", b"\n", b""):
            pass
        self.wfile.write(self.server.reply)


@pytest.fixture
def raw_server(monkeypatch):
    """TCP server answering every request with raw bytes; set .reply before use"""
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")

    server = socketserver.ThreadingTCPServer(("127.0.0.1", 0), _RawReplyHandler)
    server.daemon_threads = True
    server.reply = b""
    server.base_url = f"http://127.0.0.1:{server.server_address[1]}"

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield server

    server.shutdown()
    server.server_close()
    thread.join(timeout=5)
