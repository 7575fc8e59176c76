"""Shared pytest fixtures and fakes for the Weatherly test suite."""

import json
import logging
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests
import structlog

from config import ClientConfig, GatewayConfig

LONDON_PAYLOAD = {
    "name": "London",
    "main": {"temp": 15.2},
    "weather": [{"icon": "01d", "description": "clear sky"}],
    "sys": {"country": "GB", "sunrise": 1700000000, "sunset": 1700030000},
    "timezone": 0,
}


def make_response(status_code: int, json_body=None, text: str | None = None, url: str = "") -> requests.Response:
    """Builds a real requests.Response, so raise_for_status() and json() behave as in production."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.encoding = "utf-8"
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode("utf-8")
    return response


class FakeSession:
    """Replays queued responses (or raises queued exceptions) and records every call it receives."""
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def get(self, url, params=None, **kwargs):
        prepared_url = requests.Request("GET", url, params=params).prepare().url
        self.calls.append({"url": url, "params": params, "prepared_url": prepared_url, **kwargs})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        outcome.url = prepared_url
        return outcome


class TricklingHandler(BaseHTTPRequestHandler):
    """Answers 200 at once, then sends a small JSON body one byte every BYTE_DELAY seconds."""
    BODY = b'{"a":1}'
    BYTE_DELAY = 0.4

    def do_GET(self):
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(self.BODY)))
        self.end_headers()
        self.wfile.flush()
        try:
            for i in range(len(self.BODY)):
                time.sleep(self.BYTE_DELAY)
                self.wfile.write(self.BODY[i:i + 1])
                self.wfile.flush()
        except OSError:
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def trickling_provider_url():
    """Base URL of a local provider whose every read arrives in time but whose body takes ~3 seconds."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), TricklingHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


@pytest.fixture(autouse=True)
def clean_logging_config():
    """Resets logging configuration after each test to prevent pollution."""
    yield
    logging.root.handlers.clear()
    logging.root.setLevel(logging.WARNING)
    structlog.reset_defaults()


@pytest.fixture
def gateway_config():
    return GatewayConfig(api_key="test-key")


@pytest.fixture
def client_config():
    return ClientConfig(api_base_url="http://gateway.test/api", timeout_seconds=5)


@pytest.fixture
def london_payload():
    return json.loads(json.dumps(LONDON_PAYLOAD))
