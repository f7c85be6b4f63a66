import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest
import requests

from telegram_hook.api_client import API_ROOT, GET_ME, SEND_MESSAGE

OK = {"ok": True, "result": {}}
UNAUTHORIZED = {"ok": False, "error_code": 401, "description": "Unauthorized"}
CHAT_NOT_FOUND = {"ok": False, "error_code": 400, "description": "chat not found"}


# ============================================================
# STUB TELEGRAM SERVER
# ============================================================


class StubTelegram:
    """In-process stand-in for api.telegram.org that records every request."""

    def __init__(self):
        self.responses: Dict[str, Any] = {GET_ME: OK, SEND_MESSAGE: OK}
        self.delays: Dict[str, float] = {}
        self.requests: List[Dict[str, Any]] = []
        self._lock = threading.Condition()
        self.base_url = ""

    def record(self, method: str, path: str, headers, body: bytes) -> None:
        with self._lock:
            self.requests.append(
                {"method": method, "path": path, "headers": headers, "body": body}
            )
            self._lock.notify_all()

    def wait_for(self, count: int, timeout: float = 2.0) -> bool:
        with self._lock:
            return self._lock.wait_for(lambda: len(self.requests) >= count, timeout)

    def sent_messages(self) -> List[Dict[str, Any]]:
        return [
            json.loads(r["body"])
            for r in self.requests
            if r["path"].endswith("/" + SEND_MESSAGE)
        ]


class _StubHandler(BaseHTTPRequestHandler):
    def _reply(self):
        stub = self.server.stub
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        method = self.path.rsplit("/", 1)[-1]
        stub.record(self.command, self.path, self.headers, body)

        time.sleep(stub.delays.get(method, 0))

        payload = stub.responses.get(method, {"ok": False, "error_code": 404})
        if isinstance(payload, bytes):
            data, status = payload, 200
        else:
            data = json.dumps(payload).encode()
            status = 200 if payload.get("ok") else payload.get("error_code", 400)

        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    do_GET = _reply
    do_POST = _reply

    def log_message(self, format, *args):
        pass


class RedirectingSession(requests.Session):
    """Session that sends Bot API calls to the stub and counts closed responses."""

    def __init__(self, base_url: str):
        super().__init__()
        self.base_url = base_url
        self.urls: List[str] = []
        self.opened = 0
        self.closed = 0

    def request(self, method, url, *args, **kwargs):
        self.urls.append(url)
        response = super().request(
            method, url.replace(API_ROOT, self.base_url, 1), *args, **kwargs
        )
        self.opened += 1
        close = response.close

        def counting_close():
            self.closed += 1
            close()

        response.close = counting_close
        return response


@pytest.fixture
def stub_api():
    stub = StubTelegram()
    server = ThreadingHTTPServer(("127.0.0.1", 0), _StubHandler)
    server.stub = stub
    stub.base_url = f"http://127.0.0.1:{server.server_address[1]}"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield stub
    server.shutdown()
    server.server_close()


@pytest.fixture
def stub_session(stub_api):
    session = RedirectingSession(stub_api.base_url)
    yield session
    session.close()


# ============================================================
# MOCK SESSIONS
# ============================================================


def mock_response(payload: Any = None, error: Exception = None) -> MagicMock:
    response = MagicMock()
    if error is not None:
        response.json.side_effect = error
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def mock_session():
    session = MagicMock(spec=requests.Session)
    session.get.return_value = mock_response(OK)
    session.post.return_value = mock_response(OK)
    return session
