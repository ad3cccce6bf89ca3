"""Test bootstrap and an in-process stub of the clients/orders API."""

from __future__ import annotations

import json
import socketserver
import sys
import threading
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
if str(PACKAGE_ROOT) not in sys.path:
    sys.path.insert(0, str(PACKAGE_ROOT))


@dataclass
class RecordedRequest:
    method: str
    path: str
    headers: dict[str, str]
    body: bytes

    @property
    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8")) if self.body else None


# (method, path, body) -> (status, body text) or None to fall through to the default API
Override = Callable[[str, str, bytes], Optional[tuple[int, str]]]


@dataclass
class FakeOrdersApi:
    """Minimal stateful clients/orders API behaving like the real service."""

    clients: dict[int, dict[str, Any]] = field(default_factory=dict)
    orders: list[dict[str, Any]] = field(default_factory=list)

    def handle(self, method: str, path: str, body: bytes) -> tuple[int, str]:
        payload = json.loads(body.decode("utf-8")) if body else {}
        parts = [part for part in path.split("/") if part]
        if parts[:1] != ["api"]:
            return _error(404, "Not Found", path)
        parts = parts[1:]

        if method == "POST" and parts == ["clients"]:
            client_id = len(self.clients) + 1
            client = {"id": client_id, "active": True, **payload}
            self.clients[client_id] = client
            return 201, json.dumps(client, ensure_ascii=False)

        if method == "GET" and len(parts) == 3 and parts[0] == "clients" and parts[2] == "profit":
            client = self.clients.get(int(parts[1]))
            if client is None:
                return _error(404, f"Client {parts[1]} not found", path)
            income = sum(o["price"] for o in self.orders if o["supplierId"] == client["id"])
            expense = sum(o["price"] for o in self.orders if o["consumerId"] == client["id"])
            return 200, json.dumps(
                {"clientId": client["id"], "name": client["name"], "profit": income - expense}, ensure_ascii=False
            )

        if method == "PATCH" and len(parts) == 3 and parts[0] == "clients" and parts[2] == "status":
            client = self.clients.get(int(parts[1]))
            if client is None:
                return _error(404, f"Client {parts[1]} not found", path)
            client["active"] = bool(payload.get("active"))
            return 200, json.dumps(client, ensure_ascii=False)

        if method == "POST" and parts == ["orders"]:
            if payload.get("price", 0) <= 0:
                return _error(400, "price must be greater than 0", path)
            supplier = self.clients.get(payload.get("supplierId"))
            consumer = self.clients.get(payload.get("consumerId"))
            if supplier is None or consumer is None:
                return _error(404, "Client not found", path)
            if not supplier["active"] or not consumer["active"]:
                return _error(400, "Inactive client cannot take part in orders", path)
            if any(
                o["title"] == payload["title"]
                and o["supplierId"] == payload["supplierId"]
                and o["consumerId"] == payload["consumerId"]
                for o in self.orders
            ):
                return _error(409, "Duplicate order", path)
            order = {"id": len(self.orders) + 1, **payload}
            self.orders.append(order)
            return 201, json.dumps(order, ensure_ascii=False)

        return _error(404, "Not Found", path)


def _error(status: int, message: str, path: str) -> tuple[int, str]:
    return status, json.dumps({"status": status, "message": message, "path": path})


class ThreadedHTTPServer(socketserver.ThreadingMixIn, HTTPServer):
    daemon_threads = True


class StubServer:
    """Serves FakeOrdersApi and records every request it receives."""

    def __init__(self) -> None:
        self.api = FakeOrdersApi()
        self.requests: list[RecordedRequest] = []
        self.override: Optional[Override] = None
        self._httpd = ThreadedHTTPServer(("127.0.0.1", 0), self._handler_factory())
        self._thread = threading.Thread(target=self._httpd.serve_forever, daemon=True)

    @property
    def base_url(self) -> str:
        return f"http://127.0.0.1:{self._httpd.server_address[1]}/api"

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._httpd.shutdown()
        self._httpd.server_close()
        self._thread.join(timeout=2)

    def _handler_factory(self) -> type[BaseHTTPRequestHandler]:
        stub = self

        class Handler(BaseHTTPRequestHandler):
            def do_GET(self) -> None:  # noqa: N802 - HTTP handler requirement
                self._handle()

            def do_POST(self) -> None:  # noqa: N802
                self._handle()

            def do_PATCH(self) -> None:  # noqa: N802
                self._handle()

            def _handle(self) -> None:
                body = self.rfile.read(int(self.headers.get("Content-Length", 0) or 0))
                request = RecordedRequest(
                    method=self.command,
                    path=self.path,
                    headers={key.lower(): value for key, value in self.headers.items()},
                    body=body,
                )
                stub.requests.append(request)
                result = stub.override(request.method, request.path, body) if stub.override else None
                status, text = result or stub.api.handle(request.method, request.path, body)
                payload = text.encode("utf-8")
                self.send_response(status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(payload)))
                self.end_headers()
                self.wfile.write(payload)

            def log_message(self, format: str, *args: object) -> None:  # pragma: no cover - silence logs
                return

        return Handler


@pytest.fixture
def stub_api() -> Iterator[StubServer]:
    server = StubServer()
    server.start()
    try:
        yield server
    finally:
        server.stop()
