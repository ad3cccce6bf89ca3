"""Synchronous HTTP calls against the clients/orders API."""

from __future__ import annotations

from dataclasses import dataclass, field
from http.client import HTTPException
from typing import Any
import json
import time
from urllib import error, request

import structlog

DEFAULT_TIMEOUT = 10.0
TRANSPORT_ERROR_STATUS = 0

LOGGER = structlog.get_logger("api_scenario_runner")


@dataclass
class ExecutionResult:
    """Details about a performed request."""

    status_code: int
    response_body: str
    elapsed_ms: float
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def transport_failed(self) -> bool:
        return self.status_code == TRANSPORT_ERROR_STATUS


def encode_body(body: Any) -> bytes:
    """Serialize a JSON body keeping non-ASCII characters as-is."""

    return json.dumps(body, ensure_ascii=False).encode("utf-8")


class HttpRequestExecutor:
    """Performs one HTTP call and never raises on transport failures.

    Connection, timeout, DNS and malformed URL errors come back as a
    result with status ``0`` and the error text as body so the caller can
    log them like any other response.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._timeout = timeout

    def execute(self, method: str, url: str, body: Any = None) -> ExecutionResult:
        method = method.upper()
        headers = {"Accept": "application/json"}
        data: bytes | None = None
        if body is not None:
            data = encode_body(body)
            headers["Content-Type"] = "application/json"
            headers["Content-Length"] = str(len(data))

        start = time.perf_counter()
        try:
            req = request.Request(url, data=data, headers=headers, method=method)
            with request.urlopen(req, timeout=self._timeout) as response:
                status = response.getcode()
                response_headers = dict(response.headers.items())
                payload = response.read().decode("utf-8", errors="replace")
        except error.HTTPError as exc:
            status = exc.code
            response_headers = dict(exc.headers.items()) if exc.headers else {}
            payload = exc.read().decode("utf-8", errors="replace")
        except (OSError, HTTPException, ValueError) as exc:
            elapsed_ms = (time.perf_counter() - start) * 1000
            reason = exc.reason if isinstance(exc, error.URLError) else exc
            LOGGER.warning("transport_error", method=method, url=url, error=str(reason))
            return ExecutionResult(
                status_code=TRANSPORT_ERROR_STATUS,
                response_body=f"Transport error: {reason}",
                elapsed_ms=elapsed_ms,
            )
        elapsed_ms = (time.perf_counter() - start) * 1000
        return ExecutionResult(
            status_code=status,
            response_body=payload,
            elapsed_ms=elapsed_ms,
            headers=response_headers,
        )
