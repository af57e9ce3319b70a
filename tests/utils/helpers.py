"""Test helper functions."""

import json
from io import BytesIO
from typing import Any, Dict, Optional, Tuple


class MockSocket:
    """Socket double: serves a raw request and captures the raw response."""

    def __init__(self, raw_request: bytes):
        self._request = raw_request
        self.sent = BytesIO()

    def makefile(self, *args, **kwargs):
        return BytesIO(self._request)

    def sendall(self, data):
        self.sent.write(data)

    def close(self):
        pass


def build_request(
    method: str = "GET",
    path: str = "/api/health",
    body: Any = None,
    headers: Optional[Dict[str, str]] = None
) -> bytes:
    """Build a raw HTTP/1.1 request."""
    if body is None:
        payload = b""
    elif isinstance(body, (bytes, bytearray)):
        payload = bytes(body)
    elif isinstance(body, str):
        payload = body.encode("utf-8")
    else:
        payload = json.dumps(body).encode("utf-8")

    all_headers = {"Host": "localhost", "Connection": "close"}
    if payload:
        all_headers["Content-Type"] = "application/json"
        all_headers["Content-Length"] = str(len(payload))
    all_headers.update(headers or {})

    head = f"{method} {path} HTTP/1.1\r\n"
    head += "".join(f"{name}: {value}\r\n" for name, value in all_headers.items())
    return head.encode("latin-1") + b"\r\n" + payload


def call_handler(
    handler_class,
    method: str = "GET",
    path: str = "/api/health",
    body: Any = None,
    headers: Optional[Dict[str, str]] = None
) -> Tuple[int, Dict[str, str], Any]:
    """
    Run a Vercel handler class against one request.

    Returns (status, headers, decoded JSON body).
    """
    sock = MockSocket(build_request(method, path, body, headers))
    # BaseHTTPRequestHandler serves the request from its constructor
    handler_class(sock, ("127.0.0.1", 8000), None)
    return parse_response(sock.sent.getvalue())


def parse_response(raw: bytes) -> Tuple[int, Dict[str, str], Any]:
    head, _, payload = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    status = int(lines[0].split(" ")[1])
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    if payload and "application/json" in headers.get("Content-Type", ""):
        return status, headers, json.loads(payload.decode("utf-8"))
    return status, headers, payload.decode("utf-8", errors="replace") or None
