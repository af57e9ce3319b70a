"""Helpers shared by the Vercel serverless handlers in api/."""

import asyncio
import json
from datetime import date, datetime
from http.server import BaseHTTPRequestHandler
from typing import Any, Coroutine, TypeVar
from urllib.parse import parse_qs, urlparse

T = TypeVar("T")


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_json(handler: BaseHTTPRequestHandler, status: int, payload: Any) -> None:
    """Send a JSON response."""
    body = json.dumps(payload, default=_json_default, ensure_ascii=False).encode('utf-8')
    handler.send_response(status)
    handler.send_header('Content-Type', 'application/json; charset=utf-8')
    handler.send_header('Content-Length', str(len(body)))
    handler.end_headers()
    handler.wfile.write(body)


def read_json_body(handler: BaseHTTPRequestHandler) -> Any:
    """Read and decode the request body. Raises ValueError on bad JSON."""
    content_length = int(handler.headers.get('Content-Length', 0))
    raw_body = handler.rfile.read(content_length).decode('utf-8') if content_length > 0 else ""
    if not raw_body:
        return {}
    return json.loads(raw_body)


def query_params(handler: BaseHTTPRequestHandler) -> dict[str, str]:
    """First value of each query string parameter."""
    parsed = parse_qs(urlparse(handler.path).query, keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items()}


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion from a synchronous request handler."""
    return asyncio.run(coro)
