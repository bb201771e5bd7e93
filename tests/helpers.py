"""
Shared test doubles: record scripts, a fake lookup service and fake
content hosts served through httpx.MockTransport.
"""

import hashlib
import json
from typing import Optional, Union

import httpx

from nanoseek.locator import locator_from_hash
from nanoseek.models import LookupQuery


LOCKING_KEY = bytes.fromhex("02" + "11" * 32)
SIGNATURE = bytes.fromhex("30" + "22" * 70)
PROTOCOL_ADDRESS = "1UHRPYnMHPuQ5Tgb3AF8JXqwKkmZVy5hG"


def push(data: bytes) -> bytes:
    """Encode a single data push."""
    n = len(data)
    if n == 0:
        return b"\x00"
    if n < 0x4C:
        return bytes([n]) + data
    if n <= 0xFF:
        return b"\x4c" + bytes([n]) + data
    if n <= 0xFFFF:
        return b"\x4d" + n.to_bytes(2, "little") + data
    return b"\x4e" + n.to_bytes(4, "little") + data


def build_pushdrop_script(
    fields: list[Union[bytes, str]],
    locking_key: bytes = LOCKING_KEY,
    signature: bytes = SIGNATURE,
) -> str:
    """Build a PushDrop locking script as hex."""
    parts = [push(locking_key), b"\xac"]
    for value in fields:
        parts.append(push(value.encode("utf-8") if isinstance(value, str) else value))
    parts.append(push(signature))
    dropped = len(fields) + 1
    parts.append(b"\x6d" * (dropped // 2) + b"\x75" * (dropped % 2))
    return b"".join(parts).hex()


def advertisement_script(endpoints: list[str], content_hash: bytes = b"\x00" * 32) -> str:
    """A record whose field 4 lists ``endpoints`` one per line."""
    return build_pushdrop_script([
        PROTOCOL_ADDRESS,
        LOCKING_KEY,
        content_hash,
        "advertise",
        "\n".join(endpoints),
        "1700000000",
    ])


def lookup_body(*scripts: str) -> bytes:
    return json.dumps([{"outputScript": s, "vout": 0} for s in scripts]).encode("utf-8")


def locator_for(content: bytes) -> str:
    return locator_from_hash(hashlib.sha256(content).digest())


def normalize_url(url: str) -> str:
    return url.rstrip("/")


class FakeLookupService:
    """In-memory lookup service returning a fixed body (or raising)."""

    def __init__(self, body: Union[bytes, str, list, dict, Exception]) -> None:
        self._body = body
        self.calls: list[tuple[LookupQuery, Optional[str], Optional[str]]] = []

    async def lookup(
        self,
        query: LookupQuery,
        lookup_host: Optional[str] = None,
        credential: Optional[str] = None,
    ) -> bytes:
        self.calls.append((query, lookup_host, credential))
        if isinstance(self._body, Exception):
            raise self._body
        if isinstance(self._body, bytes):
            return self._body
        if isinstance(self._body, str):
            return self._body.encode("utf-8")
        return json.dumps(self._body).encode("utf-8")


CONNECT_ERROR = "connect-error"
TIMEOUT = "timeout"


class FakeHosts:
    """
    Serves canned responses per URL through httpx.MockTransport.

    Routes map a URL to ``(status, body, headers)``, CONNECT_ERROR or TIMEOUT.
    Unknown URLs answer 404. Every request URL is recorded in order.
    """

    def __init__(self, routes: Optional[dict] = None) -> None:
        self.routes = {normalize_url(k): v for k, v in (routes or {}).items()}
        self.requests: list[httpx.Request] = []

    @property
    def requested_urls(self) -> list[str]:
        return [normalize_url(str(r.url)) for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(normalize_url(str(request.url)))
        if route is None:
            return httpx.Response(404)
        if route == CONNECT_ERROR:
            raise httpx.ConnectError("connection refused", request=request)
        if route == TIMEOUT:
            raise httpx.ReadTimeout("read timed out", request=request)
        if callable(route):
            return route(request)
        status, body, headers = route
        return httpx.Response(status, content=body, headers=headers)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
