"""Immutable HTTP request.

Frozen metadata with async body access.
"""

import json
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any
from urllib.parse import parse_qs, quote

from perch._internal.asgi import Receive, Scope
from perch.http.headers import Headers
from perch.routing.route import NO_PARAMS


# Characters left unescaped when rebuilding a raw path
_PCHAR = "/:@!$&'()*+,;="


async def _no_body() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path`` is the percent-decoded path from the ASGI scope and ``raw_path``
    the path as received, still percent-encoded. Routes match ``raw_path``.
    ``path_params`` holds the values captured by the matched route.
    The body is read with ``await request.body()`` / ``.json()`` / ``.text()``.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query_string: bytes = b""
    path_params: Mapping[str, str] = NO_PARAMS
    route_name: str | None = None
    client: tuple[str, int] | None = None
    http_version: str = "1.1"
    raw_path: str = ""

    _receive: Receive = field(default=_no_body, repr=False, compare=False)
    # Body cache; the dict is mutable even though the field is frozen
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def query(self) -> Mapping[str, list[str]]:
        """Query string parameters, name -> all values."""
        if "_query" not in self._cache:
            parsed = parse_qs(self.query_string.decode("latin-1"), keep_blank_values=True)
            self._cache["_query"] = MappingProxyType(parsed)
        return self._cache["_query"]

    def query_param(self, name: str, default: str | None = None) -> str | None:
        """First value of query parameter *name*."""
        values = self.query.get(name)
        return values[0] if values else default

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        if self.query_string:
            return f"{self.path}?{self.query_string.decode('latin-1')}"
        return self.path

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body. Cached after the first call."""
        if "_body" in self._cache:
            return self._cache["_body"]
        result = b"".join([chunk async for chunk in self.stream()])
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        while True:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        return json.loads(await self.body())

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    # -- Factory --

    def with_route(self, path_params: Mapping[str, str], route_name: str | None) -> "Request":
        """Copy of this request carrying the matched route's data.

        The body cache is shared, so a body read before routing is not lost.
        """
        return replace(self, path_params=path_params, route_name=route_name, _cache=self._cache)

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> "Request":
        client = scope.get("client")
        raw_path = scope.get("raw_path")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(scope.get("headers", ())),
            query_string=scope.get("query_string", b""),
            client=tuple(client) if client else None,
            http_version=scope.get("http_version", "1.1"),
            raw_path=raw_path.decode("latin-1") if raw_path else quote(scope["path"], safe=_PCHAR),
            _receive=receive,
        )
