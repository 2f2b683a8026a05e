"""Async test client for perch applications.

Sends requests through the ASGI interface directly, with no HTTP involved,
and returns ``Response`` snapshots.
"""

import json as json_module
from typing import Any
from urllib.parse import quote, unquote, urlencode

from perch._internal.invoke import invoke
from perch.app import App
from perch.http.response import Response


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for perch applications.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/-/health")
            assert response.status == 200
            assert response.json["data"] == "OK"

    Entering the client freezes the app and runs startup hooks; leaving
    it runs shutdown hooks the way lifespan shutdown does.
    """

    __slots__ = ("app",)

    def __init__(self, app: App) -> None:
        self.app = app

    async def __aenter__(self) -> "TestClient":
        self.app._ensure_frozen()
        for hook in self.app._startup_hooks:
            await invoke(hook)
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.app.shutdown()

    async def get(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        query: dict[str, str] | None = None,
    ) -> Response:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers, query=query)

    async def head(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("HEAD", path, headers=headers)

    async def options(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("OPTIONS", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send a POST request. ``json`` is encoded and sets the content type."""
        return await self.request("POST", path, headers=headers, body=body, json=json)

    async def put(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        return await self.request("PUT", path, headers=headers, body=body, json=json)

    async def patch(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        return await self.request("PATCH", path, headers=headers, body=body, json=json)

    async def delete(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("DELETE", path, headers=headers)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
        query: dict[str, str] | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app.

        *path* is taken as it would appear on the wire. Percent escapes are
        kept in the scope's ``raw_path`` and decoded in ``path``.
        """
        if "?" in path:
            path_part, query_string = path.split("?", 1)
        else:
            path_part, query_string = path, ""
        if query:
            query_string = "&".join(filter(None, (query_string, urlencode(query))))

        merged = dict(headers or {})
        request_body = body or b""
        if json is not None:
            request_body = json_module.dumps(json).encode("utf-8")
            merged.setdefault("content-type", "application/json")

        raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in merged.items()
        ]

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": unquote(path_part),
            "raw_path": quote(path_part, safe="/%:@!$&'()*+,;=").encode("ascii"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }

        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            return {"type": "http.disconnect"}

        status = 500
        response_headers: list[tuple[bytes, bytes]] = []
        body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal status, response_headers
            if message["type"] == "http.response.start":
                status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                body_parts.append(message.get("body", b""))

        await self.app(scope, receive, send)

        return Response(
            status=status,
            raw_headers=tuple(
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in response_headers
            ),
            body=b"".join(body_parts),
        )
