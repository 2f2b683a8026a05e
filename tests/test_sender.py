"""Tests for perch.server.sender: flushing a writer through ASGI send()."""

from typing import Any

from perch.http.writer import ResponseWriter
from perch.server.sender import send_writer


async def _sent(w: ResponseWriter, *, head: bool = False) -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []

    async def send(message: dict[str, Any]) -> None:
        messages.append(message)

    await send_writer(w, send, head=head)
    return messages


class TestSendWriter:
    async def test_start_then_body(self) -> None:
        w = ResponseWriter()
        w.header().set("Content-Type", "text/plain")
        w.write_header(201)
        w.write("done")

        start, body = await _sent(w)
        assert start["type"] == "http.response.start"
        assert start["status"] == 201
        assert (b"content-type", b"text/plain") in start["headers"]
        assert (b"content-length", b"4") in start["headers"]
        assert body == {"type": "http.response.body", "body": b"done"}

    async def test_untouched_writer_is_empty_200(self) -> None:
        start, body = await _sent(ResponseWriter())
        assert start["status"] == 200
        assert (b"content-length", b"0") in start["headers"]
        assert body["body"] == b""

    async def test_head_keeps_length_drops_body(self) -> None:
        w = ResponseWriter()
        w.write("hello")
        start, body = await _sent(w, head=True)
        assert (b"content-length", b"5") in start["headers"]
        assert body["body"] == b""

    async def test_304_has_no_body(self) -> None:
        w = ResponseWriter()
        w.write_header(304)
        w.write("ignored")
        start, body = await _sent(w)
        assert (b"content-length", b"0") in start["headers"]
        assert body["body"] == b""

    async def test_handler_content_length_replaced(self) -> None:
        w = ResponseWriter()
        w.header().set("Content-Length", "999")
        w.write("abc")
        start, _ = await _sent(w)
        lengths = [v for k, v in start["headers"] if k == b"content-length"]
        assert lengths == [b"3"]
