"""ASGI response sending: flushes a ResponseWriter through ASGI send()."""

from perch._internal.asgi import Send
from perch.http.writer import ResponseWriter


def _body_allowed(status: int) -> bool:
    # RFC: 1xx, 204 and 304 responses carry no message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_writer(w: ResponseWriter, send: Send, *, head: bool = False) -> None:
    """Send the writer's status, headers and body.

    A writer nothing was written to goes out as an empty 200.
    """
    body = w.body if _body_allowed(w.status) else b""
    raw_headers = [
        (name.encode("latin-1"), value.encode("latin-1"))
        for name, value in w.headers
        if name != "content-length"
    ]
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": w.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": b"" if head else body,
        }
    )
