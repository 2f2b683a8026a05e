"""Response writer handed to every handler and middleware.

Output is buffered on the writer and sent to the ASGI server once the
route's handler chain has finished. The writer tracks whether a status
line and a body have been written, which is what stops a chain after
its first response.
"""

from perch.http.headers import HeaderMap


class ResponseWriter:
    """Buffered, write-once-status response sink.

    - ``header()`` returns the mutable header map. Changes made after
      ``write_header()`` are not sent.
    - ``write_header(status)`` takes effect once; later calls are ignored.
    - ``write(data)`` writes the status line first if needed (200 by
      default) and appends to the body.

    A writer is reused across requests through a pool. Do not keep a
    reference to it after the request has finished.
    """

    __slots__ = ("_body", "_headers", "_sent_headers", "header_written", "status", "written")

    def __init__(self) -> None:
        self._headers = HeaderMap()
        self._sent_headers: tuple[tuple[str, str], ...] = ()
        self._body: list[bytes] = []
        self.status = 200
        self.header_written = False
        self.written = False

    def header(self) -> HeaderMap:
        return self._headers

    def write_header(self, status: int) -> None:
        if self.header_written:
            return
        self.header_written = True
        self.status = status
        self._sent_headers = self._headers.items()

    def write(self, data: bytes | str) -> int:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.write_header(self.status)
        self._body.append(data)
        self.written = True
        return len(data)

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        """Headers as they will be sent."""
        if self.header_written:
            return self._sent_headers
        return self._headers.items()

    @property
    def body(self) -> bytes:
        return b"".join(self._body)

    def reset(self) -> None:
        """Clear all state before the writer goes back to the pool."""
        self._headers.clear()
        self._sent_headers = ()
        self._body.clear()
        self.status = 200
        self.header_written = False
        self.written = False

    def __repr__(self) -> str:
        return (
            f"ResponseWriter(status={self.status}, header_written={self.header_written}, "
            f"written={self.written})"
        )
