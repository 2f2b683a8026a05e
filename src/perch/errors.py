"""Perch exception hierarchy.

Shared across Router, App, the request handler and middleware so every
module raises and catches the same types. Application-level failures use
:mod:`perch.faults` instead.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when routes or app configuration are invalid.

    Raised at registration or during ``App._freeze()``, always before the
    first request is served.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by handlers or middleware. The request handler catches these
    and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "404 page not found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotImplemented(HTTPError):  # noqa: N818
    """501: the request method is not one the router supports."""

    def __init__(self, detail: str = "501 Not Implemented") -> None:
        super().__init__(status=501, detail=detail)
