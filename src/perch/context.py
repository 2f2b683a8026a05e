"""Request-scoped context via ContextVar.

Provides:
- ``RequestContext``: the matched route, path parameters and an error
  slot for the request being served.
- ``get_context()``: the context of the current request.
- ``set_error()`` / ``get_error()``: let a handler record an error for
  outer middleware (e.g. access logs) without raising.

The context is set by the request handler before dispatch and reset
after the response has been sent. Contexts are pooled, so never keep a
reference to one beyond the request that produced it.

Thread safety:
    ``ContextVar`` is task-local under asyncio. No locks needed.
"""

from collections.abc import Mapping
from contextvars import ContextVar
from typing import Any

from perch.routing.route import NO_PARAMS, Route


class RequestContext:
    """Per-request state. Reset before it goes back to the pool."""

    __slots__ = ("error", "path_params", "route", "values")

    def __init__(self) -> None:
        self.route: Route | None = None
        self.path_params: Mapping[str, str] = NO_PARAMS
        self.error: BaseException | None = None
        self.values: dict[str, Any] = {}

    def reset(self) -> None:
        self.route = None
        self.path_params = NO_PARAMS
        self.error = None
        self.values.clear()

    def __repr__(self) -> str:
        pattern = self.route.pattern if self.route else None
        return f"RequestContext(route={pattern!r}, path_params={dict(self.path_params)!r})"


context_var: ContextVar[RequestContext] = ContextVar("perch_context")
"""The current request context. Set by the request handler before dispatch."""


def get_context() -> RequestContext:
    """Return the current request context.

    Raises ``LookupError`` if called outside a request.
    """
    return context_var.get()


def set_error(err: BaseException | None) -> None:
    """Record *err* on the current request."""
    context_var.get().error = err


def get_error() -> BaseException | None:
    """The error recorded on the current request, or ``None``."""
    ctx = context_var.get(None)
    return ctx.error if ctx is not None else None
