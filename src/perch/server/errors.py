"""Error handling pipeline for perch requests.

Maps exceptions raised by handlers, and routing misses, to responses on
the request's ``ResponseWriter``. Registered error handlers are tried
first; otherwise:

- ``ClassifiedError`` -> JSON error with its status and user message
- ``HTTPError``       -> its status and detail as plain text
- anything else       -> 500 with the default message

Stack traces are logged, never sent.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from perch import faults, responses
from perch._internal.invoke import invoke
from perch._internal.types import ErrorHandler, Middleware, Serve
from perch.errors import HTTPError, MethodNotImplemented, NotFound
from perch.http.request import Request
from perch.http.writer import ResponseWriter
from perch.routing.dispatch import wrap

logger = logging.getLogger("perch.server")


def status_of(exc: BaseException) -> int:
    """Response status the default pipeline sends for *exc*."""
    match exc:
        case HTTPError(status=status):
            return status
        case faults.ClassifiedError(status_code=status):
            return status
        case _:
            return 500


def find_error_handler(
    exc: BaseException,
    error_handlers: Mapping[int | type, ErrorHandler],
) -> ErrorHandler | None:
    """Handler for the most specific exception type, then for the status code."""
    for cls in type(exc).__mro__:
        handler = error_handlers.get(cls)
        if handler is not None:
            return handler
    return error_handlers.get(status_of(exc))


async def handle_error(
    w: ResponseWriter,
    request: Request,
    exc: Exception,
    error_handlers: Mapping[int | type, ErrorHandler],
) -> None:
    """Write a response for *exc*, unless one was already written."""
    if w.header_written:
        _log_committed(request, exc)
        return

    handler = find_error_handler(exc, error_handlers)
    if handler is not None:
        try:
            await invoke(handler, w, request, exc)
        except Exception:
            logger.exception("Error handler failed: %s %s", request.method, request.path)
            if not w.header_written:
                responses.send_error(w, faults.DEFAULT_MESSAGE, 500)
            return
        if not w.header_written:
            # Handler wrote nothing; fall back to the default rendering
            write_default_error(w, request, exc)
        return

    write_default_error(w, request, exc)


def write_default_error(w: ResponseWriter, request: Request, exc: Exception) -> None:
    match exc:
        case faults.ClassifiedError():
            responses.send_fault(w, exc)
        case HTTPError(status=status, detail=detail, headers=headers):
            logger.debug("%d %s %s: %s", status, request.method, request.path, detail)
            for name, value in headers:
                w.header().add(name, value)
            responses.send(w, detail or str(status), status)
        case _:
            logger.exception("500 %s %s", request.method, request.path, exc_info=exc)
            responses.send_error(w, faults.DEFAULT_MESSAGE, 500)


def _log_committed(request: Request, exc: BaseException) -> None:
    if isinstance(exc, faults.ClassifiedError):
        logger.error(
            "Error after response was written: %s %s\n%s",
            request.method,
            request.path,
            faults.stacktrace(exc),
        )
    else:
        logger.error(
            "Error after response was written: %s %s",
            request.method,
            request.path,
            exc_info=exc,
        )


# -- Routing misses --


@dataclass(frozen=True, slots=True)
class SpecialHandlers:
    """Composed handlers for requests that match no route."""

    not_found: Serve
    not_implemented: Serve


def _special(
    make_exc: Callable[[], HTTPError],
    error_handlers: Mapping[int | type, ErrorHandler],
) -> Serve:
    async def serve(w: ResponseWriter, request: Request) -> None:
        await handle_error(w, request, make_exc(), error_handlers)

    return serve


def build_special_handlers(
    error_handlers: Mapping[int | type, Any],
    middleware: tuple[Middleware, ...] = (),
) -> SpecialHandlers:
    """404 and 501 handlers, wrapped in *middleware* (may be empty)."""
    return SpecialHandlers(
        not_found=wrap(_special(NotFound, error_handlers), middleware),
        not_implemented=wrap(_special(MethodNotImplemented, error_handlers), middleware),
    )
