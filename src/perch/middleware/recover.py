"""Recover from unexpected exceptions raised further down the chain."""

import logging

from perch import faults, responses
from perch._internal.types import Serve
from perch.context import set_error
from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.writer import ResponseWriter

logger = logging.getLogger("perch.server")


async def recoverer(w: ResponseWriter, request: Request, next: Serve) -> None:
    """Answer 500 with the default message if a handler fails unexpectedly.

    Classified errors and ``HTTPError`` are part of normal control flow and
    are passed on to the error pipeline untouched. The traceback is
    logged; nothing about it is sent to the client.
    """
    try:
        await next(w, request)
    except (faults.ClassifiedError, HTTPError):
        raise
    except Exception as exc:
        logger.exception("Recovered: %s %s", request.method, request.path)
        set_error(exc)
        if not w.header_written:
            responses.r500(w, faults.DEFAULT_MESSAGE)
