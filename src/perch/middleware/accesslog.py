"""Access log middleware.

Logs one line per request on the ``perch.access`` logger::

    GET /users/a@b.c?x=1 1.204ms 200
"""

import logging
import time

from perch._internal.types import Serve
from perch.http.request import Request
from perch.http.writer import ResponseWriter
from perch.server.errors import status_of

logger = logging.getLogger("perch.access")


async def access_log(w: ResponseWriter, request: Request, next: Serve) -> None:
    start = time.perf_counter()
    status = 500
    try:
        await next(w, request)
        status = w.status
    except Exception as exc:
        # A committed response keeps its status; otherwise log what the error pipeline sends
        status = w.status if w.header_written else status_of(exc)
        raise
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s %.3fms %d", request.method, request.url, elapsed_ms, status)
