"""Response helpers that write to a ``ResponseWriter``.

JSON bodies use a fixed envelope::

    {"data": <payload>, "status": <code>}     # send_response, r200, r201, r302
    {"errors": <payload>, "status": <code>}   # send_error, r400 ... r500

Usage::

    from perch import responses

    def get_user(w, request):
        responses.r200(w, {"email": request.path_params["email"]})
"""

import json
import logging
from typing import Any

from perch import faults
from perch.http.writer import ResponseWriter

logger = logging.getLogger("perch.server")

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
ERR_INTERNAL_SERVER = "Internal server error"


def send_header(w: ResponseWriter, status: int) -> None:
    """Send only a status line, no body."""
    w.write_header(status)


def send(w: ResponseWriter, data: Any, status: int, content_type: str = TEXT_CONTENT_TYPE) -> None:
    """Send *data* as-is, without the JSON envelope."""
    w.header().set("content-type", content_type)
    w.write_header(status)
    w.write(data if isinstance(data, (bytes, str)) else str(data))


def _send_json(w: ResponseWriter, payload: dict[str, Any], status: int) -> None:
    try:
        body = json.dumps(payload)
    except (TypeError, ValueError):
        logger.exception("Failed to encode %d response body", status)
        body = json.dumps({"errors": ERR_INTERNAL_SERVER, "status": 500})
        status = 500
    w.header().set("content-type", JSON_CONTENT_TYPE)
    w.write_header(status)
    w.write(body)


def send_response(w: ResponseWriter, data: Any, status: int) -> None:
    """JSON ``{"data": data, "status": status}``."""
    _send_json(w, {"data": data, "status": status}, status)


def send_error(w: ResponseWriter, errors: Any, status: int) -> None:
    """JSON ``{"errors": errors, "status": status}``."""
    _send_json(w, {"errors": errors, "status": status}, status)


def send_fault(w: ResponseWriter, err: BaseException) -> None:
    """Send *err* as a JSON error using its kind and user-facing message.

    Errors that are not classified become a 500 with the default message.
    Server-side failures (status >= 500) are logged with the full stack
    trace, which never reaches the client.
    """
    status, message, classified = faults.status_code_message(err)
    if not classified:
        message = faults.DEFAULT_MESSAGE
    if status >= 500:
        logger.error("%d %s\n%s", status, message, faults.stacktrace(err))
    send_error(w, message, status)


# -- Shorthands --


def r200(w: ResponseWriter, data: Any) -> None:
    send_response(w, data, 200)


def r201(w: ResponseWriter, data: Any) -> None:
    send_response(w, data, 201)


def r204(w: ResponseWriter) -> None:
    send_header(w, 204)


def r302(w: ResponseWriter, data: Any) -> None:
    send_response(w, data, 302)


def r400(w: ResponseWriter, data: Any) -> None:
    send_error(w, data, 400)


def r403(w: ResponseWriter, data: Any) -> None:
    send_error(w, data, 403)


def r404(w: ResponseWriter, data: Any) -> None:
    send_error(w, data, 404)


def r406(w: ResponseWriter, data: Any) -> None:
    send_error(w, data, 406)


def r451(w: ResponseWriter, data: Any) -> None:
    send_error(w, data, 451)


def r500(w: ResponseWriter, data: Any) -> None:
    send_error(w, data, 500)
