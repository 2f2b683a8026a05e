"""ASGI request handler: translates ASGI scope/messages to perch types.

The only component that touches raw ASGI for HTTP requests. Builds the
Request, matches a route, runs the composed handler chain on a pooled
ResponseWriter, and sends what was written.
"""

from collections.abc import Mapping
from types import MappingProxyType
from urllib.parse import unquote

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.pool import Pool
from perch._internal.types import ErrorHandler
from perch.context import RequestContext, context_var
from perch.http.request import Request
from perch.http.writer import ResponseWriter
from perch.routing.route import NO_PARAMS, MatchOutcome
from perch.routing.router import Router
from perch.server.errors import SpecialHandlers, handle_error
from perch.server.sender import send_writer


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    special: SpecialHandlers,
    error_handlers: Mapping[int | type, ErrorHandler],
    writers: Pool[ResponseWriter],
    contexts: Pool[RequestContext],
) -> None:
    """Process a single HTTP request through the full pipeline."""
    request = Request.from_asgi(scope, receive)
    w = writers.acquire()
    ctx = contexts.acquire()
    token = context_var.set(ctx)
    try:
        match = router.match(request.method, request.raw_path or request.path)
        if match.found and match.serve is not None:
            params = _decode_params(match.path_params)
            ctx.route = match.route
            ctx.path_params = params
            request = request.with_route(params, match.route.name)
            serve = match.serve
        elif match.outcome is MatchOutcome.NOT_IMPLEMENTED:
            serve = special.not_implemented
        else:
            serve = special.not_found

        try:
            await serve(w, request)
        except Exception as exc:
            ctx.error = exc
            await handle_error(w, request, exc, error_handlers)

        await send_writer(w, send, head=request.method == "HEAD")
    finally:
        context_var.reset(token)
        contexts.release(ctx)
        writers.release(w)


def _decode_params(params: Mapping[str, str]) -> Mapping[str, str]:
    # Matching runs on the raw path so an encoded "/" stays inside its segment
    if not params:
        return NO_PARAMS
    return MappingProxyType({name: unquote(value) for name, value in params.items()})
