"""Compose a route's handlers and middleware into one async callable."""

from collections.abc import Sequence

from perch._internal.invoke import invoke
from perch._internal.types import Middleware, Serve
from perch.routing.route import Route


def handler_chain(route: Route) -> Serve:
    """Run the route's handlers in order on the same writer.

    Stops once a handler has written a response, unless the route sets
    ``fall_through``.
    """
    handlers = route.handlers
    if len(handlers) == 1:
        only = handlers[0]

        async def serve_one(w, request) -> None:
            await invoke(only, w, request)

        return serve_one

    fall_through = route.fall_through

    async def serve_chain(w, request) -> None:
        for handler in handlers:
            if w.written and not fall_through:
                break
            await invoke(handler, w, request)

    return serve_chain


def wrap(serve: Serve, middleware: Sequence[Middleware]) -> Serve:
    """Wrap *serve* so the first middleware in the list runs outermost."""
    for mw in reversed(middleware):
        serve = _bind(mw, serve)
    return serve


def _bind(mw: Middleware, next_serve: Serve) -> Serve:
    async def serve(w, request) -> None:
        await mw(w, request, next_serve)

    return serve


def compose(route: Route, router_middleware: Sequence[Middleware]) -> Serve:
    """Handler chain, inside route middleware, inside router middleware."""
    serve = wrap(handler_chain(route), route.middleware)
    if route.skip_middleware:
        return serve
    return wrap(serve, router_middleware)
