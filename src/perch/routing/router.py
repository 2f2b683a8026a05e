"""Method-indexed router with first-match path matching.

Routes are registered during setup and compiled into per-method tuples
when the app freezes. Matching walks the routes for the request method
in registration order and returns the first one whose pattern matches.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from perch._internal.types import Middleware, Serve
from perch.errors import ConfigurationError
from perch.routing.dispatch import compose
from perch.routing.pattern import match_segments, overlaps, parse_pattern
from perch.routing.route import NO_PARAMS, MatchOutcome, Route, RouteMatch, Segment

logger = logging.getLogger("perch.routing")

SUPPORTED_METHODS: tuple[str, ...] = (
    "OPTIONS",
    "HEAD",
    "GET",
    "POST",
    "PUT",
    "PATCH",
    "DELETE",
)

_NOT_FOUND = RouteMatch(outcome=MatchOutcome.NOT_FOUND)
_NOT_IMPLEMENTED = RouteMatch(outcome=MatchOutcome.NOT_IMPLEMENTED)


@dataclass(slots=True)
class _Entry:
    """A registered route plus its parsed pattern. ``serve`` is set at compile."""

    route: Route
    segments: tuple[Segment, ...]
    param_count: int
    serve: Serve | None = None

    def match_path(self, path: str) -> Mapping[str, str] | None:
        route = self.route
        if not self.param_count:
            pattern = route.pattern
            if path == pattern or (route.trailing_slash and path == pattern + "/"):
                return NO_PARAMS
            return None

        if len(path) > 1 and path.endswith("/"):
            if not route.trailing_slash:
                return None
            path = path[:-1]
        if not path.startswith("/"):
            return None

        params = match_segments(self.segments, path[1:].split("/"))
        if params is None or len(params) != self.param_count:
            return None
        return params


class Router:
    """Router with ``:param`` and ``:param*`` patterns.

    Usage::

        router = Router()
        router.add(Route("/users/:email", (get_user,)))
        router.compile()
        match = router.match("GET", "/users/a@b.c")
    """

    __slots__ = ("_compiled", "_entries", "_middleware", "_table")

    def __init__(self) -> None:
        self._entries: list[_Entry] = []
        self._middleware: list[Middleware] = []
        self._table: dict[str, tuple[_Entry, ...]] = {m: () for m in SUPPORTED_METHODS}
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route. Must be called before compile().

        Raises:
            ConfigurationError: Unsupported method, no handlers, or a
                malformed pattern.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        if route.method not in SUPPORTED_METHODS:
            msg = (
                f"Route {route.pattern!r}: unsupported method {route.method!r}. "
                f"Supported: {', '.join(SUPPORTED_METHODS)}."
            )
            raise ConfigurationError(msg)
        if not route.handlers:
            msg = f"Route {route.method} {route.pattern!r} has no handlers."
            raise ConfigurationError(msg)

        segments = parse_pattern(route.pattern)
        entry = _Entry(
            route=route,
            segments=segments,
            param_count=sum(1 for s in segments if s.is_param),
        )
        self._warn_duplicates(entry)
        self._entries.append(entry)

    def _warn_duplicates(self, entry: _Entry) -> None:
        route = entry.route
        for other in self._entries:
            if route.name and other.route.name == route.name:
                logger.warning(
                    "Duplicate route name %r: %s %s and %s %s",
                    route.name,
                    other.route.method,
                    other.route.pattern,
                    route.method,
                    route.pattern,
                )
            if other.route.method == route.method and overlaps(other.segments, entry.segments):
                logger.warning(
                    "Route %s %s overlaps %s %s registered earlier; the earlier route wins.",
                    route.method,
                    route.pattern,
                    other.route.method,
                    other.route.pattern,
                )

    def use(self, *middleware: Middleware) -> None:
        """Add router middleware. The first one added runs outermost."""
        if self._compiled:
            msg = "Cannot add middleware after compilation."
            raise RuntimeError(msg)
        self._middleware.extend(middleware)

    @property
    def middleware(self) -> tuple[Middleware, ...]:
        return tuple(self._middleware)

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in registration order."""
        return [entry.route for entry in self._entries]

    @property
    def compiled(self) -> bool:
        return self._compiled

    def compile(self) -> None:
        """Compose handler chains and freeze the router."""
        if self._compiled:
            return
        by_method: dict[str, list[_Entry]] = {m: [] for m in SUPPORTED_METHODS}
        for entry in self._entries:
            entry.serve = compose(entry.route, self._middleware)
            by_method[entry.route.method].append(entry)
        self._table = {method: tuple(entries) for method, entries in by_method.items()}
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request method and path against compiled routes.

        Returns a ``RouteMatch`` whose outcome is ``FOUND``, ``NOT_FOUND``
        (no route for a supported method), or ``NOT_IMPLEMENTED`` (method
        not supported at all).
        """
        entries = self._table.get(method)
        if entries is None:
            return _NOT_IMPLEMENTED
        for entry in entries:
            params = entry.match_path(path)
            if params is not None:
                return RouteMatch(
                    outcome=MatchOutcome.FOUND,
                    route=entry.route,
                    path_params=params,
                    serve=entry.serve,
                )
        return _NOT_FOUND
