"""Route groups: shared prefix and middleware for a set of routes."""

from collections.abc import Iterable
from dataclasses import replace

from perch._internal.types import Handler, Middleware
from perch.routing.route import Route


class RouteGroup:
    """Routes under a common path prefix.

    Usage::

        v1 = RouteGroup("/v1")
        v1.add(Route("/users", (list_users,)))
        v1.use(require_token)
        app.add_group(v1)

    Group middleware wraps only the group's routes and runs inside router
    middleware. With ``skip_router_middleware`` the router middleware is
    not applied to the group's routes at all.

    Routes are resolved when the app freezes, so ``use()`` applies to
    routes added before and after it.
    """

    __slots__ = ("_middleware", "_routes", "prefix", "skip_router_middleware")

    def __init__(
        self,
        prefix: str,
        routes: Iterable[Route] = (),
        *,
        skip_router_middleware: bool = False,
    ) -> None:
        self.prefix = prefix.rstrip("/")
        self.skip_router_middleware = skip_router_middleware
        self._routes: list[Route] = list(routes)
        self._middleware: list[Middleware] = []

    def add(self, *routes: Route) -> None:
        self._routes.extend(routes)

    def route(
        self,
        pattern: str,
        *,
        method: str = "GET",
        name: str | None = None,
        trailing_slash: bool = False,
        fall_through: bool = False,
    ):
        """Decorator form of ``add()`` for a single-handler route."""

        def decorator(func: Handler) -> Handler:
            self.add(
                Route(
                    pattern,
                    (func,),
                    method=method,
                    name=name,
                    trailing_slash=trailing_slash,
                    fall_through=fall_through,
                )
            )
            return func

        return decorator

    def use(self, *middleware: Middleware) -> None:
        """Add group middleware. The first one added runs outermost."""
        self._middleware.extend(middleware)

    def routes(self) -> list[Route]:
        """The group's routes with prefix and middleware applied."""
        group_mw = tuple(self._middleware)
        return [
            replace(
                route,
                pattern=self.prefix + route.pattern,
                middleware=(*group_mw, *route.middleware),
                skip_middleware=route.skip_middleware or self.skip_router_middleware,
            )
            for route in self._routes
        ]
