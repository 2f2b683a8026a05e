"""Tests for handler chains, middleware composition and route groups."""

from perch.http.request import Request
from perch.http.writer import ResponseWriter
from perch.routing.group import RouteGroup
from perch.routing.route import Route
from perch.routing.router import Router


def _compile(*routes: Route, middleware=()) -> Router:
    r = Router()
    r.use(*middleware)
    for route in routes:
        r.add(route)
    r.compile()
    return r


async def _serve(router: Router, method: str, path: str) -> ResponseWriter:
    match = router.match(method, path)
    assert match.found
    w = ResponseWriter()
    await match.serve(w, Request(method, path, path_params=match.path_params))
    return w


def _recorder(calls: list[str], name: str):
    async def mw(w, request, next):
        calls.append(f"{name}:before")
        await next(w, request)
        calls.append(f"{name}:after")

    return mw


class TestHandlerChain:
    async def test_single_handler(self) -> None:
        def handler(w, request):
            w.write("hello")

        w = await _serve(_compile(Route("/x", (handler,))), "GET", "/x")
        assert w.body == b"hello"
        assert w.status == 200

    async def test_sync_and_async_handlers(self) -> None:
        calls: list[str] = []

        def first(w, request):
            calls.append("sync")

        async def second(w, request):
            calls.append("async")

        await _serve(_compile(Route("/x", (first, second))), "GET", "/x")
        assert calls == ["sync", "async"]

    async def test_stops_after_first_write(self) -> None:
        calls: list[str] = []

        def first(w, request):
            calls.append("first")
            w.write_header(201)
            w.write("created")

        def second(w, request):
            calls.append("second")
            w.write_header(500)
            w.write("late")

        w = await _serve(_compile(Route("/x", (first, second))), "GET", "/x")
        assert calls == ["first"]
        assert w.status == 201
        assert w.body == b"created"

    async def test_header_only_does_not_stop_chain(self) -> None:
        calls: list[str] = []

        def first(w, request):
            calls.append("first")
            w.write_header(202)

        def second(w, request):
            calls.append("second")
            w.write("body")

        w = await _serve(_compile(Route("/x", (first, second))), "GET", "/x")
        assert calls == ["first", "second"]
        assert w.status == 202
        assert w.body == b"body"

    async def test_fall_through_runs_every_handler(self) -> None:
        def first(w, request):
            w.write("a")

        def second(w, request):
            w.write("b")

        route = Route("/x", (first, second), fall_through=True)
        w = await _serve(_compile(route), "GET", "/x")
        assert w.body == b"ab"

    async def test_handler_sees_path_params(self) -> None:
        def handler(w, request):
            w.write(request.path_params["email"])

        w = await _serve(_compile(Route("/users/:email", (handler,))), "GET", "/users/a@b.c")
        assert w.body == b"a@b.c"


class TestMiddleware:
    async def test_first_registered_runs_outermost(self) -> None:
        calls: list[str] = []

        def handler(w, request):
            calls.append("handler")

        router = _compile(
            Route("/x", (handler,)),
            middleware=(_recorder(calls, "outer"), _recorder(calls, "inner")),
        )
        await _serve(router, "GET", "/x")
        assert calls == ["outer:before", "inner:before", "handler", "inner:after", "outer:after"]

    async def test_middleware_can_short_circuit(self) -> None:
        calls: list[str] = []

        async def deny(w, request, next):
            w.write_header(403)
            w.write("denied")

        def handler(w, request):
            calls.append("handler")

        w = await _serve(_compile(Route("/x", (handler,)), middleware=(deny,)), "GET", "/x")
        assert calls == []
        assert w.status == 403

    async def test_route_middleware_inside_router_middleware(self) -> None:
        calls: list[str] = []

        def handler(w, request):
            calls.append("handler")

        route = Route("/x", (handler,), middleware=(_recorder(calls, "route"),))
        await _serve(_compile(route, middleware=(_recorder(calls, "router"),)), "GET", "/x")
        assert calls == [
            "router:before",
            "route:before",
            "handler",
            "route:after",
            "router:after",
        ]

    async def test_skip_middleware(self) -> None:
        calls: list[str] = []

        def handler(w, request):
            calls.append("handler")

        route = Route("/x", (handler,), skip_middleware=True)
        await _serve(_compile(route, middleware=(_recorder(calls, "router"),)), "GET", "/x")
        assert calls == ["handler"]


class TestRouteGroup:
    def test_prefix(self) -> None:
        group = RouteGroup("/v1/")
        group.add(Route("/users", (lambda w, r: None,)))
        assert [route.pattern for route in group.routes()] == ["/v1/users"]

    def test_routes_at_construction(self) -> None:
        noop = (lambda w, r: None,)
        group = RouteGroup("/v2", [Route("/a", noop), Route("/b", noop)])
        assert [route.pattern for route in group.routes()] == ["/v2/a", "/v2/b"]

    def test_decorator(self) -> None:
        group = RouteGroup("/v1")

        @group.route("/users", method="POST", name="create")
        def create(w, request):
            pass

        (route,) = group.routes()
        assert route.pattern == "/v1/users"
        assert route.method == "POST"
        assert route.handlers == (create,)

    def test_routes_do_not_mutate_originals(self) -> None:
        original = Route("/users", (lambda w, r: None,))
        group = RouteGroup("/v1")
        group.add(original)
        group.routes()
        assert original.pattern == "/users"

    async def test_group_middleware_inside_router_middleware(self) -> None:
        calls: list[str] = []

        def handler(w, request):
            calls.append("handler")

        group = RouteGroup("/v1")
        group.add(Route("/x", (handler,)))
        group.use(_recorder(calls, "group"))
        router = _compile(*group.routes(), middleware=(_recorder(calls, "router"),))

        await _serve(router, "GET", "/v1/x")
        assert calls == [
            "router:before",
            "group:before",
            "handler",
            "group:after",
            "router:after",
        ]

    async def test_use_applies_to_routes_added_later(self) -> None:
        calls: list[str] = []
        group = RouteGroup("/v1")
        group.use(_recorder(calls, "group"))
        group.add(Route("/x", (lambda w, r: calls.append("handler"),)))

        await _serve(_compile(*group.routes()), "GET", "/v1/x")
        assert calls == ["group:before", "handler", "group:after"]

    async def test_skip_router_middleware(self) -> None:
        calls: list[str] = []
        group = RouteGroup("/internal", skip_router_middleware=True)
        group.use(_recorder(calls, "group"))
        group.add(Route("/x", (lambda w, r: calls.append("handler"),)))
        router = _compile(*group.routes(), middleware=(_recorder(calls, "router"),))

        await _serve(router, "GET", "/internal/x")
        assert calls == ["group:before", "handler", "group:after"]
