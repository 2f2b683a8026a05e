"""Perch application class.

Mutable during setup (route registration, middleware, error handlers).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import logging
import threading
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import anyio

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch._internal.pool import Pool
from perch._internal.types import ErrorHandler, Handler, Middleware
from perch.config import AppConfig
from perch.context import RequestContext
from perch.faults.error import Classifier
from perch.http.writer import ResponseWriter
from perch.middleware.accesslog import access_log
from perch.routing.group import RouteGroup
from perch.routing.route import Route
from perch.routing.router import Router
from perch.server.errors import SpecialHandlers, build_special_handlers
from perch.server.handler import handle_request

logger = logging.getLogger("perch.server")


class App:
    """The perch application.

    Mutable during setup (routes, groups, middleware, error handlers).
    Frozen at runtime when ``app.run()`` or ``__call__()`` is first invoked.

    ``app.state`` is a plain namespace for wiring services to handlers::

        app.state.users = UserService(store)

        @app.route("/users/:email")
        def get_user(w, request):
            ...

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the router, even if several workers receive their
        first request at once.
    """

    __slots__ = (
        "_contexts",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_groups",
        "_middleware_list",
        "_pending_routes",
        # Compiled state (populated by _freeze)
        "_router",
        "_shutdown_hooks",
        "_special",
        "_special_middleware",
        "_startup_hooks",
        "_writers",
        "classifier",
        "config",
        "state",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = (config or AppConfig()).validate()
        self.classifier = Classifier(self.config.default_fault_kind)
        self.state = SimpleNamespace()
        self._pending_routes: list[Route] = []
        self._groups: list[RouteGroup] = []
        self._middleware_list: list[Middleware] = []
        self._special_middleware: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set by _freeze()
        self._router: Router | None = None
        self._special: SpecialHandlers | None = None
        self._writers: Pool[ResponseWriter] = Pool(ResponseWriter, reset=ResponseWriter.reset)
        self._contexts: Pool[RequestContext] = Pool(RequestContext, reset=RequestContext.reset)

    # -- Route registration --

    def route(
        self,
        pattern: str,
        *,
        method: str = "GET",
        name: str | None = None,
        trailing_slash: bool = False,
        fall_through: bool = False,
    ) -> Callable[[Handler], Handler]:
        """Register a single-handler route via decorator.

        Args:
            pattern: URL pattern. Use ``:name`` for a path parameter and
                ``:name*`` for a wildcard spanning one or more segments.
            method: HTTP method. Defaults to ``"GET"``.
            name: Optional route name, used in logs and ``request.route_name``.
            trailing_slash: Also match the pattern followed by ``/``.
            fall_through: Keep running later handlers after one has written.
        """

        def decorator(func: Handler) -> Handler:
            self.add_route(
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

    def add_route(self, *routes: Route) -> None:
        """Register fully specified routes, e.g. with several handlers."""
        self._check_not_frozen()
        self._pending_routes.extend(routes)

    def add_group(self, *groups: RouteGroup) -> None:
        """Register route groups. Their routes are resolved at freeze time."""
        self._check_not_frozen()
        self._groups.extend(groups)

    @property
    def routes(self) -> list[Route]:
        """All routes as they will be (or were) compiled, in order."""
        if self._router is not None:
            return self._router.routes
        return self._collect_routes()

    def _collect_routes(self) -> list[Route]:
        routes = list(self._pending_routes)
        for group in self._groups:
            routes.extend(group.routes())
        return routes

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[BaseException],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator.

        The handler is called as ``handler(w, request, exc)``. Register
        ``404`` and ``501`` to replace the responses for unmatched paths
        and unsupported methods.
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def use(self, *middleware: Middleware) -> None:
        """Add router middleware. The first one added runs outermost."""
        self._check_not_frozen()
        self._middleware_list.extend(middleware)

    def use_on_special_handlers(self, *middleware: Middleware) -> None:
        """Add middleware around the 404 and 501 handlers."""
        self._check_not_frozen()
        self._special_middleware.extend(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Shutdown hooks run concurrently. All of them together get
        ``config.shutdown_timeout`` seconds; whatever is still running
        after that is cancelled.
        """
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start serving with pounce (``pip install perch[server]``).

        Compiles the app and blocks until the server stops.
        """
        from perch.logs import configure_logging

        self._ensure_frozen()
        configure_logging(self.config.log_level, log_format=self.config.log_format)

        from pounce.config import ServerConfig
        from pounce.server import Server

        config = ServerConfig(
            host=host or self.config.host,
            port=port or self.config.port,
            workers=self.config.workers,
            log_format=self.config.log_format,
            log_level=self.config.log_level,
            request_timeout=self.config.read_timeout,
            keep_alive_timeout=self.config.write_timeout,
        )
        Server(config, self).run()

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        self._ensure_frozen()

        assert self._router is not None
        assert self._special is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            special=self._special,
            error_handlers=self._error_handlers,
            writers=self._writers,
            contexts=self._contexts,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before the first HTTP request), then
        runs startup and shutdown hooks and signals completion back to
        the server.
        """
        try:
            self._ensure_frozen()
        except Exception as exc:
            await receive()
            await send({"type": "lifespan.startup.failed", "message": str(exc)})
            return

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        await invoke(hook)
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def shutdown(self) -> bool:
        """Run shutdown hooks concurrently within ``shutdown_timeout``.

        Returns ``False`` if the timeout expired before every hook finished.
        Hook failures are logged and do not stop the other hooks.
        """
        if not self._shutdown_hooks:
            return True

        async def run_hook(hook: Callable[..., Any]) -> None:
            try:
                await invoke(hook)
            except Exception:
                logger.exception("Shutdown hook %r failed", getattr(hook, "__name__", hook))

        with anyio.move_on_after(self.config.shutdown_timeout) as scope:
            async with anyio.create_task_group() as tg:
                for hook in self._shutdown_hooks:
                    tg.start_soon(run_hook, hook)

        if scope.cancelled_caught:
            logger.warning(
                "Shutdown hooks did not finish within %.1fs", self.config.shutdown_timeout
            )
            return False
        return True

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Router middleware; access logging goes outermost
        middleware = list(self._middleware_list)
        special_middleware = list(self._special_middleware)
        if self.config.access_log:
            middleware.insert(0, access_log)
            special_middleware.insert(0, access_log)

        # 2. Compile route table
        router = Router()
        router.use(*middleware)
        for route in self._collect_routes():
            router.add(route)
        router.compile()
        self._router = router

        # 3. 404 / 501
        self._special = build_special_handlers(self._error_handlers, tuple(special_middleware))

        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware, and error handlers before calling app.run()."
            )
            raise RuntimeError(msg)
