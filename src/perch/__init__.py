"""Perch: a small ASGI web framework with classified errors.

Routes with ``:param`` patterns, chained handlers that stop at the first
response, and errors that carry their own HTTP status and a message that
is safe to show clients.

Basic usage::

    from perch import App, responses

    app = App()

    @app.route("/users/:email")
    def get_user(w, request):
        responses.r200(w, {"email": request.path_params["email"]})

    app.run()

Classified errors::

    from perch import faults

    raise faults.not_found("user not found")   # -> 404 {"errors": "user not found", ...}
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ClassifiedError",
    "ConfigurationError",
    "HTTPError",
    "Kind",
    "MethodNotImplemented",
    "NotFound",
    "PerchError",
    "Request",
    "Response",
    "ResponseWriter",
    "Route",
    "RouteGroup",
    "get_context",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "AppConfig":
        from perch.config import AppConfig

        return AppConfig

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name == "ResponseWriter":
        from perch.http.writer import ResponseWriter

        return ResponseWriter

    if name == "Route":
        from perch.routing.route import Route

        return Route

    if name == "RouteGroup":
        from perch.routing.group import RouteGroup

        return RouteGroup

    if name in ("ClassifiedError", "Kind"):
        from perch import faults

        return getattr(faults, name)

    if name in (
        "PerchError",
        "ConfigurationError",
        "HTTPError",
        "NotFound",
        "MethodNotImplemented",
    ):
        from perch import errors

        return getattr(errors, name)

    if name == "get_context":
        from perch.context import get_context

        return get_context

    msg = f"module 'perch' has no attribute {name!r}"
    raise AttributeError(msg)
