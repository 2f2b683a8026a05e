"""Shared type aliases used across perch modules."""

from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias

# Route handler: ``handler(w, request)``, sync or async
Handler: TypeAlias = Callable[..., Any]

# A composed route: handler chain wrapped in middleware. Always async.
Serve: TypeAlias = Callable[[Any, Any], Awaitable[None]]

# ``middleware(w, request, next)`` where ``await next(w, request)`` continues
Middleware: TypeAlias = Callable[[Any, Any, Serve], Awaitable[None]]

# Error handler: ``handler(w, request, exc)``, sync or async
ErrorHandler: TypeAlias = Callable[..., Any]
