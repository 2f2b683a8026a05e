"""Middleware: plain async callables, no base class required.

A middleware is any callable matching::

    async def mw(w: ResponseWriter, request: Request, next: Serve) -> None:
        ...
        await next(w, request)
        ...

Built-in middleware:
    access_log -- one log line per request on the ``perch.access`` logger
    recoverer -- turns unexpected exceptions into a 500 with the default message
"""

from perch.middleware.accesslog import access_log
from perch.middleware.recover import recoverer

__all__ = [
    "access_log",
    "recoverer",
]
