"""Invoke helpers: call sync or async handlers uniformly.

Perch handlers, error handlers and lifecycle hooks can be ``def`` or
``async def``. The sync/async check lives here and nowhere else.

Usage::

    from perch._internal.invoke import invoke

    result = await invoke(handler, w, request)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's a coroutine.

    Works with both sync and async callables::

        def hello(w, request):
            responses.send_response(w, "hello")

        async def create_user(w, request):
            payload = await request.json()
            ...
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
