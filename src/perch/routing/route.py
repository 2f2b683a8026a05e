"""Route, Segment and RouteMatch frozen dataclasses."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from perch._internal.types import Handler, Middleware, Serve


@dataclass(frozen=True, slots=True)
class Segment:
    """A parsed segment of a route pattern.

    Literal:  ``/users``        (value="users")
    Param:    ``/:email``       (is_param=True, name="email")
    Wildcard: ``/:filepath*``   (is_param=True, is_wildcard=True, name="filepath")
    """

    value: str
    is_param: bool = False
    is_wildcard: bool = False
    name: str | None = None


@dataclass(frozen=True, slots=True)
class Route:
    """A route declaration. Immutable once created.

    ``handlers`` run in order on the same response writer; once one of
    them writes a response the rest are skipped, unless ``fall_through``
    is set.

    ``trailing_slash`` lets ``/users`` also match ``/users/``. It does
    not redirect.
    """

    pattern: str
    handlers: tuple[Handler, ...]
    method: str = "GET"
    name: str | None = None
    trailing_slash: bool = False
    fall_through: bool = False
    # Route-level middleware, e.g. from a RouteGroup. Runs inside router middleware.
    middleware: tuple[Middleware, ...] = ()
    # Set by RouteGroup(skip_router_middleware=True)
    skip_middleware: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "handlers", tuple(self.handlers))
        object.__setattr__(self, "middleware", tuple(self.middleware))
        object.__setattr__(self, "method", self.method.upper())


class MatchOutcome(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    NOT_IMPLEMENTED = "not_implemented"


NO_PARAMS: Mapping[str, str] = MappingProxyType({})
"""Shared, read-only parameter map for matches without parameters."""


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of ``Router.match()``. A miss is a normal value, not an exception."""

    outcome: MatchOutcome
    route: Route | None = None
    path_params: Mapping[str, str] = NO_PARAMS
    serve: Serve | None = None

    @property
    def found(self) -> bool:
        return self.outcome is MatchOutcome.FOUND
