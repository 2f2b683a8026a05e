"""Closed set of fault kinds and their HTTP status codes."""

from enum import IntEnum

DEFAULT_MESSAGE = "unknown error occurred"
"""User-facing text used when no fault in a chain carries a message."""


class Kind(IntEnum):
    """Semantic category of a fault.

    The set is deliberately small and status-code oriented, so any domain
    error can be classified without the classifier knowing the domain.
    Adding a kind means adding its catalogue constructors and its entry in
    ``_STATUS_BY_KIND``.
    """

    INTERNAL = 0
    """Internal system error, e.g. a database failure."""
    VALIDATION = 1
    """Invalid input value, e.g. a malformed email address."""
    INPUT_BODY = 2
    """Undecodable input, e.g. broken JSON."""
    DUPLICATE = 3
    """The resource already exists."""
    UNAUTHENTICATED = 4
    """Authentication required but missing or invalid."""
    UNAUTHORIZED = 5
    """Authenticated, but not allowed."""
    EMPTY = 6
    """A resource expected to be non-empty is empty."""
    NOT_FOUND = 7
    """The resource does not exist."""
    MAXIMUM_ATTEMPTS = 8
    """The same action was attempted more often than allowed."""
    SUBSCRIPTION_EXPIRED = 9
    """A paid subscription has lapsed."""
    DOWNSTREAM_DEPENDENCY_TIMEDOUT = 10
    """A downstream service did not answer in time."""

    @property
    def status_code(self) -> int:
        """HTTP status code for this kind. Unmapped kinds are 500."""
        return _STATUS_BY_KIND.get(self, 500)


_STATUS_BY_KIND: dict[Kind, int] = {
    Kind.VALIDATION: 422,
    Kind.INPUT_BODY: 400,
    Kind.DUPLICATE: 409,
    Kind.UNAUTHENTICATED: 401,
    Kind.UNAUTHORIZED: 403,
    Kind.EMPTY: 410,
    Kind.NOT_FOUND: 404,
    Kind.MAXIMUM_ATTEMPTS: 429,
    Kind.SUBSCRIPTION_EXPIRED: 402,
}
