"""Classified errors: kinds, user-facing messages and status codes.

Attach a kind and a safe message where an error is detected, wrap it with
context on the way up, and let the transport layer pick the response::

    from perch import faults

    def read_user(email):
        try:
            return store.read(email)
        except KeyError as exc:
            raise faults.not_found_err(exc, "user not found") from exc

    # in the HTTP layer
    status, msg, _ = faults.status_code_message(err)

``message()`` output is meant for API clients. Stack traces
(``stacktrace()``) are for server-side logs only.
"""

from perch.faults.catalogue import (
    classify,
    default_classifier,
    downstream_dependency_timedout,
    downstream_dependency_timedout_err,
    duplicate,
    duplicate_err,
    empty,
    empty_err,
    input_body,
    input_body_err,
    internal,
    internal_err,
    maximum_attempts,
    maximum_attempts_err,
    new,
    not_found,
    not_found_err,
    subscription_expired,
    subscription_expired_err,
    unauthenticated,
    unauthenticated_err,
    unauthorized,
    unauthorized_err,
    validation,
    validation_err,
    wrap,
)
from perch.faults.chain import (
    as_,
    has_kind,
    is_,
    kind_of,
    message,
    stacktrace,
    stacktrace_custom,
    stacktrace_lines,
    stacktrace_no_format,
    status_code,
    status_code_message,
    unwrap,
    walk,
)
from perch.faults.error import ClassifiedError, Classifier, Frame
from perch.faults.kinds import DEFAULT_MESSAGE, Kind

__all__ = [
    "DEFAULT_MESSAGE",
    "ClassifiedError",
    "Classifier",
    "Frame",
    "Kind",
    "as_",
    "classify",
    "default_classifier",
    "downstream_dependency_timedout",
    "downstream_dependency_timedout_err",
    "duplicate",
    "duplicate_err",
    "empty",
    "empty_err",
    "has_kind",
    "input_body",
    "input_body_err",
    "internal",
    "internal_err",
    "is_",
    "kind_of",
    "maximum_attempts",
    "maximum_attempts_err",
    "message",
    "new",
    "not_found",
    "not_found_err",
    "stacktrace",
    "stacktrace_custom",
    "stacktrace_lines",
    "stacktrace_no_format",
    "status_code",
    "status_code_message",
    "subscription_expired",
    "subscription_expired_err",
    "unauthenticated",
    "unauthenticated_err",
    "unauthorized",
    "unauthorized_err",
    "unwrap",
    "validation",
    "validation_err",
    "walk",
    "wrap",
]
