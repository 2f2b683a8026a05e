"""Fixed catalogue of fault constructors, one pair per kind.

``validation("bad email")`` creates a causeless fault of that kind,
``validation_err(exc, "bad email")`` wraps *exc* with it. The module-level
``new``/``wrap``/``classify`` use a classifier whose default kind is
``Kind.INTERNAL``; build your own :class:`Classifier` to change that.
"""

from perch.faults.error import ClassifiedError, Classifier
from perch.faults.kinds import Kind

default_classifier = Classifier()


def new(message: str = "") -> ClassifiedError:
    return default_classifier.new(message)


def classify(kind: Kind, message: str = "") -> ClassifiedError:
    return default_classifier.classify(kind, message)


def wrap(cause: BaseException | None, *messages: str) -> ClassifiedError:
    """Wrap *cause*; a classified cause keeps its kind, anything else is INTERNAL."""
    return default_classifier.wrap(cause, *messages)


# -- Causeless --


def internal(message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.INTERNAL)


def validation(message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.VALIDATION)


def input_body(message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.INPUT_BODY)


def duplicate(message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.DUPLICATE)


def unauthenticated(message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.UNAUTHENTICATED)


def unauthorized(message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.UNAUTHORIZED)


def empty(message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.EMPTY)


def not_found(message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.NOT_FOUND)


def maximum_attempts(message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.MAXIMUM_ATTEMPTS)


def subscription_expired(message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.SUBSCRIPTION_EXPIRED)


def downstream_dependency_timedout(message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.DOWNSTREAM_DEPENDENCY_TIMEDOUT)


# -- With cause --
# The kind is fixed by the constructor; the cause's own kind is ignored.


def internal_err(cause: BaseException | None, message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.INTERNAL, cause=cause)


def validation_err(cause: BaseException | None, message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.VALIDATION, cause=cause)


def input_body_err(cause: BaseException | None, message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.INPUT_BODY, cause=cause)


def duplicate_err(cause: BaseException | None, message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.DUPLICATE, cause=cause)


def unauthenticated_err(cause: BaseException | None, message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.UNAUTHENTICATED, cause=cause)


def unauthorized_err(cause: BaseException | None, message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.UNAUTHORIZED, cause=cause)


def empty_err(cause: BaseException | None, message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.EMPTY, cause=cause)


def not_found_err(cause: BaseException | None, message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.NOT_FOUND, cause=cause)


def maximum_attempts_err(cause: BaseException | None, message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.MAXIMUM_ATTEMPTS, cause=cause)


def subscription_expired_err(cause: BaseException | None, message: str = "") -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.SUBSCRIPTION_EXPIRED, cause=cause)


def downstream_dependency_timedout_err(
    cause: BaseException | None, message: str = ""
) -> ClassifiedError:
    return ClassifiedError(message, kind=Kind.DOWNSTREAM_DEPENDENCY_TIMEDOUT, cause=cause)
