"""Inspect errors and their cause chains.

Every function accepts any exception (or ``None``) and never raises.
Classified errors are unwrapped through ``ClassifiedError.cause``, opaque
ones through ``__cause__`` (``raise ... from ...``).
"""

from collections.abc import Iterator

from perch.faults.error import ClassifiedError
from perch.faults.kinds import Kind


def unwrap(err: BaseException | None) -> BaseException | None:
    """Return the immediate cause of *err*, or ``None``."""
    match err:
        case None:
            return None
        case ClassifiedError(cause=cause):
            return cause
        case _:
            return err.__cause__


def walk(err: BaseException | None) -> Iterator[BaseException]:
    """Yield *err* and every error it wraps, outermost first."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = unwrap(err)


def is_(err: BaseException | None, target: BaseException) -> bool:
    """True if *err*, or anything it wraps, is (or equals) *target*."""
    return any(e is target or e == target for e in walk(err))


def as_[E: BaseException](err: BaseException | None, error_type: type[E]) -> E | None:
    """Return the first error in the chain that is an instance of *error_type*."""
    for e in walk(err):
        if isinstance(e, error_type):
            return e
    return None


def has_kind(err: BaseException | None, kind: Kind) -> bool:
    """True if any classified error in the chain has *kind*."""
    for e in walk(err):
        match e:
            case ClassifiedError(kind=k) if k == kind:
                return True
    return False


def kind_of(err: BaseException | None) -> Kind | None:
    """The kind of *err* itself, or ``None`` if it is not classified."""
    match err:
        case ClassifiedError(kind=kind):
            return kind
        case _:
            return None


def status_code(err: BaseException | None) -> tuple[int, bool]:
    """HTTP status code for *err*, and whether *err* is classified.

    Anything that is not a ClassifiedError maps to 500.
    """
    match err:
        case ClassifiedError(kind=kind):
            return kind.status_code, True
        case _:
            return 500, False


def message(err: BaseException | None) -> tuple[str, bool]:
    """User-facing message for *err*, and whether *err* is classified.

    For an opaque error this is ``str(err)``, which may not be safe to
    show to clients; check the flag.
    """
    match err:
        case None:
            return "", False
        case ClassifiedError():
            return err.user_message(), True
        case _:
            return str(err), False


def status_code_message(err: BaseException | None) -> tuple[int, str, bool]:
    """``status_code()`` and ``message()`` in one call."""
    code, classified = status_code(err)
    text, _ = message(err)
    return code, text, classified


# -- Stack traces --


def stacktrace_lines(err: BaseException | None) -> list[str]:
    """Stack trace lines for the whole chain, outermost error first.

    Inner errors are usually created further down the same call stack, so
    each error only contributes the lines that no inner error reported.
    """
    return _dedupe(
        [e.stack_trace() if isinstance(e, ClassifiedError) else [_describe(e)] for e in walk(err)]
    )


def stacktrace(err: BaseException | None) -> str:
    """``stacktrace_lines()`` joined with newlines."""
    return "\n".join(stacktrace_lines(err))


def stacktrace_no_format(err: BaseException | None) -> list[str]:
    """Like ``stacktrace_lines()`` with frame lines left unindented."""
    return _dedupe(
        [
            e.stack_trace_no_format() if isinstance(e, ClassifiedError) else [_describe(e)]
            for e in walk(err)
        ]
    )


def stacktrace_custom(err: BaseException | None, msg_format: str, trace_format: str) -> str:
    """Stack trace of the chain with custom directives.

    Supports ``%m`` (message, or ``str()`` of opaque errors), ``%p`` (file
    path), ``%l`` (line) and ``%f`` (function). Path, line and function are
    empty for opaque errors. Lines are concatenated without a separator,
    so put ``\\n`` in the formats as needed.
    """
    traces: list[list[str]] = []
    for e in walk(err):
        if isinstance(e, ClassifiedError):
            traces.append(e.stack_trace_custom(msg_format, trace_format))
        else:
            line = (
                msg_format.replace("%m", str(e))
                .replace("%p", "")
                .replace("%l", "")
                .replace("%f", "")
            )
            traces.append([line])
    return "".join(_dedupe(traces))


def _describe(err: BaseException) -> str:
    text = str(err)
    name = type(err).__name__
    return f"{name}: {text}" if text else name


def _dedupe(traces: list[list[str]]) -> list[str]:
    seen: set[str] = set()
    for idx in range(len(traces) - 1, -1, -1):
        unique: list[str] = []
        for line in traces[idx]:
            if line in seen:
                break
            unique.append(line)
            seen.add(line)
        traces[idx] = unique
    return [line for trace in traces for line in trace]
