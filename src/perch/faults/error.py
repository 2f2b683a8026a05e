"""ClassifiedError and the Classifier that builds it.

A ClassifiedError carries a :class:`Kind`, a user-facing message, an
optional cause and the call-site stack captured when it was created.
It is immutable after construction, so the same instance can be logged
or re-raised from any thread.

Errors are either *classified* (``ClassifiedError``) or *opaque* (any
other exception). Code that needs to tell them apart matches on the
class pattern::

    match err:
        case ClassifiedError(kind=kind, message=msg):
            ...
        case _:
            ...
"""

import os
import sys
from dataclasses import dataclass
from types import FrameType

from perch.faults.kinds import DEFAULT_MESSAGE, Kind

# Frames inside this package are never reported as the attach point.
_PACKAGE_DIR = os.path.dirname(__file__) + os.sep
_MAX_FRAMES = 100


@dataclass(frozen=True, slots=True)
class Frame:
    """One captured call site."""

    file: str
    line: int
    function: str

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


def capture_frames() -> tuple[Frame, ...]:
    """Capture the caller's stack, innermost first, skipping perch.faults."""
    frame: FrameType | None = sys._getframe(1)
    while frame is not None and frame.f_code.co_filename.startswith(_PACKAGE_DIR):
        frame = frame.f_back

    frames: list[Frame] = []
    while frame is not None and len(frames) < _MAX_FRAMES:
        code = frame.f_code
        frames.append(Frame(code.co_filename, frame.f_lineno, code.co_qualname))
        frame = frame.f_back
    return tuple(frames)


class ClassifiedError(Exception):
    """An error with a kind, a user-facing message and an optional cause.

    Prefer the constructors in :mod:`perch.faults` (``not_found()``,
    ``wrap()`` ...) over instantiating this class directly.

    ``str(err)`` renders the whole chain without file/line information.
    ``format(err, spec)`` supports:

    - ``""`` / ``"s"``: the user-facing message (see ``user_message()``)
    - ``"+"``: the whole chain with the attach point of every fault
    - ``"+s"``: the whole chain without attach points, same as ``str()``
    """

    __match_args__ = ("kind", "message", "cause")

    def __init__(
        self,
        message: str = "",
        *,
        kind: Kind = Kind.INTERNAL,
        cause: BaseException | None = None,
        frames: tuple[Frame, ...] | None = None,
    ) -> None:
        super().__init__(message)
        object.__setattr__(self, "_message", message)
        object.__setattr__(self, "_kind", kind)
        object.__setattr__(self, "_cause", cause)
        object.__setattr__(self, "_frames", frames if frames is not None else capture_frames())
        if cause is not None:
            # Keeps the chain visible in ordinary Python tracebacks.
            self.__cause__ = cause

    def __setattr__(self, name: str, value: object) -> None:
        # Dunder attributes belong to the exception machinery
        # (__traceback__, __notes__, ...).
        if name.startswith("__"):
            super().__setattr__(name, value)
            return
        msg = f"ClassifiedError is immutable, cannot set {name!r}"
        raise AttributeError(msg)

    def __reduce__(self) -> tuple[object, ...]:
        return (_restore, (self._message, self._kind, self._cause, self._frames))

    # -- Fields --

    @property
    def message(self) -> str:
        """This fault's own message. May be empty."""
        return self._message

    @property
    def kind(self) -> Kind:
        return self._kind

    @property
    def cause(self) -> BaseException | None:
        """The wrapped error, or ``None``."""
        return self._cause

    @property
    def frames(self) -> tuple[Frame, ...]:
        """Call sites captured at construction, innermost first."""
        return self._frames

    @property
    def file_line(self) -> str:
        """``file:line`` of the attach point, or ``""`` if nothing was captured."""
        if not self._frames:
            return ""
        return str(self._frames[0])

    @property
    def status_code(self) -> int:
        return self._kind.status_code

    # -- Rendering --

    def user_message(self) -> str:
        """Join every classified message in the chain, outer to inner.

        Opaque errors in the chain are skipped, so the result is safe to
        return to API clients.
        """
        messages: list[str] = []
        err: BaseException | None = self
        while err is not None:
            match err:
                case ClassifiedError(message=msg, cause=cause):
                    if msg:
                        messages.append(msg)
                    err = cause
                case _:
                    err = err.__cause__

        if messages:
            return ": ".join(messages)
        return DEFAULT_MESSAGE

    def with_file_line(self) -> str:
        """Render the chain with the attach point of each fault.

        Each wrapped error starts on its own line. For server-side logs
        only.
        """
        prefix = f"{self.file_line}: " if self._frames else ""
        if self._cause is not None:
            match self._cause:
                case ClassifiedError() as inner:
                    rest = inner.with_file_line()
                case other:
                    rest = str(other)
            return f"{prefix}{self._message}\n{rest}"
        return f"{prefix}{self._message or DEFAULT_MESSAGE}"

    def __str__(self) -> str:
        if self._cause is not None:
            if self._message:
                return f"{self._message}: {self._cause!s}"
            return str(self._cause)
        return self._message or DEFAULT_MESSAGE

    def __repr__(self) -> str:
        return f"ClassifiedError(kind=Kind.{self._kind.name}, message={self._message!r})"

    def __format__(self, spec: str) -> str:
        if spec == "+":
            return self.with_file_line()
        if spec == "+s":
            return str(self)
        if spec in ("", "s"):
            return self.user_message()
        msg = f"Unsupported format spec {spec!r} for ClassifiedError"
        raise ValueError(msg)

    # -- Stack traces --

    def stack_trace(self) -> list[str]:
        """``function(): message`` followed by one tab-indented line per frame."""
        return self.stack_trace_custom("%f(): %m", "\t%p:%l")

    def stack_trace_no_format(self) -> list[str]:
        """Like ``stack_trace()`` without indentation."""
        return self.stack_trace_custom("%f(): %m", "%p:%l")

    def stack_trace_custom(self, msg_format: str, trace_format: str) -> list[str]:
        """Render the captured stack with custom formats.

        Directives: ``%m`` message, ``%p`` file path, ``%l`` line,
        ``%f`` function. *msg_format* renders the heading line using the
        attach point, *trace_format* renders each frame.
        """
        first = self._frames[0] if self._frames else Frame("", 0, "")
        lines = [_apply_format(msg_format, self._message, first)]
        lines.extend(_apply_format(trace_format, self._message, frame) for frame in self._frames)
        return lines


def _restore(
    message: str,
    kind: Kind,
    cause: BaseException | None,
    frames: tuple[Frame, ...],
) -> ClassifiedError:
    return ClassifiedError(message, kind=kind, cause=cause, frames=frames)


def _apply_format(fmt: str, message: str, frame: Frame) -> str:
    line = str(frame.line) if frame.file else ""
    return (
        fmt.replace("%m", message)
        .replace("%p", frame.file)
        .replace("%l", line)
        .replace("%f", frame.function)
    )


@dataclass(frozen=True, slots=True)
class Classifier:
    """Builds ClassifiedErrors with a configured default kind.

    The default kind is used by ``new()`` and by ``wrap()`` when the cause
    is not classified. It is fixed per instance, so configure it once at
    startup and pass the classifier to the layers that need it::

        classifier = Classifier(default_kind=Kind.VALIDATION)
        raise classifier.wrap(exc, "could not parse request")
    """

    default_kind: Kind = Kind.INTERNAL

    def new(self, message: str = "") -> ClassifiedError:
        """A causeless fault of the default kind."""
        return ClassifiedError(message, kind=self.default_kind)

    def classify(self, kind: Kind, message: str = "") -> ClassifiedError:
        """A causeless fault of the given kind."""
        return ClassifiedError(message, kind=kind)

    def classify_err(
        self, kind: Kind, cause: BaseException | None, message: str = ""
    ) -> ClassifiedError:
        """Wrap *cause* with an explicit kind, ignoring the cause's own kind."""
        return ClassifiedError(message, kind=kind, cause=cause)

    def wrap(self, cause: BaseException | None, *messages: str) -> ClassifiedError:
        """Wrap *cause*, inheriting its kind when it is classified.

        Multiple messages are joined with ``". "``.
        """
        match cause:
            case ClassifiedError(kind=kind):
                pass
            case _:
                kind = self.default_kind
        return ClassifiedError(". ".join(messages), kind=kind, cause=cause)
