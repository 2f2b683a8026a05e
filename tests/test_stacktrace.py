"""Tests for fault stack traces: capture, formatting, de-duplication."""

from perch import faults


def _make_inner():
    return faults.not_found("missing")


def _make_outer():
    inner = _make_inner()
    return faults.wrap(inner, "outer")


class TestCapture:
    def test_attach_point_is_caller(self) -> None:
        err = _make_inner()
        assert err.frames[0].function == "_make_inner"
        assert err.frames[0].file == __file__

    def test_frames_skip_faults_package(self) -> None:
        err = faults.internal("x")
        assert all("perch/faults" not in frame.file for frame in err.frames)

    def test_explicit_frames(self) -> None:
        frame = faults.Frame("app.py", 10, "handler")
        err = faults.ClassifiedError("x", frames=(frame,))
        assert err.file_line == "app.py:10"

    def test_no_frames(self) -> None:
        err = faults.ClassifiedError("x", frames=())
        assert err.file_line == ""
        assert err.with_file_line() == "x"


class TestStackTrace:
    def test_single_error_format(self) -> None:
        frame = faults.Frame("app.py", 10, "handler")
        err = faults.ClassifiedError("boom", frames=(frame,))
        assert err.stack_trace() == ["handler(): boom", "\tapp.py:10"]
        assert err.stack_trace_no_format() == ["handler(): boom", "app.py:10"]

    def test_custom_directives(self) -> None:
        frames = (faults.Frame("a.py", 1, "f"), faults.Frame("b.py", 2, "g"))
        err = faults.ClassifiedError("boom", frames=frames)
        assert err.stack_trace_custom("[%m]", "%f@%p#%l") == ["[boom]", "f@a.py#1", "g@b.py#2"]

    def test_chain_is_deduplicated(self) -> None:
        err = _make_outer()
        inner = faults.unwrap(err)
        lines = faults.stacktrace_lines(err)

        assert lines[0] == "_make_outer(): outer"
        assert lines[1].startswith(f"\t{__file__}:")
        # The outer fault stops at the first frame its cause already reported
        assert lines[2] == "_make_inner(): missing"
        assert lines[3:5] == inner.stack_trace()[1:3]

    def test_joined_with_newlines(self) -> None:
        err = _make_outer()
        assert faults.stacktrace(err) == "\n".join(faults.stacktrace_lines(err))

    def test_opaque_cause_described(self) -> None:
        err = faults.wrap(ValueError("boom"), "outer")
        assert faults.stacktrace_lines(err)[-1] == "ValueError: boom"

    def test_opaque_only(self) -> None:
        assert faults.stacktrace(ValueError("boom")) == "ValueError: boom"
        assert faults.stacktrace(None) == ""

    def test_no_format_for_chain(self) -> None:
        main = faults.Frame("main.py", 9, "main")
        a = faults.ClassifiedError("a", frames=(faults.Frame("x.py", 1, "f"), main))
        b = faults.ClassifiedError(
            "b", kind=a.kind, cause=a, frames=(faults.Frame("y.py", 2, "g"), main)
        )
        assert faults.stacktrace_no_format(b) == [
            "g(): b",
            "y.py:2",
            "f(): a",
            "x.py:1",
            "main.py:9",
        ]

    def test_no_format_opaque_cause(self) -> None:
        err = faults.wrap(ValueError("boom"), "outer")
        lines = faults.stacktrace_no_format(err)
        assert lines[-1] == "ValueError: boom"
        assert not any(line.startswith("\t") for line in lines)
        assert faults.stacktrace_no_format(None) == []

    def test_custom_for_chain(self) -> None:
        a = faults.ClassifiedError("a", frames=(faults.Frame("x.py", 1, "f"),))
        b = faults.ClassifiedError(
            "b", kind=a.kind, cause=a, frames=(faults.Frame("y.py", 2, "g"),)
        )
        rendered = faults.stacktrace_custom(b, "%m\n", "%p:%l\n")
        assert rendered == "b\ny.py:2\na\nx.py:1\n"

    def test_custom_opaque(self) -> None:
        assert faults.stacktrace_custom(ValueError("boom"), "%m;", "%p") == "boom;"
