"""Tests for perch.logs: level routing to stdout/stderr and JSON output."""

import io
import json
import logging
import sys

import pytest

from perch.logs import JSONFormatter, configure_logging, level_of


@pytest.fixture
def streams():
    out, err = io.StringIO(), io.StringIO()
    yield out, err
    logger = logging.getLogger("perch")
    for handler in [h for h in logger.handlers if getattr(h, "_perch", False)]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


class TestLevelOf:
    @pytest.mark.parametrize(
        ("name", "level"),
        [("debug", logging.DEBUG), ("INFO", logging.INFO), ("warn", logging.WARNING),
         ("fatal", logging.CRITICAL), (logging.ERROR, logging.ERROR)],
    )
    def test_names(self, name: str | int, level: int) -> None:
        assert level_of(name) == level

    def test_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            level_of("loud")


class TestConfigureLogging:
    def test_info_to_stdout_warning_to_stderr(self, streams) -> None:
        out, err = streams
        configure_logging("debug", stdout=out, stderr=err)
        logging.getLogger("perch.server").info("started")
        logging.getLogger("perch.server").error("failed")

        assert "started" in out.getvalue()
        assert "failed" not in out.getvalue()
        assert "failed" in err.getvalue()
        assert "started" not in err.getvalue()

    def test_level_threshold(self, streams) -> None:
        out, err = streams
        configure_logging("warning", stdout=out, stderr=err)
        logging.getLogger("perch.routing").info("quiet")
        logging.getLogger("perch.routing").warning("loud")
        assert out.getvalue() == ""
        assert "loud" in err.getvalue()

    def test_disabled_levels(self, streams) -> None:
        out, err = streams
        configure_logging("debug", stdout=out, stderr=err, disabled=["info"])
        logger = logging.getLogger("perch.access")
        logger.info("GET / 1ms 200")
        logger.debug("details")
        assert "GET /" not in out.getvalue()
        assert "details" in out.getvalue()

    def test_reconfigure_replaces_handlers(self, streams) -> None:
        out, err = streams
        configure_logging(stdout=out, stderr=err)
        configure_logging(stdout=out, stderr=err)
        logging.getLogger("perch").info("once")
        assert out.getvalue().count("once") == 1

    def test_json_format(self, streams) -> None:
        out, err = streams
        configure_logging(stdout=out, stderr=err, log_format="json")
        logging.getLogger("perch.server").info("hello %s", "world")
        payload = json.loads(out.getvalue())
        assert payload["level"] == "info"
        assert payload["logger"] == "perch.server"
        assert payload["message"] == "hello world"


class TestJSONFormatter:
    def test_includes_exception(self) -> None:
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord(
                "perch", logging.ERROR, __file__, 1, "oops", None, sys.exc_info()
            )
        payload = json.loads(JSONFormatter().format(record))
        assert payload["message"] == "oops"
        assert "ValueError: bad" in payload["exc"]
