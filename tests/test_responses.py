"""Tests for perch.responses: JSON envelopes and shorthands."""

import json
import logging

import pytest

from perch import faults, responses
from perch.http.writer import ResponseWriter


def _json(w: ResponseWriter):
    return json.loads(w.body)


class TestSend:
    def test_plain(self) -> None:
        w = ResponseWriter()
        responses.send(w, "hi", 202)
        assert w.status == 202
        assert w.body == b"hi"
        assert w.header().get("content-type") == responses.TEXT_CONTENT_TYPE

    def test_custom_content_type(self) -> None:
        w = ResponseWriter()
        responses.send(w, b"<p>", 200, "text/html")
        assert w.header().get("content-type") == "text/html"

    def test_non_string_payload(self) -> None:
        w = ResponseWriter()
        responses.send(w, 42, 200)
        assert w.body == b"42"

    def test_send_header(self) -> None:
        w = ResponseWriter()
        responses.send_header(w, 304)
        assert w.status == 304
        assert w.header_written is True
        assert w.written is False


class TestEnvelopes:
    def test_send_response(self) -> None:
        w = ResponseWriter()
        responses.send_response(w, {"id": 1}, 200)
        assert _json(w) == {"data": {"id": 1}, "status": 200}
        assert w.header().get("content-type") == "application/json"

    def test_send_error(self) -> None:
        w = ResponseWriter()
        responses.send_error(w, ["a", "b"], 400)
        assert w.status == 400
        assert _json(w) == {"errors": ["a", "b"], "status": 400}

    def test_unencodable_payload(self, caplog: pytest.LogCaptureFixture) -> None:
        w = ResponseWriter()
        with caplog.at_level(logging.ERROR, logger="perch.server"):
            responses.send_response(w, {"when": object()}, 200)
        assert w.status == 500
        assert _json(w) == {"errors": responses.ERR_INTERNAL_SERVER, "status": 500}
        assert "Failed to encode" in caplog.text

    @pytest.mark.parametrize(
        ("helper", "status", "key"),
        [
            (responses.r200, 200, "data"),
            (responses.r201, 201, "data"),
            (responses.r302, 302, "data"),
            (responses.r400, 400, "errors"),
            (responses.r403, 403, "errors"),
            (responses.r404, 404, "errors"),
            (responses.r406, 406, "errors"),
            (responses.r451, 451, "errors"),
            (responses.r500, 500, "errors"),
        ],
    )
    def test_shorthands(self, helper, status: int, key: str) -> None:
        w = ResponseWriter()
        helper(w, "payload")
        assert w.status == status
        assert _json(w) == {key: "payload", "status": status}

    def test_r204(self) -> None:
        w = ResponseWriter()
        responses.r204(w)
        assert w.status == 204
        assert w.body == b""


class TestSendFault:
    def test_classified(self) -> None:
        w = ResponseWriter()
        responses.send_fault(w, faults.wrap(faults.duplicate("email taken"), "signup"))
        assert _json(w) == {"errors": "signup: email taken", "status": 409}

    def test_opaque(self, caplog: pytest.LogCaptureFixture) -> None:
        w = ResponseWriter()
        with caplog.at_level(logging.ERROR, logger="perch.server"):
            responses.send_fault(w, KeyError("secret"))
        assert _json(w) == {"errors": faults.DEFAULT_MESSAGE, "status": 500}
        assert "KeyError" in caplog.text

    def test_client_error_not_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        w = ResponseWriter()
        with caplog.at_level(logging.ERROR, logger="perch.server"):
            responses.send_fault(w, faults.validation("bad"))
        assert caplog.text == ""
