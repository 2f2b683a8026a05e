"""Response snapshot returned by the test client."""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from perch.http.headers import to_mapping


@dataclass(frozen=True, slots=True)
class Response:
    """A completed HTTP response.

    ``headers`` maps lower-cased names to their first value;
    ``raw_headers`` keeps every pair in order.
    """

    status: int
    raw_headers: tuple[tuple[str, str], ...] = ()
    body: bytes = b""

    @property
    def headers(self) -> Mapping[str, str]:
        return to_mapping(self.raw_headers)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    @property
    def json(self) -> Any:
        return json.loads(self.body)
