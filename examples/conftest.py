"""Shared pytest configuration for perch examples.

``example_app`` executes the ``app.py`` next to the requesting test
module and returns its ``app``. Every call builds a fresh namespace, so
each test starts with an empty store.
"""

import runpy
from pathlib import Path

import pytest


@pytest.fixture
def example_app(request: pytest.FixtureRequest):
    example_dir = Path(request.path).parent
    namespace = runpy.run_path(
        str(example_dir / "app.py"),
        run_name=f"example_{example_dir.name}",
    )
    return namespace["app"]
