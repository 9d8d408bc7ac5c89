"""Shared test fixtures for depscope tests."""

import sys
from pathlib import Path

import pytest

# Add src to path so tests can import depscope without installing it
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from depscope.coordinator import DependencyAnalyser  # noqa: E402


@pytest.fixture
def write_java(tmp_path):
    """Write ``relative_path`` under tmp_path with the given Java source."""

    def _write(relative_path: str, source: str) -> Path:
        path = tmp_path / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def analyser():
    with DependencyAnalyser(workers=4) as a:
        yield a
