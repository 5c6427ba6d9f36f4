"""Shared test fixtures and helpers for dagzet tests."""

import tempfile
from pathlib import Path

import pytest

from dagzet.interpreter import DagZet


# --- Fixtures ---


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def dz():
    """Provide a fresh builder with no namespace and no nodes."""
    return DagZet()


@pytest.fixture
def sample_dz():
    """Provide a builder holding a small, valid graph with attributes."""
    return build(
        "ns langs",
        "gr programming languages",
        "nn python",
        "ln dynamically typed",
        "tg scripting dynamic",
        "hl https://python.org",
        "fr notes.txt 3 9",
        "nn cpython",
        "co $ python",
        "cr reference implementation",
        "rm written in C",
        "nn pypy",
        "co $ python",
        "td benchmark against cpython",
        "ff what is pypy?",
        "fb a python written in python",
        "im pypy.png",
        "au pypy.mp3",
    )


# --- Helper Functions (not fixtures) ---


def build(*lines: str) -> DagZet:
    """Interpret lines into a new builder, failing on the first bad line.

    Lines are numbered from 1 so node references are recorded.
    """
    dz = DagZet()
    dz.parse_lines(lines)
    return dz


def write_file(directory: Path, name: str, *lines: str) -> Path:
    """Write directive lines to a file and return its path."""
    path = directory / name
    path.write_text("\n".join(lines) + "\n")
    return path
