"""Shared fixtures for the shader dependency graph tests."""

from pathlib import Path

import pytest


FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def fixtures_dir():
    """Directory holding the fixture shaders."""
    return str(FIXTURES)


@pytest.fixture
def transform_dir():
    """Fixture package declaring a hex colour transform in its package.json."""
    return str(FIXTURES / "transform")


@pytest.fixture
def entry_file(transform_dir):
    """Entry shader importing another.glsl and the vendored glsl-fake."""
    return str(Path(transform_dir) / "index.glsl")


@pytest.fixture
def another_file(transform_dir):
    return str(Path(transform_dir) / "another.glsl")


@pytest.fixture
def vendored_file():
    return str(FIXTURES / "node_modules" / "glsl-fake" / "index.glsl")


def join_path(specifier, basedir):
    """Resolver for in-memory sources: plain path join, no file access needed."""
    return str((Path(basedir) / specifier).resolve())


def no_config(directory):
    return None


def forbidden_read(path):
    raise AssertionError(f"reader called for {path}")


@pytest.fixture
def memory_graph_options():
    """Options for a graph served entirely from the ``files`` mapping."""
    return {
        "read_file": forbidden_read,
        "resolve": join_path,
        "find_config": no_config,
    }
