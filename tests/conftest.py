"""Shared fixtures for the generator tests.

The end-to-end fixtures copy the sample business module into a temporary
directory, generate its handler module next to it and import both once per
session.
"""

from __future__ import annotations

import functools
import importlib
import shutil
import sys
from pathlib import Path
from typing import Callable

import httpx
import pytest

from apigen.__main__ import generate_file

FIXTURES = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Source helpers for scanner / rule parser tests
# ---------------------------------------------------------------------------

@pytest.fixture
def write_source(tmp_path) -> Callable[[str], Path]:
    """Return a callable that writes source text to a module in tmp_path."""
    def _write(text: str, name: str = "api.py") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


# ---------------------------------------------------------------------------
# Generated module — built once from tests/fixtures/sample_api.py
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def generated_dir(tmp_path_factory) -> Path:
    """Generate sample_api_handlers.py next to a copy of sample_api.py."""
    workdir = tmp_path_factory.mktemp("generated")
    shutil.copy(FIXTURES / "sample_api.py", workdir / "sample_api.py")
    generate_file(workdir / "sample_api.py", workdir / "sample_api_handlers.py")
    return workdir


@pytest.fixture(scope="session")
def modules(generated_dir):
    """Import the sample module and its generated handlers with a fresh cache."""
    sys.path.insert(0, str(generated_dir))
    for name in ("sample_api", "sample_api_handlers"):
        sys.modules.pop(name, None)
    api = importlib.import_module("sample_api")
    handlers = importlib.import_module("sample_api_handlers")
    yield api, handlers
    sys.path.remove(str(generated_dir))


@pytest.fixture
def sample(modules):
    return modules[0]


@pytest.fixture
def handlers(modules):
    return modules[1]


# ---------------------------------------------------------------------------
# HTTP clients — generated dispatch functions behind httpx.MockTransport
# ---------------------------------------------------------------------------

def _client(serve, api) -> httpx.Client:
    transport = httpx.MockTransport(functools.partial(serve, api))
    return httpx.Client(transport=transport, base_url="http://example.com")


@pytest.fixture
def my_api(sample):
    return sample.MyApi()


@pytest.fixture
def client(handlers, my_api):
    """Client talking to a fresh MyApi instance."""
    with _client(handlers.serve_my_api, my_api) as c:
        yield c


@pytest.fixture
def other_client(handlers, sample):
    """Client talking to a fresh OtherApi instance."""
    with _client(handlers.serve_other_api, sample.OtherApi()) as c:
        yield c
