"""Pytest configuration and fixtures."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from tests.factories import StubDataSource
from xcresult_json.config import get_settings
from xcresult_json.logging import PACKAGE_LOGGER
from xcresult_json.reports.registry import ParserRegistry, get_default_registry

if TYPE_CHECKING:
    from collections.abc import Generator


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-fuzz",
        action="store_true",
        default=False,
        help="Run fuzz tests (slower, uses hypothesis)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip fuzz tests unless explicitly enabled."""
    if config.getoption("--run-fuzz"):
        return

    skip_fuzz = pytest.mark.skip(reason="need --run-fuzz option to run")
    for item in items:
        if "fuzz" in item.keywords:
            item.add_marker(skip_fuzz)


@pytest.fixture(autouse=True)
def reset_package_logging() -> Generator[None, None, None]:
    """Undo configure_logging() so caplog sees package records in every test."""
    yield
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers = []
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Generator[None, None, None]:
    """Keep settings from reading the developer's environment or home directory."""
    monkeypatch.setenv("XCRESULT_JSON_SCHEMA_PATH", str(tmp_path / "schema.json"))
    monkeypatch.delenv("XCRESULT_JSON_CACHE_PATH", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def stub_source() -> StubDataSource:
    return StubDataSource()


@pytest.fixture
def registry(stub_source: StubDataSource) -> ParserRegistry:
    """The default registry wired to an in-memory data source."""
    return get_default_registry(stub_source)
