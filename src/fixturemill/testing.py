"""
pytest plugin for fixturemill.

Registered through the ``pytest11`` entry point. Provides a
``fixture_engine`` fixture: a fresh FactoryEngine per test, configured
from ``FIXTUREMILL_*`` environment variables, with definitions loaded from
the ``fixturemill_paths`` ini option. Everything the test saved is deleted
at teardown.

Example ``pytest.ini``::

    [pytest]
    fixturemill_paths =
        tests/factories
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from fixturemill.core.settings import load_settings
from fixturemill.engine import FactoryEngine

PATHS_INI = "fixturemill_paths"


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addini(
        PATHS_INI,
        type="linelist",
        default=[],
        help="Directories of fixturemill factory definition files, relative to rootdir",
    )


def definition_paths(config: pytest.Config) -> list[Path]:
    """Return configured definition directories, resolved against rootdir."""
    return [Path(config.rootpath) / entry for entry in config.getini(PATHS_INI)]


@pytest.fixture
def fixture_engine(request: pytest.FixtureRequest) -> Iterator[FactoryEngine]:
    """A FactoryEngine whose saved instances are deleted after the test."""
    engine = FactoryEngine(load_settings())
    paths = definition_paths(request.config)
    if paths:
        engine.load_factories(paths)

    yield engine

    engine.delete_saved()
