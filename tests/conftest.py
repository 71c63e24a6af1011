"""Shared pytest fixtures for fixturemill tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from fixturemill import FactoryEngine
from tests import models


@pytest.fixture(autouse=True)
def clear_call_logs() -> Iterator[None]:
    """Reset the save/delete logs around every test."""
    models.SAVE_LOG.clear()
    models.DELETE_LOG.clear()
    yield
    models.SAVE_LOG.clear()
    models.DELETE_LOG.clear()


@pytest.fixture
def engine() -> FactoryEngine:
    """Return a seeded engine with no factories defined."""
    return FactoryEngine(seed=1234)


@pytest.fixture
def user_engine(engine: FactoryEngine) -> FactoryEngine:
    """Return an engine with Company → Team → User factories defined."""
    engine.define(models.Company, {"name": "company"})
    engine.define(models.Team, {"name": "word", "company": "factory|Company"})
    engine.define(
        models.User,
        {
            "name": "name",
            "email": "email",
            "age": "random_int|18;90",
            "team": "factory|Team",
        },
    )
    return engine


@pytest.fixture
def definitions_dir(tmp_path: Path) -> Path:
    """Return a directory of factory definition files."""
    root = tmp_path / "factories"
    nested = root / "accounts"
    nested.mkdir(parents=True)

    (root / "companies.py").write_text(
        "from fixturemill import define\n"
        "from tests.models import Company\n"
        "\n"
        'define(Company, {"name": "company"})\n'
    )
    (nested / "users.py").write_text(
        "from fixturemill import define\n"
        "from tests.models import User\n"
        "\n"
        'define(User, {"name": "name", "email": "email", "company": "factory|Company"})\n'
    )
    (root / "_private.py").write_text("raise RuntimeError('must not be loaded')\n")
    (root / "notes.txt").write_text("not python\n")
    return root
