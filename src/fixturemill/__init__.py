"""
fixturemill - declarative test fixture factories.

Define a blueprint per model type, then build, save, and tear down
populated instances with Faker-generated values.
"""

from __future__ import annotations

from ._version import __version__
from .core.errors import (
    AggregateDeleteError,
    DeleteMethodNotFoundError,
    DirectoryNotFoundError,
    FixtureMillError,
    MethodNotFoundError,
    ModelError,
    NoDefinedFactoryError,
    SaveFailedError,
    SaveMethodNotFoundError,
    SettingsError,
    UnknownGeneratorError,
)
from .core.kinds import Association, Call, Computed, Generator, Literal
from .core.loader import define
from .core.settings import EngineSettings, load_settings
from .engine import FactoryEngine

__all__ = [
    "__version__",
    "FactoryEngine",
    "EngineSettings",
    "load_settings",
    "define",
    # Kinds
    "Association",
    "Call",
    "Computed",
    "Generator",
    "Literal",
    # Errors
    "FixtureMillError",
    "ModelError",
    "NoDefinedFactoryError",
    "MethodNotFoundError",
    "SaveMethodNotFoundError",
    "DeleteMethodNotFoundError",
    "SaveFailedError",
    "UnknownGeneratorError",
    "AggregateDeleteError",
    "DirectoryNotFoundError",
    "SettingsError",
]
