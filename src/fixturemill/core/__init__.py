"""Core fixturemill functionality: kinds, registry, attribute resolution, ledger, loading."""

from .attributes import AttributeSet
from .errors import (
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
from .kinds import (
    Association,
    Call,
    Computed,
    Generator,
    Kind,
    KindResolver,
    KindType,
    Literal,
    detect,
)
from .registry import FactoryRegistry
from .saved import SavedSetTracker
from .settings import EngineSettings, load_settings

__all__ = [
    # Kinds
    "Association",
    "Call",
    "Computed",
    "Generator",
    "Kind",
    "KindResolver",
    "KindType",
    "Literal",
    "detect",
    # Components
    "AttributeSet",
    "FactoryRegistry",
    "SavedSetTracker",
    "EngineSettings",
    "load_settings",
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
