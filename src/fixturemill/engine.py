"""
Factory engine: builds, saves, and tracks model instances from blueprints.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from faker import Faker

from fixturemill.core.attributes import AttributeSet
from fixturemill.core.errors import SaveFailedError, SaveMethodNotFoundError
from fixturemill.core.kinds import KindResolver
from fixturemill.core.loader import load_definition_paths
from fixturemill.core.registry import FactoryRegistry
from fixturemill.core.saved import SavedSetTracker
from fixturemill.core.settings import EngineSettings, update_settings

logger = logging.getLogger(__name__)

# Attribute a model may expose to explain why its save method returned a falsy value
VALIDATION_ERRORS_ATTRIBUTE = "validation_errors"


class FactoryEngine:
    """
    Creates populated model instances for tests.

    One engine owns one registry, one saved-instance ledger and one Faker
    instance. It is not thread safe; use one engine per worker.

    Example::

        engine = FactoryEngine(locale="en_GB", seed=42)
        engine.define(User, {"name": "name", "email": "email"})

        user = engine.create(User, {"name": "Ada"})
        assert engine.is_saved(user)

        engine.delete_saved()
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        save_method: str | None = None,
        delete_method: str | None = None,
        locale: str | None = None,
        seed: int | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            settings: Base settings (defaults to ``EngineSettings()``)
            save_method: Override for the save method name
            delete_method: Override for the delete method name
            locale: Override for the Faker locale
            seed: Override for the Faker seed
        """
        self.settings = update_settings(
            settings or EngineSettings(),
            save_method=save_method,
            delete_method=delete_method,
            locale=locale,
            seed=seed,
        )
        self.registry = FactoryRegistry()
        self.tracker = SavedSetTracker()
        self.faker = self._make_faker(self.settings)
        self.resolver = KindResolver(self.faker, self.create)
        self.attribute_set = AttributeSet(self.registry, self.resolver)
        self._loaded_files: set[Path] = set()

    @staticmethod
    def _make_faker(settings: EngineSettings) -> Faker:
        faker = Faker(settings.locale)
        if settings.seed is not None:
            faker.seed_instance(settings.seed)
        return faker

    # Configuration

    def set_save_method(self, method: str) -> None:
        """Set the method called on instances by ``create``."""
        self.settings = update_settings(self.settings, save_method=method)

    def set_delete_method(self, method: str) -> None:
        """Set the method called on saved instances by ``delete_saved``."""
        self.settings = update_settings(self.settings, delete_method=method)

    def set_locale(self, locale: str) -> None:
        """Switch the Faker locale; the provider is rebuilt (and reseeded if seeded)."""
        settings = update_settings(self.settings, locale=locale)
        self.faker = self._make_faker(settings)
        self.settings = settings
        self.resolver.provider = self.faker

    # Definitions

    def define(self, model: type | str, blueprint: Mapping[str, Any] | None = None) -> type:
        """Register (or replace) the blueprint for a model type."""
        return self.registry.define(model, blueprint)

    def load_factories(self, paths: str | Path | Iterable[str | Path]) -> list[Path]:
        """
        Execute the factory definition files in one or more directories.

        Every ``*.py`` file found recursively is run once per engine; its
        module-level ``fixturemill.define`` calls register on this engine.

        Args:
            paths: Directory or directories to scan

        Returns:
            Files executed by this call

        Raises:
            DirectoryNotFoundError: If a path is not a directory
        """
        executed = load_definition_paths(self, paths, self._loaded_files)
        logger.info(
            "Loaded %d factory definition files (%d factories defined)",
            len(executed),
            len(self.registry),
        )
        return executed

    # Building

    def instance(self, model: type | str, overrides: Mapping[str, Any] | None = None) -> Any:
        """
        Return a populated, unsaved instance of ``model``.

        Associations in the blueprint are still created (and saved).
        """
        cls = self.registry.model_class(model)
        obj = cls()
        self.attribute_set.resolve_all(cls, obj, overrides)

        logger.debug("Built %s instance", cls.__name__)
        return obj

    def create(self, model: type | str, overrides: Mapping[str, Any] | None = None) -> Any:
        """
        Build an instance, save it, and record it for teardown.

        Raises:
            NoDefinedFactoryError: If ``model`` has no blueprint
            SaveMethodNotFoundError: If the instance has no save method
            SaveFailedError: If the save method returned a falsy value
        """
        obj = self.instance(model, overrides)
        method = self.settings.save_method

        save = getattr(obj, method, None)
        if save is None or not callable(save):
            raise SaveMethodNotFoundError(obj, method)

        if not save():
            validation_errors = getattr(obj, VALIDATION_ERRORS_ATTRIBUTE, None)
            raise SaveFailedError(obj, validation_errors or None)

        self.tracker.record(obj)
        logger.debug("Saved %s instance", type(obj).__name__)
        return obj

    def seed(
        self,
        model: type | str,
        times: int = 1,
        overrides: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        """
        Create ``times`` saved instances of ``model``.

        The first failing create aborts the batch; instances saved before
        it stay in the ledger for ``delete_saved``.
        """
        if times < 0:
            raise ValueError(f"times must be zero or more, got {times}")
        return [self.create(model, overrides) for _ in range(times)]

    def attributes_for(self, obj: Any, overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """
        Return the resolved attributes for an instance or a model type.

        Given an instance, values are set on it while they are resolved so
        computed kinds can read them. Given a model type, a throwaway
        instance is used as the target.
        """
        if isinstance(obj, type | str):
            cls = self.registry.model_class(obj)
            return self.attribute_set.resolve_all(cls, cls(), overrides)
        return self.attribute_set.resolve_all(type(obj), obj, overrides)

    def generate_attr(self, kind: Any, obj: Any = None) -> Any:
        """Resolve a single kind specification, optionally against ``obj``."""
        return self.resolver.resolve(kind, obj)

    # Saved instances

    def saved(self) -> list[Any]:
        """Return saved instances in creation order."""
        return self.tracker.all()

    def is_saved(self, obj: Any) -> bool:
        return self.tracker.contains(obj)

    def delete_saved(self) -> None:
        """
        Delete every saved instance and empty the ledger.

        Raises:
            AggregateDeleteError: If any instance could not be deleted; the
                ledger is emptied regardless
        """
        count = len(self.tracker)
        self.tracker.delete_all(self.settings.delete_method)
        logger.debug("Deleted %d saved instances", count)
