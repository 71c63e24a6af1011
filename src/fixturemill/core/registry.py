"""
Factory registry: model type → attribute blueprint.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from .errors import ModelError, NoDefinedFactoryError

logger = logging.getLogger(__name__)

Blueprint = Mapping[str, Any]


def qualified_name(cls: type) -> str:
    """Return ``module.QualName`` for a class."""
    return f"{cls.__module__}.{cls.__qualname__}"


def import_model(path: str) -> type | None:
    """Import a class from ``package.module.Class`` or ``package.module:Class``.

    Returns None when the module does not exist or the path does not name a
    class. Import errors raised from inside an existing module propagate.
    """
    if ":" in path:
        module_name, _, attr_path = path.partition(":")
    elif "." in path:
        module_name, _, attr_path = path.rpartition(".")
    else:
        return None

    try:
        target: Any = importlib.import_module(module_name)
    except ModuleNotFoundError as e:
        # A missing dependency inside the model module is the caller's error
        if e.name is None or not (module_name == e.name or module_name.startswith(e.name + ".")):
            raise
        return None
    except ValueError:
        return None

    for part in attr_path.split("."):
        target = getattr(target, part, None)
        if target is None:
            return None

    return target if isinstance(target, type) else None


class FactoryRegistry:
    """Registry of blueprints keyed by model class.

    Model types may be given as classes or as strings. A string is matched
    against registered classes by qualified name, then by bare class name
    when exactly one registered class has it, and finally imported as a
    dotted path.
    """

    def __init__(self) -> None:
        self._blueprints: dict[type, Blueprint] = {}

    def define(self, model: type | str, blueprint: Mapping[str, Any] | None = None) -> type:
        """Register (or replace) the blueprint for a model type.

        Kinds are not validated here; they are interpreted when resolved.

        Returns:
            The model class the blueprint was registered under
        """
        cls = self._lookup_class(model)
        if cls is None:
            raise ModelError(
                model, f"Cannot define a factory for '{model}': no such model class could be found."
            )

        replaced = cls in self._blueprints
        self._blueprints[cls] = MappingProxyType(dict(blueprint or {}))
        logger.debug(
            "%s factory for %s (%d attributes)",
            "Replaced" if replaced else "Defined",
            qualified_name(cls),
            len(self._blueprints[cls]),
        )
        return cls

    def get(self, model: type | str) -> Blueprint:
        """Return the blueprint for a model type.

        Raises:
            NoDefinedFactoryError: If nothing was registered for it
        """
        cls = self._lookup_class(model)
        if cls is None or cls not in self._blueprints:
            raise NoDefinedFactoryError(model)
        return self._blueprints[cls]

    def model_class(self, model: type | str) -> type:
        """Resolve a model type reference to a registered class."""
        cls = self._lookup_class(model)
        if cls is None or cls not in self._blueprints:
            raise NoDefinedFactoryError(model)
        return cls

    def is_defined(self, model: type | str) -> bool:
        cls = self._lookup_class(model)
        return cls is not None and cls in self._blueprints

    def models(self) -> list[type]:
        """List registered model classes in definition order."""
        return list(self._blueprints)

    def clear(self) -> None:
        self._blueprints.clear()

    def __len__(self) -> int:
        return len(self._blueprints)

    def _lookup_class(self, model: type | str) -> type | None:
        if isinstance(model, type):
            return model
        if not isinstance(model, str):
            return type(model)

        name = model.strip()
        for cls in self._blueprints:
            if qualified_name(cls) == name:
                return cls

        by_short_name = [
            cls for cls in self._blueprints if name in (cls.__qualname__, cls.__name__)
        ]
        if len(by_short_name) == 1:
            return by_short_name[0]

        return import_model(name)
