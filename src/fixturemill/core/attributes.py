"""
Attribute set resolution for one model instance.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .kinds import KindResolver
from .registry import FactoryRegistry

logger = logging.getLogger(__name__)


class AttributeSet:
    """Merges caller overrides with a model's blueprint.

    Overrides always win and are passed through untouched. Every other
    blueprint attribute is resolved in declaration order and set on the
    target as soon as it is known, so computed kinds can read the
    overrides and any attribute declared before them.
    """

    def __init__(self, registry: FactoryRegistry, resolver: KindResolver) -> None:
        self.registry = registry
        self.resolver = resolver

    def resolve_all(
        self,
        model: type | str,
        target: Any,
        overrides: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Resolve the full attribute mapping for ``target``.

        Args:
            model: Model type whose blueprint is used
            target: Instance being populated
            overrides: Caller-supplied attribute values

        Returns:
            Mapping of every blueprint and override key to its value

        Raises:
            NoDefinedFactoryError: If ``model`` has no blueprint (nothing is resolved)
        """
        blueprint = self.registry.get(model)
        attributes: dict[str, Any] = dict(overrides or {})

        for name, value in attributes.items():
            setattr(target, name, value)

        for name, spec in blueprint.items():
            if name in attributes:
                continue
            value = self.resolver.resolve(spec, target)
            attributes[name] = value
            setattr(target, name, value)

        logger.debug(
            "Resolved %d attributes for %s (%d overridden)",
            len(attributes),
            type(target).__name__,
            len(overrides or {}),
        )
        return attributes
