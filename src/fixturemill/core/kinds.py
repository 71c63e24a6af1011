"""
Attribute kinds and the resolver that turns them into values.

A blueprint maps attribute names to kind specifications. A specification
can be one of the explicit kind objects below or a shorthand:

- any callable (not a class): ``Computed``, called with the target instance
- ``"factory|<model>"``: ``Association`` with no overrides
- ``"call|<method>"`` or ``"call|<method>|<a>;<b>"``: ``Call``
- ``"<faker_method>"`` or ``"<faker_method>|<a>;<b>"``: ``Generator``
- any other value: ``Literal``

Arguments in string shorthands are separated by ``;``. Each argument that
parses as an int or float is converted; everything else stays a string.

Examples::

    {
        "name": "name",
        "email": Generator("email", kwargs={"domain": "example.test"}),
        "age": "random_int|18;90",
        "slug": lambda user: user.name.lower().replace(" ", "-"),
        "team": "factory|myapp.models.Team",
        "owner": Association(User, {"role": "admin"}, attribute="id"),
        "role": Literal("member"),
    }
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .errors import FixtureMillError, MethodNotFoundError, UnknownGeneratorError

logger = logging.getLogger(__name__)

# Faker proxy methods that configure the provider rather than generate values
PROVIDER_CONTROL_METHODS = frozenset(
    {
        "add_provider",
        "del_arguments",
        "get_arguments",
        "get_formatter",
        "get_providers",
        "items",
        "provider",
        "seed",
        "seed_instance",
        "seed_locale",
        "set_arguments",
        "set_formatter",
    }
)

KIND_SEPARATOR = "|"
ARGUMENT_SEPARATOR = ";"
FACTORY_PREFIX = "factory"
CALL_PREFIX = "call"


class KindType(StrEnum):
    """Strategy used to produce an attribute value."""

    LITERAL = "literal"
    COMPUTED = "computed"
    ASSOCIATION = "association"
    CALL = "call"
    GENERATOR = "generator"


@dataclass(frozen=True)
class Literal:
    """A value used as is, including strings that would otherwise be kinds."""

    value: Any

    kind_type = KindType.LITERAL


@dataclass(frozen=True)
class Computed:
    """A function of the partially built target instance."""

    fn: Callable[[Any], Any]

    kind_type = KindType.COMPUTED


@dataclass(frozen=True)
class Association:
    """Create another model and use it (or one of its attributes) as the value.

    Attributes:
        model: Model class or name of the associated type
        overrides: Attributes passed to the nested create
        attribute: When set, use this attribute of the nested instance
            (for example ``"id"``) instead of the instance itself
    """

    model: type | str
    overrides: Mapping[str, Any] = field(default_factory=dict)
    attribute: str | None = None

    kind_type = KindType.ASSOCIATION


@dataclass(frozen=True)
class Call:
    """Call a static or class method on the target's model type."""

    method: str
    args: tuple[Any, ...] = ()

    kind_type = KindType.CALL


@dataclass(frozen=True)
class Generator:
    """Call a named method on the random data provider."""

    name: str
    args: tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=dict)

    kind_type = KindType.GENERATOR


Kind = Literal | Computed | Association | Call | Generator

# (model, overrides) -> saved instance
Creator = Callable[[Any, Mapping[str, Any]], Any]


def _coerce_argument(raw: str) -> Any:
    text = raw.strip()
    for convert in (int, float):
        try:
            return convert(text)
        except ValueError:
            continue
    return text


def parse_arguments(options: str) -> tuple[Any, ...]:
    """Split a ``a;b;c`` option string into converted arguments."""
    if not options:
        return ()
    return tuple(_coerce_argument(part) for part in options.split(ARGUMENT_SEPARATOR))


def parse_kind_string(spec: str) -> Association | Call | Generator:
    """Parse a string shorthand into an explicit kind."""
    head, _, rest = spec.partition(KIND_SEPARATOR)
    head = head.strip()

    if head == FACTORY_PREFIX:
        return Association(rest.strip())

    if head == CALL_PREFIX:
        method, _, options = rest.partition(KIND_SEPARATOR)
        return Call(method.strip(), parse_arguments(options))

    return Generator(head, parse_arguments(rest))


def detect(spec: Any) -> Kind:
    """Classify a kind specification.

    Detection order: literal, callable, association, call, generator.
    Values that match none of these are literals.
    """
    if isinstance(spec, Literal | Computed | Association | Call | Generator):
        return spec
    if callable(spec) and not isinstance(spec, type):
        return Computed(spec)
    if isinstance(spec, str):
        return parse_kind_string(spec)
    return Literal(spec)


class KindResolver:
    """Produces attribute values from kind specifications.

    Args:
        provider: Random data provider (a ``faker.Faker`` instance)
        creator: Callback used for associations; receives the model type
            and overrides and returns the created instance
    """

    def __init__(self, provider: Any, creator: Creator) -> None:
        self.provider = provider
        self.creator = creator

    def resolve(self, spec: Any, target: Any = None, provider: Any = None) -> Any:
        """
        Turn a kind specification into a concrete value.

        Args:
            spec: Kind object or shorthand
            target: Instance being populated (read by computed and call kinds)
            provider: Random data provider to use instead of the resolver's own

        Returns:
            Generated value
        """
        kind = detect(spec)
        provider = self.provider if provider is None else provider

        if isinstance(kind, Literal):
            return kind.value

        if isinstance(kind, Computed):
            return kind.fn(target)

        if isinstance(kind, Association):
            return self._resolve_association(kind)

        if isinstance(kind, Call):
            return self._resolve_call(kind, target)

        return self._resolve_generator(kind, provider)

    def _resolve_association(self, kind: Association) -> Any:
        if not kind.model:
            raise FixtureMillError("An association kind needs a model type, e.g. 'factory|User'.")

        logger.debug("Creating associated %s", kind.model)
        obj = self.creator(kind.model, dict(kind.overrides))
        if kind.attribute:
            return getattr(obj, kind.attribute)
        return obj

    def _resolve_call(self, kind: Call, target: Any) -> Any:
        if target is None:
            raise FixtureMillError(
                f"The call kind '{kind.method}' needs a target instance to find its model type."
            )

        model = target if isinstance(target, type) else type(target)
        method = getattr(model, kind.method, None)
        if kind.method.startswith("_") or method is None or not callable(method):
            raise MethodNotFoundError(model, kind.method)

        return method(*kind.args)

    def _resolve_generator(self, kind: Generator, provider: Any) -> Any:
        name = kind.name
        if not name or name.startswith("_") or name in PROVIDER_CONTROL_METHODS:
            raise UnknownGeneratorError(name)

        # Faker's proxy raises TypeError for some class-level attributes
        try:
            method = getattr(provider, name)
        except (AttributeError, TypeError):
            raise UnknownGeneratorError(name) from None

        if not callable(method):
            raise UnknownGeneratorError(name)

        return method(*kind.args, **dict(kind.kwargs))
