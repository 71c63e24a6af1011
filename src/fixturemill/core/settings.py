"""
Engine configuration for fixturemill.

Settings come from, in order of precedence:
    1. Arguments passed to ``FactoryEngine``
    2. ``FIXTUREMILL_*`` environment variables (see ``load_settings``)
    3. The defaults below

Environment variables:
    FIXTUREMILL_SAVE_METHOD: Name of the zero-argument save method (default: save)
    FIXTUREMILL_DELETE_METHOD: Name of the zero-argument delete method (default: delete)
    FIXTUREMILL_LOCALE: Faker locale code (default: en_US)
    FIXTUREMILL_SEED: Integer seed for reproducible generated values (default: unset)

Usage:
    from fixturemill.core.settings import load_settings

    settings = load_settings()
    engine = FactoryEngine(settings=settings, locale="de_DE")
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from faker.config import AVAILABLE_LOCALES
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import SettingsError

DEFAULT_SAVE_METHOD = "save"
DEFAULT_DELETE_METHOD = "delete"
DEFAULT_LOCALE = "en_US"

ENV_PREFIX = "FIXTUREMILL_"


class EngineSettings(BaseModel):
    """Settings for a single factory engine.

    Attributes:
        save_method: Method invoked on an instance by ``create``
        delete_method: Method invoked on each saved instance by ``delete_saved``
        locale: Locale code passed to Faker
        seed: Optional seed for the Faker instance
    """

    save_method: str = DEFAULT_SAVE_METHOD
    delete_method: str = DEFAULT_DELETE_METHOD
    locale: str = DEFAULT_LOCALE
    seed: int | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("save_method", "delete_method")
    @classmethod
    def _method_is_identifier(cls, value: str) -> str:
        value = value.strip()
        if not value.isidentifier():
            raise ValueError(f"'{value}' is not a valid method name")
        return value

    @field_validator("locale")
    @classmethod
    def _locale_is_available(cls, value: str) -> str:
        value = value.strip().replace("-", "_")
        if not value:
            raise ValueError("locale must not be empty")
        if value not in AVAILABLE_LOCALES:
            raise ValueError(f"'{value}' is not a locale Faker provides")
        return value


def update_settings(settings: EngineSettings, **changes: object) -> EngineSettings:
    """Return a validated copy of ``settings`` with ``changes`` applied.

    ``None`` values in ``changes`` are ignored so callers can pass optional
    arguments straight through.
    """
    data = settings.model_dump()
    data.update({k: v for k, v in changes.items() if v is not None})
    try:
        return EngineSettings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid fixturemill settings: {e}") from e


def load_settings(environ: Mapping[str, str] | None = None) -> EngineSettings:
    """Build settings from ``FIXTUREMILL_*`` environment variables.

    Args:
        environ: Mapping to read instead of ``os.environ``

    Returns:
        Validated EngineSettings

    Raises:
        SettingsError: If any variable holds an invalid value
    """
    env = os.environ if environ is None else environ
    values: dict[str, str] = {}

    for field_name in EngineSettings.model_fields:
        raw = env.get(ENV_PREFIX + field_name.upper())
        if raw is not None and raw.strip() != "":
            values[field_name] = raw

    try:
        return EngineSettings.model_validate(values)
    except ValidationError as e:
        raise SettingsError(f"Invalid fixturemill settings: {e}") from e
