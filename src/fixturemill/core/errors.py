"""
Error types for fixturemill factory definition, resolution, and persistence.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


def describe_model(model: Any) -> str:
    """Return a readable name for a model type, class name string, or instance."""
    if isinstance(model, str):
        return model
    cls = model if isinstance(model, type) else type(model)
    return f"{cls.__module__}.{cls.__qualname__}"


class FixtureMillError(Exception):
    """Base exception for all fixturemill errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SettingsError(FixtureMillError):
    """
    Raised when engine settings cannot be built.

    Examples:
    - FIXTUREMILL_SEED is not an integer
    - A configured save/delete method is not a valid identifier
    """

    pass


class ModelError(FixtureMillError):
    """Base for errors that concern a single model type."""

    def __init__(self, model: Any, message: str):
        self.model = describe_model(model)
        super().__init__(message)


class NoDefinedFactoryError(ModelError):
    """Raised when no blueprint was registered for a model type."""

    def __init__(self, model: Any, message: str | None = None):
        if not message:
            message = f"No factory class was defined for the model of type: '{describe_model(model)}'."
        super().__init__(model, message)


class MethodNotFoundError(ModelError):
    """
    Raised when a method needed by a kind or convention is missing on a model.

    The bare class is used for ``call|`` kinds, which look the method up
    on the model type itself.
    """

    def __init__(self, model: Any, method: str, message: str | None = None):
        self.method = method
        if not message:
            message = (
                f"The static method '{method}' was not found on the model of type: "
                f"'{describe_model(model)}'."
            )
        super().__init__(model, message)


class SaveMethodNotFoundError(MethodNotFoundError):
    """Raised when an instance has no save convention method."""

    def __init__(self, obj: Any, method: str, message: str | None = None):
        self.object = obj
        if not message:
            message = (
                f"The save method '{method}' was not found on the model of type: "
                f"'{describe_model(obj)}'."
            )
        super().__init__(obj, method, message)


class DeleteMethodNotFoundError(MethodNotFoundError):
    """Raised when a saved instance has no delete convention method."""

    def __init__(self, obj: Any, method: str, message: str | None = None):
        self.object = obj
        if not message:
            message = (
                f"The delete method '{method}' was not found on the model of type: "
                f"'{describe_model(obj)}'."
            )
        super().__init__(obj, method, message)


class SaveFailedError(ModelError):
    """
    Raised when the save convention ran but reported failure.

    Attributes:
        validation_errors: Detail exposed by the instance, if any
    """

    def __init__(self, model: Any, validation_errors: Any = None, message: str | None = None):
        self.validation_errors = validation_errors
        if not message:
            message = f"We could not save the model of type: '{describe_model(model)}'."
            if validation_errors:
                message += f" {validation_errors}"
        super().__init__(model, message)


class UnknownGeneratorError(FixtureMillError):
    """Raised when a generator kind names a method the provider does not have."""

    def __init__(self, name: str, message: str | None = None):
        self.name = name
        if not message:
            message = f"The kind '{name}' is not a known generator on the random data provider."
        super().__init__(message)


class AggregateDeleteError(FixtureMillError):
    """
    Raised by teardown when one or more saved instances could not be deleted.

    Attributes:
        errors: Every underlying failure, in the order teardown hit them
    """

    def __init__(self, errors: list[Exception], message: str | None = None):
        self.errors = list(errors)
        if not message:
            count = len(self.errors)
            noun = "error" if count == 1 else "errors"
            details = "\n".join(f"- {type(e).__name__}: {e}" for e in self.errors)
            message = f"We encountered {count} {noun} while trying to delete saved objects.\n{details}"
        super().__init__(message)


class DirectoryNotFoundError(FixtureMillError):
    """Raised when a factory definition path is not a directory."""

    def __init__(self, path: str | Path, message: str | None = None):
        self.path = Path(path)
        if not message:
            message = f"The directory '{path}' was not found."
        super().__init__(message)
