"""Factory definition file loading.

Definition files are plain Python modules that register blueprints as a
side effect of being executed::

    # factories/users.py
    from fixturemill import define

    from myapp.models import Team, User

    define(Team, {"name": "company"})
    define(User, {
        "name": "name",
        "email": "email",
        "team": "factory|Team",
    })

While ``load_factories`` runs, the module-level ``define`` registers on
the engine doing the loading. Each file is executed at most once per
engine.
"""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import sys
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .errors import DirectoryNotFoundError, FixtureMillError

if TYPE_CHECKING:
    from fixturemill.engine import FactoryEngine

logger = logging.getLogger(__name__)

DEFINITION_SUFFIX = ".py"
MODULE_NAMESPACE = "fixturemill_definitions"

# Engine currently executing definition files, if any
loading_engine: ContextVar[FactoryEngine | None] = ContextVar("loading_engine", default=None)


@contextmanager
def loading_into(engine: FactoryEngine) -> Iterator[None]:
    """Route module-level ``define`` calls to ``engine`` for the duration."""
    token = loading_engine.set(engine)
    try:
        yield
    finally:
        loading_engine.reset(token)


def define(model: type | str, blueprint: Mapping[str, Any] | None = None) -> type:
    """Register a blueprint on the engine that is loading the current file.

    Raises:
        FixtureMillError: If called outside ``load_factories``
    """
    engine = loading_engine.get()
    if engine is None:
        raise FixtureMillError(
            "define() was called outside of load_factories(); "
            "call define() on a FactoryEngine instead."
        )
    return engine.define(model, blueprint)


def discover_definition_files(directory: Path) -> list[Path]:
    """List definition files below ``directory``, recursively and sorted.

    Files and directories whose names start with ``_`` are skipped, which
    also leaves out ``__init__.py`` and ``__pycache__``.
    """
    files: list[Path] = []
    for path in sorted(directory.rglob(f"*{DEFINITION_SUFFIX}")):
        relative = path.relative_to(directory)
        if any(part.startswith("_") for part in relative.parts):
            continue
        if path.is_file():
            files.append(path)
    return files


def _module_name(path: Path) -> str:
    digest = hashlib.sha1(str(path).encode("utf-8"), usedforsecurity=False).hexdigest()[:12]
    return f"{MODULE_NAMESPACE}.{path.stem}_{digest}"


def execute_definition_file(path: Path) -> None:
    """Execute one definition file as a fresh module.

    Exceptions raised by the file propagate to the caller.
    """
    module_name = _module_name(path)
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise FixtureMillError(f"Cannot load factory definitions from '{path}'.")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module

    try:
        spec.loader.exec_module(module)
    except BaseException:
        del sys.modules[module_name]
        raise


def load_definition_paths(
    engine: FactoryEngine,
    paths: str | Path | Iterable[str | Path],
    loaded: set[Path],
) -> list[Path]:
    """
    Execute every definition file below each path into ``engine``.

    Args:
        engine: Engine that receives the ``define`` calls
        paths: One directory or several
        loaded: Files already executed for this engine; updated in place

    Returns:
        Files executed by this call

    Raises:
        DirectoryNotFoundError: If a path is not a directory
    """
    if isinstance(paths, str | Path):
        paths = [paths]

    executed: list[Path] = []
    with loading_into(engine):
        for raw_path in paths:
            directory = Path(raw_path)
            if not directory.is_dir():
                raise DirectoryNotFoundError(raw_path)

            for file_path in discover_definition_files(directory):
                resolved = file_path.resolve()
                if resolved in loaded:
                    continue
                logger.debug("Loading factory definitions from %s", file_path)
                execute_definition_file(resolved)
                loaded.add(resolved)
                executed.append(resolved)

    return executed
