"""
fixturemill command line interface.

Inspect factory definition directories and preview generated attributes
without writing a test.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fixturemill._version import __version__
from fixturemill.core.errors import AggregateDeleteError, FixtureMillError
from fixturemill.core.kinds import detect
from fixturemill.core.registry import qualified_name
from fixturemill.core.settings import load_settings
from fixturemill.engine import FactoryEngine

app = typer.Typer(
    help="fixturemill - declarative test fixture factories",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

PathsArgument = Annotated[
    list[Path],
    typer.Argument(help="Directories containing factory definition files"),
]
PythonPathOption = Annotated[
    Path,
    typer.Option(
        "--pythonpath",
        help="Directory added to sys.path so definition files can import your models",
    ),
]


@app.callback()
def main_callback(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug logging")
    ] = False,
) -> None:
    """fixturemill CLI main callback for global options."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _build_engine(
    paths: list[Path],
    pythonpath: Path,
    locale: str | None = None,
    seed: int | None = None,
) -> FactoryEngine:
    root = str(pythonpath.resolve())
    if root not in sys.path:
        sys.path.insert(0, root)

    try:
        engine = FactoryEngine(load_settings(), locale=locale, seed=seed)
        engine.load_factories(paths)
    except FixtureMillError as e:
        err_console.print(f"[red]Error:[/red] {escape(e.message)}", soft_wrap=True)
        raise typer.Exit(code=1) from e
    return engine


def _describe_kind(spec: Any) -> tuple[str, str]:
    kind = detect(spec)
    fields = getattr(kind, "__dataclass_fields__", {})
    detail = ", ".join(
        f"{name}={getattr(kind, name)!r}" for name in fields if getattr(kind, name) not in ((), {}, None)
    )
    return str(kind.kind_type), detail


@app.command("inspect")
def inspect_factories(
    paths: PathsArgument,
    pythonpath: PythonPathOption = Path("."),
) -> None:
    """List every defined factory and how each attribute is generated."""
    engine = _build_engine(paths, pythonpath)

    if not engine.registry.models():
        console.print("[yellow]No factories defined.[/yellow]")
        return

    table = Table(title="Factories")
    table.add_column("Model", style="cyan")
    table.add_column("Attribute", style="bold")
    table.add_column("Kind", style="green")
    table.add_column("Detail")

    for model in engine.registry.models():
        blueprint = engine.registry.get(model)
        if not blueprint:
            table.add_row(qualified_name(model), "-", "-", "")
            continue
        for index, (name, spec) in enumerate(blueprint.items()):
            kind_type, detail = _describe_kind(spec)
            table.add_row(qualified_name(model) if index == 0 else "", name, kind_type, detail)

    console.print(table)


@app.command("preview")
def preview(
    paths: PathsArgument,
    model: Annotated[str, typer.Option("--model", "-m", help="Model class name to preview")],
    count: Annotated[int, typer.Option("--count", "-n", min=1, help="Number of samples")] = 1,
    locale: Annotated[str | None, typer.Option("--locale", help="Faker locale")] = None,
    seed: Annotated[int | None, typer.Option("--seed", help="Seed for reproducible output")] = None,
    pythonpath: PythonPathOption = Path("."),
) -> None:
    """Print generated attributes for a model as JSON.

    Associated models are created to fill association kinds and deleted
    again before the command exits.
    """
    engine = _build_engine(paths, pythonpath, locale=locale, seed=seed)

    try:
        samples = [engine.attributes_for(model) for _ in range(count)]
    except FixtureMillError as e:
        err_console.print(f"[red]Error:[/red] {escape(e.message)}", soft_wrap=True)
        raise typer.Exit(code=1) from e
    finally:
        try:
            engine.delete_saved()
        except AggregateDeleteError as e:
            err_console.print(f"[yellow]Warning:[/yellow] {escape(e.message)}", soft_wrap=True)

    console.print_json(json.dumps(samples if count > 1 else samples[0], default=str))


@app.command("version")
def version() -> None:
    """Show the fixturemill version."""
    console.print(f"fixturemill {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
